"""mergebot entry point.

Runs inside a GitHub Actions job triggered by ``issue_comment``: reads the
event from GITHUB_EVENT_PATH, runs the merge pipeline once and writes the
job outputs. Usage: mergebot [run] [--config PATH] [--event-path PATH].
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Mapping

from mergebot import comments
from mergebot.adapters.github import GitHubAdapter
from mergebot.config import ConfigError, load_config
from mergebot.event import build_event_context, load_event_payload
from mergebot.logging import MergebotLogging
from mergebot.models import ActionResult, Outcome
from mergebot.services.pipeline import run_merge_pipeline


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI with optional ``run`` subcommand."""
    argv = argv if argv is not None else sys.argv[1:]
    rest = list(argv)
    if rest and rest[0] == "run":
        rest = rest[1:]

    parser = argparse.ArgumentParser(
        prog="mergebot",
        description="mergebot - merge a pull request on /mergebot merge",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=Path("config.yaml"),
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--event-path",
        type=Path,
        default=None,
        help="Path to the event payload JSON (default: $GITHUB_EVENT_PATH)",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Only load and validate config, then exit",
    )
    return parser.parse_args(rest)


def _append(path: str | None, text: str) -> None:
    if not path:
        return
    with open(path, "a", encoding="utf-8") as fh:
        fh.write(text)


def write_outputs(result: ActionResult, env: Mapping[str, str]) -> None:
    """Write ``result`` and ``merge_method`` to the GITHUB_OUTPUT file."""
    lines = f"result={result.status.value}\n"
    if result.merge_method:
        lines += f"merge_method={result.merge_method.value}\n"
    _append(env.get("GITHUB_OUTPUT"), lines)


def write_summary(result: ActionResult, pr_number: int, actor: str, env: Mapping[str, str]) -> None:
    merge_method = result.merge_method.value if result.merge_method else None
    _append(env.get("GITHUB_STEP_SUMMARY"), comments.summary_markdown(result.status, pr_number, actor, merge_method))


def main(argv: list[str] | None = None) -> int:
    """Entry point: load config, run the pipeline for the triggering comment."""
    args = parse_args(argv)
    env = dict(os.environ)

    config_path = args.config
    if not config_path.is_file() and config_path == Path("config.yaml"):
        if Path("config.example.yaml").is_file():
            config_path = Path("config.example.yaml")

    try:
        config = load_config(config_path, env=env)
    except ConfigError as e:
        logging.basicConfig(level=logging.INFO)
        logging.getLogger("mergebot").error("Invalid configuration: %s", e)
        return 1

    MergebotLogging(config.logging, env).setup()
    logger = logging.getLogger("mergebot")

    if args.check:
        print("Config OK:", config.merge.develop_branch, config.merge.mergeable_retry_count)
        return 0

    token = config.github_token_resolved
    if not token:
        logger.error("No GitHub token: set GITHUB_TOKEN or GITHUB_TOKEN_FILE")
        return 1

    event_path = args.event_path or (Path(env["GITHUB_EVENT_PATH"]) if env.get("GITHUB_EVENT_PATH") else None)
    try:
        event = build_event_context(load_event_payload(event_path), env, server_url=config.github.server_url)
        adapter = GitHubAdapter(token=token, api_url=config.github.api_url)
        result = run_merge_pipeline(adapter, event, config.merge, log=logging.getLogger("mergebot.pipeline"))
    except Exception as e:
        logger.exception("Fatal error: %s", e)
        write_outputs(ActionResult(status=Outcome.FAILED, message=f"Fatal error: {e}"), env)
        return 1

    write_outputs(result, env)
    write_summary(result, event.pr_number, event.actor, env)
    logger.info("mergebot result: %s - %s", result.status.value, result.message)
    if result.status == Outcome.FAILED:
        # Failures are reported on the PR; the job itself still succeeds
        logger.info("Merge checks or operation failed. See PR comments for details.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
