"""Tests for the mergebot CLI entry point."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from mergebot.main import main, parse_args, write_outputs
from mergebot.models import ActionResult, MergeMethod, Outcome


@pytest.fixture
def action_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> dict[str, Path]:
    event_path = tmp_path / "event.json"
    event_path.write_text(
        json.dumps(
            {
                "issue": {"number": 42, "pull_request": {"url": "https://api.github.com/repos/owner/repo/pulls/42"}},
                "comment": {
                    "id": 1001,
                    "body": "/mergebot merge",
                    "author_association": "MEMBER",
                    "user": {"login": "maintainer", "type": "User"},
                },
            }
        )
    )
    paths = {
        "event": event_path,
        "output": tmp_path / "output",
        "summary": tmp_path / "summary.md",
        "config": tmp_path / "config.yaml",
    }
    paths["config"].write_text("merge:\n  mergeable_retry_count: 2\n")
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.delenv("GITHUB_TOKEN_FILE", raising=False)
    monkeypatch.delenv("GITHUB_API_URL", raising=False)
    monkeypatch.delenv("GITHUB_SERVER_URL", raising=False)
    monkeypatch.setenv("GITHUB_EVENT_PATH", str(event_path))
    monkeypatch.setenv("GITHUB_REPOSITORY", "owner/repo")
    monkeypatch.setenv("GITHUB_ACTOR", "maintainer")
    monkeypatch.setenv("GITHUB_EVENT_NAME", "issue_comment")
    monkeypatch.setenv("GITHUB_OUTPUT", str(paths["output"]))
    monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(paths["summary"]))
    return paths


def test_parse_args_defaults() -> None:
    """Defaults: config.yaml, no event path, no --check."""
    args = parse_args([])
    assert args.config == Path("config.yaml")
    assert args.event_path is None
    assert args.check is False


def test_parse_args_run_subcommand() -> None:
    """The optional run subcommand is accepted."""
    args = parse_args(["run", "-c", "custom.yaml", "--event-path", "e.json"])
    assert args.config == Path("custom.yaml")
    assert args.event_path == Path("e.json")


def test_write_outputs(tmp_path: Path) -> None:
    """result and merge_method are appended to GITHUB_OUTPUT."""
    out = tmp_path / "out"
    result = ActionResult(status=Outcome.MERGED, message="ok", merge_method=MergeMethod.SQUASH)
    write_outputs(result, {"GITHUB_OUTPUT": str(out)})
    assert out.read_text() == "result=merged\nmerge_method=squash\n"


def test_write_outputs_without_target_is_noop() -> None:
    """Nothing is written when GITHUB_OUTPUT is unset."""
    write_outputs(ActionResult(status=Outcome.SKIPPED, message="skip"), {})


def test_invalid_config_exits_1(tmp_path: Path) -> None:
    """An out-of-range config value exits 1."""
    config = tmp_path / "config.yaml"
    config.write_text("merge:\n  mergeable_retry_interval: 90\n")
    assert main(["--config", str(config), "--check"]) == 1


def test_missing_token_exits_1(action_env: dict[str, Path], monkeypatch: pytest.MonkeyPatch) -> None:
    """Without a token the pipeline never runs."""
    monkeypatch.delenv("GITHUB_TOKEN")
    with patch("mergebot.main.run_merge_pipeline") as run:
        assert main(["--config", str(action_env["config"])]) == 1
    run.assert_not_called()


def test_run_writes_outputs_and_summary(action_env: dict[str, Path]) -> None:
    """A run writes job outputs and the summary table."""
    result = ActionResult(status=Outcome.MERGED, message="PR merged successfully", merge_method=MergeMethod.SQUASH)
    with (
        patch("mergebot.main.GitHubAdapter") as adapter_cls,
        patch("mergebot.main.run_merge_pipeline", return_value=result) as run,
    ):
        assert main(["run", "--config", str(action_env["config"])]) == 0

    adapter_cls.assert_called_once_with(token="test-token", api_url="https://api.github.com")
    _, event, merge_config = run.call_args[0]
    assert event.repository == "owner/repo"
    assert event.pr_number == 42
    assert event.is_pull_request is True
    assert merge_config.mergeable_retry_count == 2
    assert action_env["output"].read_text() == "result=merged\nmerge_method=squash\n"
    summary = action_env["summary"].read_text()
    assert "| **PR** | #42 |" in summary
    assert "| **Triggered by** | @maintainer |" in summary


def test_failed_result_still_exits_0(action_env: dict[str, Path]) -> None:
    """A failed merge is reported but the job succeeds."""
    result = ActionResult(status=Outcome.FAILED, message="Merge checks failed", merge_method=MergeMethod.SQUASH)
    with patch("mergebot.main.GitHubAdapter"), patch("mergebot.main.run_merge_pipeline", return_value=result):
        assert main(["--config", str(action_env["config"])]) == 0
    assert "result=failed" in action_env["output"].read_text()


def test_unexpected_error_exits_1_with_failed_output(
    action_env: dict[str, Path], caplog: pytest.LogCaptureFixture
) -> None:
    """An exception escaping the pipeline is logged, reported as failed and exits 1."""
    with (
        patch("mergebot.main.MergebotLogging"),
        patch("mergebot.main.GitHubAdapter"),
        patch("mergebot.main.run_merge_pipeline", side_effect=RuntimeError("boom")),
    ):
        assert main(["--config", str(action_env["config"])]) == 1

    fatal = [r for r in caplog.records if r.getMessage() == "Fatal error: boom"]
    assert fatal and fatal[0].exc_info is not None
    assert action_env["output"].read_text() == "result=failed\n"
