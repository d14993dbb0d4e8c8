"""
Run one ``/mergebot merge`` request end to end.

1. Filter the event: only human comments on PRs that look like a command.
2. Authorize the commenter (association, then repository permission).
3. Fetch the PR, reject forks and already merged PRs.
4. Build the checklist (readiness, conversations, approvals, mergeable
   state, title) and report it.
5. If the gate passes: pick the merge method, compose the commit message
   and hand over to the executor.

Every path ends in an ActionResult; API errors are turned into a failed
result here and never escape.
"""

import logging
from typing import Callable, List

from mergebot import comments
from mergebot.adapters.base import GitPlatformAdapter, GitPlatformError
from mergebot.command import CommandStatus, looks_like_trigger, parse_command
from mergebot.config import MergeConfig
from mergebot.event import EventContext
from mergebot.models import (
    ActionResult,
    MergeMethod,
    MergeMethodDecision,
    Outcome,
    PullRequestCommit,
    PullRequestSnapshot,
)
from mergebot.services.aggregator import build_checks
from mergebot.services.approvals import PermissionCache, reconcile_approvals
from mergebot.services.checks import has_valid_permission, is_bot, is_conventional_title, is_valid_author
from mergebot.services.commit_message import compose_commit_message
from mergebot.services.executor import AbortReason, MergeExecutor
from mergebot.services.merge_method import resolve_merge_method

EXECUTION_FAILURE_MESSAGES = {
    AbortReason.HEAD_CHANGED: "TOCTOU violation",
    AbortReason.HEAD_CHANGED_DURING_RETRY: "TOCTOU violation during retry",
    AbortReason.MERGEABILITY_PENDING: "Not mergeable",
    AbortReason.CONFLICTS: "Not mergeable",
    AbortReason.NOT_MERGEABLE: "Not mergeable",
}


def _skipped(message: str) -> ActionResult:
    return ActionResult(status=Outcome.SKIPPED, message=message)


def _failed(message: str) -> ActionResult:
    return ActionResult(status=Outcome.FAILED, message=message)


def run_merge_pipeline(
    adapter: GitPlatformAdapter,
    event: EventContext,
    config: MergeConfig,
    sleep: Callable[[float], None] | None = None,
    log: logging.Logger | None = None,
) -> ActionResult:
    """Handle one triggering comment and return the outcome."""
    logger = log or logging.getLogger("mergebot.services.pipeline")
    try:
        return _run(adapter, event, config, sleep, logger)
    except GitPlatformError as e:
        logger.warning("PR #%s: GitHub API error: %s", event.pr_number, e)
        return _failed(f"GitHub API error: {e}")


def _run(
    adapter: GitPlatformAdapter,
    event: EventContext,
    config: MergeConfig,
    sleep: Callable[[float], None] | None,
    logger: logging.Logger,
) -> ActionResult:
    if event.event_name != "issue_comment":
        return _skipped("This action only runs on issue_comment events")
    if not event.is_pull_request:
        return _skipped("Comment is not on a PR, skipping")
    if is_bot(event.user_type):
        return _skipped("Comment is from a bot")
    if not looks_like_trigger(event.comment_body):
        return _skipped("Command not matched")

    repo = event.repository
    pr_number = event.pr_number
    adapter.add_reaction(repo, event.comment_id, "eyes")

    parsed = parse_command(event.comment_body)
    if parsed.status != CommandStatus.MERGE or parsed.command is None:
        adapter.create_comment(repo, pr_number, comments.unrecognized_command(event.comment_url()))
        return _skipped("Command not recognized")
    command = parsed.command

    if not is_valid_author(event.author_association):
        adapter.create_comment(repo, pr_number, comments.invalid_association(event.author_association))
        return _failed("Invalid author association")

    permissions = PermissionCache(adapter, repo)
    permission = permissions.get(event.actor)
    if not has_valid_permission(permission):
        adapter.create_comment(
            repo, pr_number, comments.insufficient_permission(event.author_association, permission)
        )
        return _failed("Insufficient permissions")

    snapshot = adapter.get_pull_request(repo, pr_number)
    if snapshot.is_fork:
        adapter.create_comment(repo, pr_number, comments.fork_not_supported())
        return _failed("Fork PR not supported")
    if snapshot.merged:
        adapter.create_comment(repo, pr_number, comments.already_merged())
        return ActionResult(status=Outcome.ALREADY_MERGED, message="PR already merged")

    unresolved = adapter.count_unresolved_threads(repo, pr_number)
    tally = reconcile_approvals(adapter, repo, snapshot, permissions, log=logger)
    # Posted independently of the checklist comment below
    if tally.dismissal_failures:
        adapter.create_comment(repo, pr_number, comments.dismissal_failures(tally.dismissal_failures))

    report = build_checks(snapshot, unresolved, tally, is_conventional_title(snapshot.title), command)
    if report.approval_overridden:
        logger.info("PR #%s: approval requirement overridden by command flag", pr_number)
    decision = resolve_merge_method(snapshot.head_ref, snapshot.base_ref, config)

    if not report.passed:
        adapter.create_comment(repo, pr_number, comments.checks_failed(report.checks, decision))
        return _failed("Merge checks failed")
    adapter.create_comment(repo, pr_number, comments.checks_passed(report.checks, decision))

    return _merge(adapter, event, config, snapshot, decision, report.approval_overridden, sleep, logger)


def _merge(
    adapter: GitPlatformAdapter,
    event: EventContext,
    config: MergeConfig,
    snapshot: PullRequestSnapshot,
    decision: MergeMethodDecision,
    overridden: bool,
    sleep: Callable[[float], None] | None,
    logger: logging.Logger,
) -> ActionResult:
    repo = event.repository
    commits: List[PullRequestCommit] = []
    if decision.method == MergeMethod.SQUASH:
        commits = adapter.list_pull_request_commits(repo, snapshot.number)
    plan = compose_commit_message(decision.method, snapshot, event.actor, overridden, commits)

    executor = MergeExecutor(
        adapter,
        repo,
        retry_count=config.mergeable_retry_count,
        retry_interval=config.mergeable_retry_interval,
        sleep=sleep,
        log=logger,
    )
    execution = executor.execute(snapshot, decision.method, plan)

    if not execution.merged:
        adapter.create_comment(
            repo,
            snapshot.number,
            comments.execution_aborted(execution, config.mergeable_retry_count, config.mergeable_retry_interval),
        )
        if execution.abort_reason == AbortReason.MERGE_FAILED:
            return _failed(f"Merge failed: {execution.error}")
        return _failed(EXECUTION_FAILURE_MESSAGES[execution.abort_reason])

    adapter.create_comment(repo, snapshot.number, comments.merged(execution, decision))
    logger.info("PR #%s: merged with %s", snapshot.number, decision.method.value)
    return ActionResult(status=Outcome.MERGED, message="PR merged successfully", merge_method=decision.method)
