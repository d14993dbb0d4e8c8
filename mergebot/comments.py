"""Markdown for the status comments mergebot posts on pull requests."""

from typing import Sequence

from mergebot.models import CheckResult, MergeMethodDecision, Outcome
from mergebot.services.executor import AbortReason, MergeExecution

ICON_PASSED = "✅"
ICON_WARNING = "⚠️"
ICON_FAILED = "❌"

COMMAND = "/mergebot merge"

RESULT_LABELS = {
    Outcome.MERGED: "✅ Merged successfully",
    Outcome.SKIPPED: "⏭️ Skipped",
    Outcome.FAILED: "❌ Failed",
    Outcome.ALREADY_MERGED: "ℹ️ Already merged",
}


def check_icon(check: CheckResult) -> str:
    if check.passed:
        return ICON_PASSED
    return ICON_WARNING if check.optional else ICON_FAILED


def render_checks(checks: Sequence[CheckResult]) -> str:
    """One ``- <icon> <name> (<details>)`` line per check."""
    lines = []
    for check in checks:
        detail = f" ({check.details})" if check.details else ""
        lines.append(f"- {check_icon(check)} {check.name}{detail}")
    return "\n".join(lines)


def _quote(lines: Sequence[str]) -> str:
    return "\n".join(f"> {line}" if line else ">" for line in lines)


def _merge_method_section(decision: MergeMethodDecision) -> str:
    return f"### Merge Method\n\n- **Method:** `{decision.method.value}`\n- **Reason:** {decision.reason}"


def unrecognized_command(comment_url: str) -> str:
    return "## Unrecognized command\n\n" + _quote(
        [
            "[!NOTE]",
            "I'm mergebot. I couldn't recognize that command. If it was for me, please check the format.",
            "",
            f"Comment: {comment_url}",
        ]
    )


def invalid_association(association: str) -> str:
    return "## Permission denied\n\n" + _quote(
        [
            "[!CAUTION]",
            f"Only repository owners, members, and collaborators can use the `{COMMAND}` command.",
            "",
            f"Your association: `{association}`",
        ]
    )


def insufficient_permission(association: str, permission: str) -> str:
    return "## Permission denied\n\n" + _quote(
        [
            "[!CAUTION]",
            f"You need at least **write** permission on this repository to use the `{COMMAND}` command.",
            "",
            f"Your association: `{association}`",
            f"Your permission level: `{permission}`",
        ]
    )


def fork_not_supported() -> str:
    return "## Fork PR not supported\n\n" + _quote(
        [
            "[!WARNING]",
            f"The `{COMMAND}` command is not supported for PRs from forked repositories.",
            "",
            "This is because the GITHUB_TOKEN has limited write permissions for fork-originated PRs by default.",
        ]
    )


def already_merged() -> str:
    return "## Already merged\n\nThis PR has already been merged."


def dismissal_failures(failures: Sequence[str]) -> str:
    return "## Stale approval dismiss failures\n\n" + _quote(
        [
            "[!WARNING]",
            "The following approvals could not be dismissed (consider enabling "
            '"Dismiss stale pull request approvals when new commits are pushed" in branch protection settings):',
            "",
            *failures,
        ]
    )


def checks_failed(checks: Sequence[CheckResult], decision: MergeMethodDecision) -> str:
    return (
        "## Merge checks failed\n\nThe following checks must pass before merging:\n\n"
        f"{render_checks(checks)}\n\n{_merge_method_section(decision)}"
    )


def checks_passed(checks: Sequence[CheckResult], decision: MergeMethodDecision) -> str:
    return (
        "## Merge checks passed\n\nAll checks passed. Proceeding to merge...\n\n"
        f"{render_checks(checks)}\n\n{_merge_method_section(decision)}"
    )


def execution_aborted(execution: MergeExecution, retry_count: int, retry_interval: int) -> str:
    """Comment explaining why the executor stopped before or at the merge call."""
    reason = execution.abort_reason
    snapshot = execution.snapshot
    if reason in (AbortReason.HEAD_CHANGED, AbortReason.HEAD_CHANGED_DURING_RETRY):
        when = " (after waiting for mergeable status)" if reason == AbortReason.HEAD_CHANGED_DURING_RETRY else ""
        return "## New commits detected\n\n" + _quote(
            [
                "[!WARNING]",
                f"New commits were pushed while validating this PR{when}.",
                "",
                f"- Original HEAD SHA: {execution.original_head_sha}",
                f"- Current HEAD SHA: {snapshot.head_sha}",
                "",
                f"Please run `{COMMAND}` again after the new commits are reviewed and approved.",
            ]
        )
    if reason == AbortReason.MERGEABILITY_PENDING:
        return "## Mergeability status pending\n\n" + _quote(
            [
                "[!NOTE]",
                "GitHub is still calculating mergeability for this PR.",
                "",
                "- Mergeable: `null`",
                f"- Mergeable State: `{snapshot.mergeable_state}`",
                f"- Retries: count={retry_count}, interval={retry_interval}s",
                "",
                f"Please try `{COMMAND}` again shortly.",
            ]
        )
    if reason == AbortReason.MERGE_FAILED:
        return "## Merge failed\n\n" + _quote(
            [
                "[!CAUTION]",
                "Failed to merge PR:",
                "",
                f"- Error: {execution.error}",
                "",
                "Please check the PR status and try again.",
            ]
        )
    mergeable = snapshot.mergeable.value
    if reason == AbortReason.CONFLICTS:
        return "## Conflicts detected\n\n" + _quote(
            [
                "[!CAUTION]",
                "This PR has merge conflicts that must be resolved before merging.",
                "",
                f"- Mergeable: `{mergeable}`",
                f"- Mergeable State: `{snapshot.mergeable_state}`",
                "",
                "Please resolve the conflicts and try again.",
            ]
        )
    return "## Cannot merge\n\n" + _quote(
        [
            "[!CAUTION]",
            "This PR cannot be merged:",
            "",
            f"- Mergeable: `{mergeable}`",
            f"- Mergeable State: `{snapshot.mergeable_state}`",
            "",
            "Please resolve any conflicts or issues before attempting to merge.",
        ]
    )


def merged(execution: MergeExecution, decision: MergeMethodDecision) -> str:
    snapshot = execution.snapshot
    lines = [
        "## Merged by mergebot",
        "",
        "This PR has been successfully merged.",
        "",
        "### Details",
        "",
        f"- **Merge Method:** `{decision.method.value}`",
        f"- **Base Branch:** `{snapshot.base_ref}`",
        f"- **Head Branch:** `{snapshot.head_ref}`",
        f"- **HEAD SHA:** {execution.original_head_sha}",
    ]
    if execution.merge_commit_sha:
        lines.append(f"- **Merge Commit SHA:** {execution.merge_commit_sha}")
    return "\n".join(lines)


def summary_markdown(status: Outcome, pr_number: int, actor: str, merge_method: str | None = None) -> str:
    """Job summary table written to GITHUB_STEP_SUMMARY."""
    summary = "## mergebot Summary\n\n"
    summary += "| Item | Value |\n"
    summary += "|------|-------|\n"
    summary += f"| **Result** | {RESULT_LABELS[status]} |\n"
    summary += f"| **PR** | #{pr_number} |\n"
    summary += f"| **Triggered by** | @{actor} |\n"
    if merge_method:
        summary += f"| **Merge Method** | `{merge_method}` |\n"
    return summary
