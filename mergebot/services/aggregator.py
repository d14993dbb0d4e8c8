"""Assemble the merge checklist and the pass/fail gate."""

from typing import List

from pydantic import BaseModel, ConfigDict

from mergebot.command import OVERRIDE_APPROVAL_FLAG
from mergebot.models import ApprovalTally, CheckResult, MergeCommand, PullRequestSnapshot
from mergebot.services.checks import check_pr_readiness, mergeable_state_description

THREADS_CHECK_NAME = "All review conversations are resolved"
APPROVAL_CHECK_NAME = "At least one valid approval from another user"
MERGEABLE_STATE_CHECK_NAME = "Mergeable state is clean"
CONVENTIONAL_TITLE_CHECK_NAME = "PR title follows [Conventional Commits](https://www.conventionalcommits.org/)"


class CheckReport(BaseModel):
    """Ordered checklist plus whether the approval override took effect."""

    model_config = ConfigDict(frozen=True)

    checks: List[CheckResult]
    approval_overridden: bool = False

    @property
    def passed(self) -> bool:
        return gate_passed(self.checks)


def gate_passed(checks: List[CheckResult]) -> bool:
    """True when every required (non-optional) check passed."""
    return all(check.passed for check in checks if not check.optional)


def approval_check(tally: ApprovalTally, command: MergeCommand) -> tuple[CheckResult, bool]:
    """Build the approval check; the second value tells if the override applied.

    The override only matters when there is no valid approval. With an
    approval in place the flag is inert and the check stays required.
    """
    passed = tally.valid_approvals >= 1
    overridden = command.override_approval_requirement and not passed
    if passed:
        details = None
    elif overridden:
        details = f"approval requirement overridden by `{OVERRIDE_APPROVAL_FLAG}`; no valid approvals found"
    else:
        details = "no valid approvals found"
    check = CheckResult(name=APPROVAL_CHECK_NAME, passed=passed, details=details, optional=overridden)
    return check, overridden


def build_checks(
    snapshot: PullRequestSnapshot,
    unresolved_threads: int,
    tally: ApprovalTally,
    conventional_title: bool,
    command: MergeCommand,
) -> CheckReport:
    """Readiness, conversations, approval, mergeable state, title (always optional)."""
    threads = CheckResult(
        name=THREADS_CHECK_NAME,
        passed=unresolved_threads == 0,
        details=f"{unresolved_threads} unresolved" if unresolved_threads > 0 else None,
    )
    approval, overridden = approval_check(tally, command)
    clean = snapshot.mergeable_state == "clean"
    mergeable_state = CheckResult(
        name=MERGEABLE_STATE_CHECK_NAME,
        passed=clean,
        details=None if clean else mergeable_state_description(snapshot.mergeable_state),
    )
    title = CheckResult(
        name=CONVENTIONAL_TITLE_CHECK_NAME,
        passed=conventional_title,
        details=None if conventional_title else "title does not follow conventional format",
        optional=True,
    )
    checks = [check_pr_readiness(snapshot), threads, approval, mergeable_state, title]
    return CheckReport(checks=checks, approval_overridden=overridden)
