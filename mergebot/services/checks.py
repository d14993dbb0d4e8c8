"""Side-effect-free predicates used by the merge checklist."""

import re

from mergebot.models import CheckResult, PullRequestSnapshot

# Associations allowed to trigger a merge
VALID_AUTHOR_ASSOCIATIONS = frozenset({"OWNER", "MEMBER", "COLLABORATOR"})

VALID_PERMISSIONS = frozenset({"admin", "maintain", "write"})

# https://www.conventionalcommits.org/ plus the project-specific "ux" type
CONVENTIONAL_COMMIT_TYPES = (
    "build",
    "chore",
    "ci",
    "docs",
    "feat",
    "fix",
    "perf",
    "refactor",
    "revert",
    "style",
    "test",
    "ux",
)

# <type>[(scope)][!]: <description>; scope non-empty and free of "!" and ")"
CONVENTIONAL_COMMIT_RE = re.compile(r"^(" + "|".join(CONVENTIONAL_COMMIT_TYPES) + r")(\([^)!]+\))?!?:\s*\S.*$")

# Only "clean" is treated as mergeable; the wording below reflects that policy
MERGEABLE_STATE_DESCRIPTIONS = {
    "dirty": "has unresolved conflicts",
    "unknown": "mergeability not yet computed; please retry",
    "blocked": "failing or missing required status checks",
    "behind": "head branch is behind base branch",
    "unstable": "optional status checks pending or failing",
    "has_hooks": "repository has custom pre-receive hooks",
    "clean": "ready to merge",
    "draft": "draft PR; not ready for review",
}

READINESS_CHECK_NAME = "PR is ready for review"


def is_bot(user_type: str) -> bool:
    return user_type == "Bot"


def is_valid_author(association: str) -> bool:
    """True if the comment author's association allows the merge command."""
    return association in VALID_AUTHOR_ASSOCIATIONS


def has_valid_permission(permission: str) -> bool:
    """True if the repository permission level allows merging."""
    return permission in VALID_PERMISSIONS


def is_conventional_title(title: str) -> bool:
    """Check a PR title against the Conventional Commits format.

    Examples:
        "feat: add new feature" -> True
        "fix(auth)!: drop legacy login" -> True
        "feat(): empty scope" -> False
        "Update README" -> False
    """
    return CONVENTIONAL_COMMIT_RE.match(title or "") is not None


def mergeable_state_description(state: str) -> str:
    """Human-readable text for a ``mergeable_state`` code."""
    return MERGEABLE_STATE_DESCRIPTIONS.get(state, f"mergeable_state: {state}")


def check_pr_readiness(snapshot: PullRequestSnapshot) -> CheckResult:
    """Open, unlocked and not a draft, reported as one check.

    On failure every applicable reason is listed, in the order
    closed, locked, draft.
    """
    reasons = []
    if snapshot.state != "open":
        reasons.append("currently closed")
    if snapshot.locked:
        reasons.append("currently locked")
    if snapshot.draft:
        reasons.append("currently a draft")
    return CheckResult(
        name=READINESS_CHECK_NAME,
        passed=not reasons,
        details=", ".join(reasons) or None,
    )
