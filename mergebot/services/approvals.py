"""Count valid approvals and dismiss approvals left on an old head commit."""

import logging
from typing import Dict, List

from mergebot.adapters.base import GitPlatformAdapter
from mergebot.models import ApprovalTally, PullRequestSnapshot
from mergebot.services.checks import has_valid_permission


class PermissionCache:
    """Permission levels looked up during one pipeline run.

    Created per run and passed explicitly, so a reviewer who approved
    several times costs one API call.
    """

    def __init__(self, adapter: GitPlatformAdapter, repo: str) -> None:
        self._adapter = adapter
        self._repo = repo
        self._levels: Dict[str, str] = {}

    def get(self, username: str) -> str:
        """Return the user's permission level ("none" if the lookup failed)."""
        level = self._levels.get(username)
        if level is None:
            level = self._adapter.get_collaborator_permission(self._repo, username)
            self._levels[username] = level
        return level


def stale_review_message(reviewed_sha: str | None, head_sha: str) -> str:
    return (
        "Approval dismissed: New commits were pushed after this review was submitted "
        f"(reviewed commit: {(reviewed_sha or '')[:7]}, current HEAD: {head_sha[:7]})."
    )


def reconcile_approvals(
    adapter: GitPlatformAdapter,
    repo: str,
    snapshot: PullRequestSnapshot,
    permissions: PermissionCache,
    log: logging.Logger | None = None,
) -> ApprovalTally:
    """Count approvals that still count and dismiss stale ones.

    An approval is valid when the reviewer is not the PR author, has write
    access (checked via the API; ``author_association`` is unreliable for
    app tokens) and reviewed the current head commit. Stale approvals are
    dismissed so branch protection sees the same picture; a failed
    dismissal is recorded, the approval is never counted either way.
    """
    logger = log or logging.getLogger("mergebot.services.approvals")
    valid = 0
    failures: List[str] = []

    for review in adapter.list_approved_reviews(repo, snapshot.number):
        if review.user == snapshot.author:
            continue
        if not review.user:
            # Deleted account
            continue
        if not has_valid_permission(permissions.get(review.user)):
            logger.debug("PR #%s: ignoring approval from %s (insufficient permission)", snapshot.number, review.user)
            continue
        if review.commit_id != snapshot.head_sha:
            message = stale_review_message(review.commit_id, snapshot.head_sha)
            if adapter.dismiss_review(repo, snapshot.number, review.id, message):
                logger.info("PR #%s: dismissed stale approval %s from %s", snapshot.number, review.id, review.user)
            else:
                failures.append(
                    f"- Failed to dismiss approval from @{review.user} "
                    "(insufficient permissions or branch protection settings)"
                )
            continue
        valid += 1

    return ApprovalTally(valid_approvals=valid, dismissal_failures=failures)
