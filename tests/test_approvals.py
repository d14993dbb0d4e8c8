"""Tests for approval reconciliation and the permission cache."""

from unittest.mock import Mock

from mergebot.models import Review
from mergebot.services.approvals import PermissionCache, reconcile_approvals, stale_review_message
from tests.conftest import HEAD_SHA, make_snapshot

OLD_SHA = "0ld5ha0000000"


def _review(review_id: int, user: str | None, commit_id: str | None = HEAD_SHA) -> Review:
    return Review(id=review_id, user=user, state="APPROVED", commit_id=commit_id)


def _adapter(reviews: list[Review], permissions: dict[str, str] | None = None) -> Mock:
    levels = permissions or {}
    adapter = Mock()
    adapter.list_approved_reviews.return_value = reviews
    adapter.get_collaborator_permission.side_effect = lambda repo, user: levels.get(user, "write")
    adapter.dismiss_review.return_value = True
    return adapter


def test_counts_fresh_approval_from_other_user() -> None:
    """An approval on the current head from another writer counts."""
    adapter = _adapter([_review(1, "reviewer")])
    tally = reconcile_approvals(adapter, "owner/repo", make_snapshot(), PermissionCache(adapter, "owner/repo"))
    assert tally.valid_approvals == 1
    assert tally.dismissal_failures == []
    adapter.dismiss_review.assert_not_called()


def test_self_approval_never_counts() -> None:
    """The PR author's own approval is skipped."""
    adapter = _adapter([_review(1, "pr-author")])
    tally = reconcile_approvals(adapter, "owner/repo", make_snapshot(), PermissionCache(adapter, "owner/repo"))
    assert tally.valid_approvals == 0
    adapter.get_collaborator_permission.assert_not_called()


def test_deleted_user_is_skipped() -> None:
    """Approvals from deleted accounts are skipped."""
    adapter = _adapter([_review(1, None)])
    tally = reconcile_approvals(adapter, "owner/repo", make_snapshot(), PermissionCache(adapter, "owner/repo"))
    assert tally.valid_approvals == 0
    adapter.get_collaborator_permission.assert_not_called()


def test_reviewer_without_write_is_ignored() -> None:
    """Reviewers below write permission are ignored."""
    adapter = _adapter([_review(1, "reader", OLD_SHA)], {"reader": "read"})
    tally = reconcile_approvals(adapter, "owner/repo", make_snapshot(), PermissionCache(adapter, "owner/repo"))
    assert tally.valid_approvals == 0
    # Not even dismissed: permission is checked before freshness
    adapter.dismiss_review.assert_not_called()


def test_stale_approval_is_dismissed_and_not_counted() -> None:
    """An approval on an old head is dismissed with both short SHAs."""
    adapter = _adapter([_review(5, "reviewer", OLD_SHA)])
    tally = reconcile_approvals(adapter, "owner/repo", make_snapshot(), PermissionCache(adapter, "owner/repo"))
    assert tally.valid_approvals == 0
    assert tally.dismissal_failures == []
    adapter.dismiss_review.assert_called_once()
    repo, pr_number, review_id, message = adapter.dismiss_review.call_args[0]
    assert (repo, pr_number, review_id) == ("owner/repo", 42, 5)
    assert OLD_SHA[:7] in message
    assert HEAD_SHA[:7] in message


def test_failed_dismissal_is_recorded_and_not_counted() -> None:
    """A failed dismissal is recorded as a failure line."""
    adapter = _adapter([_review(5, "reviewer", OLD_SHA)])
    adapter.dismiss_review.return_value = False
    tally = reconcile_approvals(adapter, "owner/repo", make_snapshot(), PermissionCache(adapter, "owner/repo"))
    assert tally.valid_approvals == 0
    assert len(tally.dismissal_failures) == 1
    assert "@reviewer" in tally.dismissal_failures[0]


def test_permission_looked_up_once_per_reviewer() -> None:
    """Each reviewer's permission is fetched once per run."""
    adapter = _adapter([_review(1, "alice"), _review(2, "alice"), _review(3, "bob")])
    tally = reconcile_approvals(adapter, "owner/repo", make_snapshot(), PermissionCache(adapter, "owner/repo"))
    assert tally.valid_approvals == 3
    looked_up = [c[0][1] for c in adapter.get_collaborator_permission.call_args_list]
    assert looked_up == ["alice", "bob"]


def test_permission_cache_shared_with_actor_lookup() -> None:
    """The actor's cached permission is reused for their review."""
    adapter = _adapter([_review(1, "maintainer")])
    cache = PermissionCache(adapter, "owner/repo")
    assert cache.get("maintainer") == "write"
    reconcile_approvals(adapter, "owner/repo", make_snapshot(), cache)
    adapter.get_collaborator_permission.assert_called_once_with("owner/repo", "maintainer")


def test_stale_review_message_handles_missing_commit() -> None:
    """A review without commit id still yields a message."""
    message = stale_review_message(None, HEAD_SHA)
    assert "reviewed commit: ," in message
    assert HEAD_SHA[:7] in message
