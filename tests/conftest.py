"""Shared fixtures: PR snapshots, events and a mocked GitHub adapter."""

from typing import Any, Callable
from unittest.mock import Mock

import pytest

from mergebot.config import MergeConfig
from mergebot.event import EventContext
from mergebot.models import Mergeable, MergeResult, PullRequestSnapshot

HEAD_SHA = "abc1234def5678"


def make_snapshot(**overrides: Any) -> PullRequestSnapshot:
    data: dict[str, Any] = {
        "number": 42,
        "state": "open",
        "locked": False,
        "draft": False,
        "merged": False,
        "mergeable": Mergeable.MERGEABLE,
        "mergeable_state": "clean",
        "head_sha": HEAD_SHA,
        "head_ref": "feature/login",
        "base_ref": "develop",
        "author": "pr-author",
        "is_fork": False,
        "title": "feat: add login",
    }
    data.update(overrides)
    return PullRequestSnapshot(**data)


def make_event(**overrides: Any) -> EventContext:
    data: dict[str, Any] = {
        "repository": "owner/repo",
        "pr_number": 42,
        "comment_id": 1001,
        "comment_body": "/mergebot merge",
        "actor": "maintainer",
        "user_type": "User",
        "author_association": "MEMBER",
        "server_url": "https://github.com",
        "run_id": 7,
        "event_name": "issue_comment",
        "is_pull_request": True,
    }
    data.update(overrides)
    return EventContext(**data)


@pytest.fixture
def snapshot_factory() -> Callable[..., PullRequestSnapshot]:
    return make_snapshot


@pytest.fixture
def event_factory() -> Callable[..., EventContext]:
    return make_event


@pytest.fixture
def merge_config() -> MergeConfig:
    return MergeConfig(
        release_branch_prefix="release/",
        develop_branch="develop",
        sync_branch_prefix="fix/sync/",
        mergeable_retry_count=5,
        mergeable_retry_interval=10,
    )


@pytest.fixture
def adapter() -> Mock:
    """Adapter where everything passes: writer permission, clean PR, no reviews."""
    mock = Mock()
    mock.get_collaborator_permission.return_value = "write"
    mock.get_pull_request.return_value = make_snapshot()
    mock.count_unresolved_threads.return_value = 0
    mock.list_approved_reviews.return_value = []
    mock.list_pull_request_commits.return_value = []
    mock.dismiss_review.return_value = True
    mock.merge_pull_request.return_value = MergeResult(success=True, merge_commit_sha="merge999")
    return mock
