"""Abstract base for Git platform adapters."""

from abc import ABC, abstractmethod
from typing import List

from mergebot.models import MergeMethod, MergeResult, PullRequestCommit, PullRequestSnapshot, Review


class GitPlatformError(Exception):
    """Raised when a Git platform API call fails."""

    pass


class GitPlatformAdapter(ABC):
    """Operations the merge pipeline needs from a Git hosting platform.

    Most calls raise GitPlatformError on failure. The tolerant ones
    (permission lookup, reaction, review dismissal, merge) report failure
    through their return value instead.
    """

    @abstractmethod
    def get_pull_request(self, repo: str, pr_number: int) -> PullRequestSnapshot:
        """Fetch a fresh snapshot of the PR."""
        ...

    @abstractmethod
    def list_approved_reviews(self, repo: str, pr_number: int) -> List[Review]:
        """List all reviews in state APPROVED (all pages)."""
        ...

    @abstractmethod
    def dismiss_review(self, repo: str, pr_number: int, review_id: int, message: str) -> bool:
        """Dismiss a review. Return False if the host refused."""
        ...

    @abstractmethod
    def list_pull_request_commits(self, repo: str, pr_number: int) -> List[PullRequestCommit]:
        """List PR commits, oldest first (all pages)."""
        ...

    @abstractmethod
    def count_unresolved_threads(self, repo: str, pr_number: int) -> int:
        """Count unresolved review threads, outdated ones included."""
        ...

    @abstractmethod
    def get_collaborator_permission(self, repo: str, username: str) -> str:
        """Return permission level (admin, maintain, write, ...) or "none" on failure."""
        ...

    @abstractmethod
    def create_comment(self, repo: str, issue_number: int, body: str) -> None:
        """Post a comment on an issue or PR."""
        ...

    @abstractmethod
    def add_reaction(self, repo: str, comment_id: int, content: str) -> None:
        """React to an issue comment. Failures are ignored."""
        ...

    @abstractmethod
    def merge_pull_request(
        self,
        repo: str,
        pr_number: int,
        method: MergeMethod,
        sha: str,
        commit_title: str,
        commit_message: str,
    ) -> MergeResult:
        """Merge the PR only if its head is still ``sha``."""
        ...
