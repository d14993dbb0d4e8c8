"""Merge a validated PR without racing concurrent pushes.

Validating -> AwaitingMergeability -> Merging -> Merged | Aborted

Concurrency control is optimistic: nothing is locked. The head SHA seen
by the checklist is compared with every fresh snapshot, and the merge call
carries it as a precondition so GitHub rejects a last-instant push itself.
The merge call is issued at most once and never retried.
"""

import logging
import time
from enum import Enum
from typing import Callable

from pydantic import BaseModel, ConfigDict

from mergebot.adapters.base import GitPlatformAdapter
from mergebot.models import CommitMessagePlan, Mergeable, MergeMethod, PullRequestSnapshot


class ExecutorState(str, Enum):
    VALIDATING = "validating"
    AWAITING_MERGEABILITY = "awaiting_mergeability"
    MERGING = "merging"
    MERGED = "merged"
    ABORTED = "aborted"


class AbortReason(str, Enum):
    HEAD_CHANGED = "head_changed"
    HEAD_CHANGED_DURING_RETRY = "head_changed_during_retry"
    MERGEABILITY_PENDING = "mergeability_pending"
    CONFLICTS = "conflicts"
    NOT_MERGEABLE = "not_mergeable"
    MERGE_FAILED = "merge_failed"


class MergeExecution(BaseModel):
    """What the executor did, with the last snapshot it saw."""

    model_config = ConfigDict(frozen=True)

    state: ExecutorState
    original_head_sha: str
    snapshot: PullRequestSnapshot
    retries: int = 0
    abort_reason: AbortReason | None = None
    error: str | None = None
    merge_commit_sha: str | None = None

    @property
    def merged(self) -> bool:
        return self.state == ExecutorState.MERGED


def is_ready_to_merge(snapshot: PullRequestSnapshot) -> bool:
    return snapshot.mergeable == Mergeable.MERGEABLE and snapshot.mergeable_state == "clean"


def classify_not_mergeable(snapshot: PullRequestSnapshot) -> AbortReason:
    if snapshot.mergeable == Mergeable.PENDING:
        return AbortReason.MERGEABILITY_PENDING
    if snapshot.mergeable_state == "dirty":
        return AbortReason.CONFLICTS
    return AbortReason.NOT_MERGEABLE


class MergeExecutor:
    """Runs the final merge of one PR; one executor per merge attempt."""

    def __init__(
        self,
        adapter: GitPlatformAdapter,
        repo: str,
        retry_count: int,
        retry_interval: float,
        sleep: Callable[[float], None] | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._adapter = adapter
        self._repo = repo
        self._retry_count = retry_count
        self._retry_interval = retry_interval
        self._sleep = sleep
        self._log = log or logging.getLogger("mergebot.services.executor")
        self._state = ExecutorState.VALIDATING

    @property
    def state(self) -> ExecutorState:
        return self._state

    def _abort(self, original_sha: str, snapshot: PullRequestSnapshot, reason: AbortReason, **kw) -> MergeExecution:
        self._state = ExecutorState.ABORTED
        self._log.info("PR #%s: merge aborted (%s)", snapshot.number, reason.value)
        return MergeExecution(
            state=self._state,
            original_head_sha=original_sha,
            snapshot=snapshot,
            abort_reason=reason,
            **kw,
        )

    def execute(
        self,
        validated: PullRequestSnapshot,
        method: MergeMethod,
        plan: CommitMessagePlan,
    ) -> MergeExecution:
        """Re-check the PR and merge it if nothing changed since ``validated``.

        ``validated`` is the snapshot the checklist was built from. Raises
        GitPlatformError if a snapshot fetch fails; merge call failures are
        returned as an aborted execution.
        """
        if self._state != ExecutorState.VALIDATING:
            raise RuntimeError(f"merge already attempted (state={self._state.value})")

        original_sha = validated.head_sha
        pr_number = validated.number

        snapshot = self._adapter.get_pull_request(self._repo, pr_number)
        if snapshot.head_sha != original_sha:
            return self._abort(original_sha, snapshot, AbortReason.HEAD_CHANGED)

        retries = 0
        if snapshot.mergeable == Mergeable.PENDING:
            self._state = ExecutorState.AWAITING_MERGEABILITY
        while snapshot.mergeable == Mergeable.PENDING and retries < self._retry_count:
            self._log.info(
                "PR #%s: mergeability pending, retry %s/%s in %ss",
                pr_number,
                retries + 1,
                self._retry_count,
                self._retry_interval,
            )
            (self._sleep or time.sleep)(self._retry_interval)
            snapshot = self._adapter.get_pull_request(self._repo, pr_number)
            retries += 1
            if snapshot.head_sha != original_sha:
                return self._abort(original_sha, snapshot, AbortReason.HEAD_CHANGED_DURING_RETRY, retries=retries)

        if not is_ready_to_merge(snapshot):
            return self._abort(original_sha, snapshot, classify_not_mergeable(snapshot), retries=retries)

        self._state = ExecutorState.MERGING
        self._log.info("PR #%s: merging %s with %s", pr_number, original_sha[:7], method.value)
        result = self._adapter.merge_pull_request(
            self._repo,
            pr_number,
            method,
            original_sha,
            plan.title,
            plan.body,
        )
        if not result.success:
            return self._abort(
                original_sha,
                snapshot,
                AbortReason.MERGE_FAILED,
                retries=retries,
                error=result.error or "Unknown error",
            )

        self._state = ExecutorState.MERGED
        return MergeExecution(
            state=self._state,
            original_head_sha=original_sha,
            snapshot=snapshot,
            retries=retries,
            merge_commit_sha=result.merge_commit_sha,
        )
