"""Check, decision and outcome models produced by the merge pipeline."""

from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field


class CheckResult(BaseModel):
    """One line of the merge checklist.

    Optional checks are reported but never block the merge.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    passed: bool
    details: str | None = None
    optional: bool = False


class ApprovalTally(BaseModel):
    """Result of reconciling approvals against the current head."""

    model_config = ConfigDict(frozen=True)

    valid_approvals: int = 0
    dismissal_failures: List[str] = Field(default_factory=list)


class MergeMethod(str, Enum):
    SQUASH = "squash"
    MERGE = "merge"


class MergeMethodDecision(BaseModel):
    """Chosen merge method and a human-readable reason."""

    model_config = ConfigDict(frozen=True)

    method: MergeMethod
    reason: str


class CommitMessagePlan(BaseModel):
    """Explicit title and body sent with the merge call."""

    model_config = ConfigDict(frozen=True)

    title: str
    body: str


class MergeResult(BaseModel):
    """Host response to a merge call."""

    model_config = ConfigDict(frozen=True)

    success: bool
    error: str | None = None
    merge_commit_sha: str | None = None


class Outcome(str, Enum):
    MERGED = "merged"
    SKIPPED = "skipped"
    FAILED = "failed"
    ALREADY_MERGED = "already_merged"


class ActionResult(BaseModel):
    """Final result of one pipeline run."""

    model_config = ConfigDict(frozen=True)

    status: Outcome
    message: str
    merge_method: MergeMethod | None = None
