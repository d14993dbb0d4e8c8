"""Value objects for pull requests, reviews, checks and results (Pydantic)."""

from mergebot.models.command import MergeCommand
from mergebot.models.pull_request import Mergeable, PullRequestCommit, PullRequestSnapshot
from mergebot.models.results import (
    ActionResult,
    ApprovalTally,
    CheckResult,
    CommitMessagePlan,
    MergeMethod,
    MergeMethodDecision,
    MergeResult,
    Outcome,
)
from mergebot.models.review import Review

__all__ = [
    "ActionResult",
    "ApprovalTally",
    "CheckResult",
    "CommitMessagePlan",
    "Mergeable",
    "MergeCommand",
    "MergeMethod",
    "MergeMethodDecision",
    "MergeResult",
    "Outcome",
    "PullRequestCommit",
    "PullRequestSnapshot",
    "Review",
]
