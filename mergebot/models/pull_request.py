"""Pull request snapshot and commit models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class Mergeable(str, Enum):
    """Host's answer to "can this PR be merged?".

    GitHub reports a nullable boolean; ``null`` means the merge status is
    still being computed in the background.
    """

    MERGEABLE = "true"
    CONFLICTING = "false"
    PENDING = "pending"

    @classmethod
    def from_api(cls, value: bool | None) -> "Mergeable":
        if value is None:
            return cls.PENDING
        return cls.MERGEABLE if value else cls.CONFLICTING


class PullRequestSnapshot(BaseModel):
    """Point-in-time view of a pull request.

    Never updated in place: every re-validation fetches a new snapshot.
    """

    model_config = ConfigDict(frozen=True)

    number: int
    state: str
    locked: bool = False
    draft: bool = False
    merged: bool = False
    mergeable: Mergeable = Mergeable.PENDING
    mergeable_state: str = "unknown"
    head_sha: str
    head_ref: str
    base_ref: str
    author: str
    is_fork: bool = False
    title: str = ""


class PullRequestCommit(BaseModel):
    """One commit of a pull request (message and git author)."""

    model_config = ConfigDict(frozen=True)

    message: str = ""
    author_name: str | None = None
    author_email: str | None = None
