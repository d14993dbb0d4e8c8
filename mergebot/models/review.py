"""Pull request review model."""

from pydantic import BaseModel, ConfigDict


class Review(BaseModel):
    """Submitted review on a pull request.

    ``user`` is None when the reviewer's account was deleted.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    user: str | None = None
    state: str
    commit_id: str | None = None
