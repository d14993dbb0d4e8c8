"""Trigger context built from a GitHub ``issue_comment`` event."""

import json
from pathlib import Path
from typing import Any, Dict, Mapping

from pydantic import BaseModel, ConfigDict


class EventContext(BaseModel):
    """Everything the pipeline needs to know about the triggering comment."""

    model_config = ConfigDict(frozen=True)

    repository: str
    pr_number: int = 0
    comment_id: int = 0
    comment_body: str = ""
    actor: str = ""
    user_type: str = "User"
    author_association: str = "NONE"
    server_url: str = "https://github.com"
    run_id: int = 0
    event_name: str = ""
    is_pull_request: bool = False

    def comment_url(self) -> str:
        base = self.server_url.rstrip("/")
        return f"{base}/{self.repository}/pull/{self.pr_number}#issuecomment-{self.comment_id}"


def load_event_payload(path: Path | None) -> Dict[str, Any]:
    """Read the webhook payload GitHub Actions stores at GITHUB_EVENT_PATH."""
    if path is None or not path.is_file():
        return {}
    return json.loads(path.read_text(encoding="utf-8")) or {}


def build_event_context(
    payload: Dict[str, Any],
    env: Mapping[str, str],
    server_url: str | None = None,
) -> EventContext:
    """Build EventContext from an event payload and the Actions environment.

    ``pr_number`` is 0 when the comment is not on an issue; the pipeline
    skips those before it uses the number.
    """
    issue = payload.get("issue") or {}
    comment = payload.get("comment") or {}
    user = comment.get("user") or {}
    repository = env.get("GITHUB_REPOSITORY") or (payload.get("repository") or {}).get("full_name", "")
    return EventContext(
        repository=repository,
        pr_number=int(issue.get("number") or 0),
        comment_id=int(comment.get("id") or 0),
        comment_body=comment.get("body") or "",
        actor=env.get("GITHUB_ACTOR") or user.get("login", ""),
        user_type=user.get("type") or "User",
        author_association=comment.get("author_association") or "NONE",
        server_url=server_url or env.get("GITHUB_SERVER_URL") or "https://github.com",
        run_id=int(env.get("GITHUB_RUN_ID") or 0),
        event_name=env.get("GITHUB_EVENT_NAME", ""),
        is_pull_request=bool(issue.get("pull_request")),
    )
