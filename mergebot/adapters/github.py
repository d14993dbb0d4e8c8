"""GitHub API adapter."""

import logging
from typing import Any, Dict, Iterator, List

import requests

from mergebot.adapters.base import GitPlatformAdapter, GitPlatformError
from mergebot.models import (
    Mergeable,
    MergeMethod,
    MergeResult,
    PullRequestCommit,
    PullRequestSnapshot,
    Review,
)

logger = logging.getLogger("mergebot.adapters.github")

# REST does not expose review thread resolution, so threads are counted over GraphQL
REVIEW_THREADS_QUERY = """
query($owner: String!, $name: String!, $number: Int!, $cursor: String) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) {
      reviewThreads(first: 100, after: $cursor) {
        pageInfo {
          hasNextPage
          endCursor
        }
        nodes {
          isResolved
        }
      }
    }
  }
}
"""


def _is_fork(head: Dict[str, Any], base: Dict[str, Any]) -> bool:
    # head.repo is null when the fork was deleted
    head_repo = head.get("repo") or {}
    base_repo = base.get("repo") or {}
    if head_repo.get("fork") is True:
        return True
    head_owner = (head_repo.get("owner") or {}).get("id")
    base_owner = (base_repo.get("owner") or {}).get("id")
    return head_owner != base_owner


def _snapshot_from_api(data: Dict[str, Any]) -> PullRequestSnapshot:
    head = data.get("head") or {}
    base = data.get("base") or {}
    user = data.get("user") or {}
    return PullRequestSnapshot(
        number=data["number"],
        state=data.get("state", "open"),
        locked=bool(data.get("locked")),
        draft=bool(data.get("draft")),
        merged=bool(data.get("merged")),
        mergeable=Mergeable.from_api(data.get("mergeable")),
        mergeable_state=data.get("mergeable_state") or "unknown",
        head_sha=head.get("sha", ""),
        head_ref=head.get("ref", ""),
        base_ref=base.get("ref", ""),
        author=user.get("login") or "unknown",
        is_fork=_is_fork(head, base),
        title=data.get("title") or "",
    )


def _review_from_api(data: Dict[str, Any]) -> Review:
    user = data.get("user") or {}
    return Review(
        id=data["id"],
        user=user.get("login") or None,
        state=data.get("state", ""),
        commit_id=data.get("commit_id"),
    )


def _commit_from_api(data: Dict[str, Any]) -> PullRequestCommit:
    commit = data.get("commit") or {}
    author = commit.get("author") or {}
    return PullRequestCommit(
        message=commit.get("message") or "",
        author_name=author.get("name") or None,
        author_email=author.get("email") or None,
    )


class GitHubAdapter(GitPlatformAdapter):
    """GitHub API implementation."""

    def __init__(self, token: str, api_url: str = "https://api.github.com") -> None:
        self._api_url = api_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers["Authorization"] = f"token {token}"
        self._session.headers["Accept"] = "application/vnd.github.v3+json"

    def _url(self, path: str) -> str:
        if path.startswith("http://") or path.startswith("https://"):
            return path
        return f"{self._api_url}{path}" if path.startswith("/") else f"{self._api_url}/{path}"

    def _request(
        self,
        method: str,
        path: str,
        params: Dict[str, Any] | None = None,
        json: Dict[str, Any] | None = None,
    ) -> requests.Response:
        try:
            resp = self._session.request(method, self._url(path), params=params, json=json, timeout=30)
        except requests.RequestException as e:
            raise GitPlatformError(f"{method} {path} failed: {e}") from e
        if resp.status_code >= 400:
            msg = resp.text or resp.reason or str(resp.status_code)
            try:
                msg = resp.json().get("message", msg)
            except (ValueError, AttributeError):
                pass
            raise GitPlatformError(f"{resp.status_code}: {msg}")
        return resp

    def _json(self, resp: requests.Response) -> Any:
        """Decode a response body; a non-JSON body is a platform error."""
        try:
            return resp.json()
        except ValueError as e:
            raise GitPlatformError(f"{resp.status_code}: invalid JSON in response: {e}") from e

    def _paginate(self, path: str, params: Dict[str, Any] | None = None) -> Iterator[Dict[str, Any]]:
        """Yield items of a REST list endpoint, following Link rel=next."""
        url: str | None = path
        page_params: Dict[str, Any] | None = {"per_page": 100, **(params or {})}
        while url:
            resp = self._request("GET", url, params=page_params)
            yield from self._json(resp) or []
            url = (resp.links or {}).get("next", {}).get("url")
            # The next link already carries the query string
            page_params = None

    def _graphql(self, query: str, variables: Dict[str, Any]) -> Dict[str, Any]:
        resp = self._request("POST", "/graphql", json={"query": query, "variables": variables})
        payload = self._json(resp) or {}
        errors = payload.get("errors")
        if errors:
            messages = "; ".join(str(e.get("message", e)) for e in errors)
            raise GitPlatformError(f"GraphQL error: {messages}")
        return payload.get("data") or {}

    def get_pull_request(self, repo: str, pr_number: int) -> PullRequestSnapshot:
        resp = self._request("GET", f"/repos/{repo}/pulls/{pr_number}")
        return _snapshot_from_api(self._json(resp))

    def list_approved_reviews(self, repo: str, pr_number: int) -> List[Review]:
        reviews = [_review_from_api(d) for d in self._paginate(f"/repos/{repo}/pulls/{pr_number}/reviews")]
        return [r for r in reviews if r.state == "APPROVED"]

    def dismiss_review(self, repo: str, pr_number: int, review_id: int, message: str) -> bool:
        try:
            self._request(
                "PUT",
                f"/repos/{repo}/pulls/{pr_number}/reviews/{review_id}/dismissals",
                json={"message": message},
            )
        except GitPlatformError as e:
            logger.warning("PR #%s: failed to dismiss review %s: %s", pr_number, review_id, e)
            return False
        return True

    def list_pull_request_commits(self, repo: str, pr_number: int) -> List[PullRequestCommit]:
        return [_commit_from_api(d) for d in self._paginate(f"/repos/{repo}/pulls/{pr_number}/commits")]

    def count_unresolved_threads(self, repo: str, pr_number: int) -> int:
        owner, _, name = repo.partition("/")
        unresolved = 0
        cursor: str | None = None
        while True:
            data = self._graphql(
                REVIEW_THREADS_QUERY,
                {"owner": owner, "name": name, "number": pr_number, "cursor": cursor},
            )
            threads = data["repository"]["pullRequest"]["reviewThreads"]
            unresolved += sum(1 for node in threads.get("nodes") or [] if not node.get("isResolved"))
            page_info = threads.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                return unresolved
            cursor = page_info.get("endCursor")

    def get_collaborator_permission(self, repo: str, username: str) -> str:
        try:
            resp = self._request("GET", f"/repos/{repo}/collaborators/{username}/permission")
            data = self._json(resp) or {}
        except GitPlatformError as e:
            logger.debug("Permission lookup for %s failed: %s", username, e)
            return "none"
        return data.get("permission") or "none"

    def create_comment(self, repo: str, issue_number: int, body: str) -> None:
        self._request("POST", f"/repos/{repo}/issues/{issue_number}/comments", json={"body": body})

    def add_reaction(self, repo: str, comment_id: int, content: str) -> None:
        try:
            self._request(
                "POST",
                f"/repos/{repo}/issues/comments/{comment_id}/reactions",
                json={"content": content},
            )
        except GitPlatformError as e:
            # The reaction may already exist
            logger.debug("Reaction %s on comment %s failed: %s", content, comment_id, e)

    def merge_pull_request(
        self,
        repo: str,
        pr_number: int,
        method: MergeMethod,
        sha: str,
        commit_title: str,
        commit_message: str,
    ) -> MergeResult:
        try:
            resp = self._request(
                "PUT",
                f"/repos/{repo}/pulls/{pr_number}/merge",
                json={
                    "merge_method": MergeMethod(method).value,
                    "sha": sha,
                    "commit_title": commit_title,
                    "commit_message": commit_message,
                },
            )
        except GitPlatformError as e:
            return MergeResult(success=False, error=str(e))
        try:
            merge_sha = (self._json(resp) or {}).get("sha")
        except GitPlatformError as e:
            # The merge went through; only the commit SHA is unknown
            logger.warning("PR #%s merged but response was unreadable: %s", pr_number, e)
            merge_sha = None
        return MergeResult(success=True, merge_commit_sha=merge_sha)
