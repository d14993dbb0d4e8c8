"""Build the explicit commit title and body sent with the merge call.

Merge commit:
    Merge pull request #<N> from <head>

    <PR title>

    <metadata>

Squash commit:
    <PR title> (#<N>)

    * <commit subject>      (one per commit, oldest first)

    Co-authored-by: ...     (deduplicated, in commit order)

    <metadata>

Empty blocks are left out together with their separating blank line.
"""

from typing import List, Sequence

from mergebot.command import OVERRIDE_APPROVAL_FLAG
from mergebot.models import CommitMessagePlan, MergeMethod, PullRequestCommit, PullRequestSnapshot

MERGED_BY_NAME = "mergebot"


def metadata_block(actor: str, approval_overridden: bool) -> str:
    lines = f"Merged-by: {MERGED_BY_NAME} (on behalf of @{actor})"
    if approval_overridden:
        lines += f"\n\n⚠️ EXCEPTIONAL MERGE: Approval requirement overridden via {OVERRIDE_APPROVAL_FLAG}"
    return lines


def commit_subjects(commits: Sequence[PullRequestCommit]) -> List[str]:
    """``* <first line>`` per commit, skipping commits with an empty first line."""
    subjects = []
    for commit in commits:
        first_line = commit.message.split("\n")[0]
        if first_line:
            subjects.append(f"* {first_line}")
    return subjects


def co_author_lines(commits: Sequence[PullRequestCommit]) -> List[str]:
    """``Co-authored-by`` trailers, first occurrence wins, commit order kept."""
    lines: List[str] = []
    for commit in commits:
        if commit.author_name and commit.author_email:
            line = f"Co-authored-by: {commit.author_name} <{commit.author_email}>"
            if line not in lines:
                lines.append(line)
    return lines


def compose_commit_message(
    method: MergeMethod,
    snapshot: PullRequestSnapshot,
    actor: str,
    approval_overridden: bool = False,
    commits: Sequence[PullRequestCommit] = (),
) -> CommitMessagePlan:
    """Compose the commit message for ``method``.

    ``commits`` is only used for squash merges.
    """
    metadata = metadata_block(actor, approval_overridden)
    if method == MergeMethod.MERGE:
        return CommitMessagePlan(
            title=f"Merge pull request #{snapshot.number} from {snapshot.head_ref}",
            body=f"{snapshot.title}\n\n{metadata}",
        )

    blocks = ["\n".join(commit_subjects(commits)), "\n".join(co_author_lines(commits)), metadata]
    return CommitMessagePlan(
        title=f"{snapshot.title} (#{snapshot.number})",
        body="\n\n".join(block for block in blocks if block),
    )
