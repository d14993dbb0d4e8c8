"""Pick squash or merge commit from branch names."""

from mergebot.config import MergeConfig
from mergebot.models import MergeMethod, MergeMethodDecision


def resolve_merge_method(head_ref: str, base_ref: str, config: MergeConfig) -> MergeMethodDecision:
    """Decide the merge method. First matching rule wins:

    1. head is a release branch -> merge (preserve release history)
    2. head is a sync branch -> merge (preserve back-merge history)
    3. base is a release branch -> squash
    4. base is the develop branch (exact name) -> squash
    5. otherwise -> merge

    Head rules come first, so release/x into develop is still a merge commit.
    """
    if head_ref.startswith(config.release_branch_prefix):
        return MergeMethodDecision(
            method=MergeMethod.MERGE,
            reason=f"Head branch `{head_ref}` is a release branch (merge commit to preserve release history)",
        )
    if head_ref.startswith(config.sync_branch_prefix):
        return MergeMethodDecision(
            method=MergeMethod.MERGE,
            reason=f"Head branch `{head_ref}` is a sync branch (merge commit to preserve back-merge history)",
        )
    if base_ref.startswith(config.release_branch_prefix):
        return MergeMethodDecision(
            method=MergeMethod.SQUASH,
            reason=f"Base branch `{base_ref}` is a release branch",
        )
    if base_ref == config.develop_branch:
        return MergeMethodDecision(method=MergeMethod.SQUASH, reason=f"Base branch is `{base_ref}`")
    return MergeMethodDecision(
        method=MergeMethod.MERGE,
        reason=f"Default merge commit for `{head_ref}` into `{base_ref}`",
    )
