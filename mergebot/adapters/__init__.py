"""Git platform adapters."""

from mergebot.adapters.base import GitPlatformAdapter, GitPlatformError
from mergebot.adapters.github import GitHubAdapter

__all__ = ["GitPlatformAdapter", "GitPlatformError", "GitHubAdapter"]
