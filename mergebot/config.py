"""Configuration loading from YAML and environment.

Secrets (tokens) are taken from environment variables or from files
(Docker secrets). Never put real tokens in config files committed to the
repo.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when configuration is missing or out of bounds."""

    pass


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


# Injected by load_config so validators can read env/file
_current_env: dict[str, str] = {}

# (min, max) inclusive
RETRY_COUNT_RANGE = (1, 20)
RETRY_INTERVAL_RANGE = (1, 60)


def _bounded_int(name: str, value: Any, bounds: tuple[int, int]) -> int:
    low, high = bounds
    try:
        number = int(str(value).strip())
    except ValueError:
        raise ValueError(
            f'Invalid {name}: "{value}" is not a valid integer. Must be between {low} and {high}.'
        ) from None
    if number < low or number > high:
        raise ValueError(f"Invalid {name}: {number} is out of range. Must be between {low} and {high}.")
    return number


class MergeConfig(BaseSettings):
    """Branch naming rules and mergeability retry policy."""

    model_config = SettingsConfigDict(env_prefix="MERGE_", extra="ignore")

    release_branch_prefix: str = Field(default="release/", description="Prefix of release branches")
    develop_branch: str = Field(default="develop", description="Name of the develop branch (exact match)")
    sync_branch_prefix: str = Field(default="fix/sync/", description="Prefix of back-merge sync branches")
    # GitHub computes mergeability asynchronously; these bound the wait
    mergeable_retry_count: int = Field(default=5, description="Re-fetches while mergeable is pending")
    mergeable_retry_interval: int = Field(default=10, description="Seconds between re-fetches")

    @field_validator("mergeable_retry_count", mode="before")
    @classmethod
    def _check_retry_count(cls, value: Any) -> int:
        return _bounded_int("mergeable-retry-count", value, RETRY_COUNT_RANGE)

    @field_validator("mergeable_retry_interval", mode="before")
    @classmethod
    def _check_retry_interval(cls, value: Any) -> int:
        return _bounded_int("mergeable-retry-interval", value, RETRY_INTERVAL_RANGE)


class GitHubConfig(BaseSettings):
    """GitHub API settings."""

    model_config = SettingsConfigDict(env_prefix="GITHUB_", extra="ignore")

    token: str | None = Field(default=None, description="PAT or app token; use env or secret file")
    api_url: str = Field(default="https://api.github.com", description="API base URL")
    server_url: str = Field(default="https://github.com", description="Web URL used in comment links")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    merge: MergeConfig = Field(default_factory=MergeConfig)
    github: GitHubConfig = Field(default_factory=GitHubConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def github_token_resolved(self) -> str | None:
        """Resolve GitHub token from config, env or Docker secret file."""
        t = self.github.token
        if t and not t.startswith("${"):
            return t
        return _read_secret("GITHUB_TOKEN", "GITHUB_TOKEN_FILE")


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        # Simple $VAR
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def _first_error_message(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    msg = str(details[0].get("msg", error))
    # pydantic prefixes messages raised from validators
    return msg.removeprefix("Value error, ")


def load_config(config_path: Path | None = None, env: dict[str, str] | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    Secrets: GITHUB_TOKEN or GITHUB_TOKEN_FILE. Raises ConfigError when
    a value is invalid, before anything talks to the API.
    """
    global _current_env
    import os

    _current_env = dict(os.environ) if env is None else dict(env)

    path = config_path or Path("config.yaml")
    raw: dict[str, Any] = {}
    if path.is_file():
        raw = yaml.safe_load(path.read_text()) or {}
        raw = _substitute_env(raw)

    github_raw = dict(raw.get("github") or {})
    if "server_url" not in github_raw and _current_env.get("GITHUB_SERVER_URL"):
        github_raw["server_url"] = _current_env["GITHUB_SERVER_URL"]

    try:
        merge = MergeConfig(**(raw.get("merge") or {}))
        github = GitHubConfig(**github_raw)
        logging = LoggingConfig(**(raw.get("logging") or {}))
    except ValidationError as e:
        raise ConfigError(_first_error_message(e)) from e

    return AppConfig(merge=merge, github=github, logging=logging)
