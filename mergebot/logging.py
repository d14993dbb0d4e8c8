"""Logging for a mergebot run inside a GitHub Actions job.

Everything goes to stderr, which the runner shows in the job log. The
level comes from config.yaml (logging.level) or LOGGING_LEVEL. When a
workflow is re-run with "Enable debug logging" the runner sets
RUNNER_DEBUG=1, and mergebot then logs at DEBUG whatever the config says.
"""

import logging
import os
from typing import Mapping

from mergebot.config import LoggingConfig

LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

DEFAULT_LEVEL = "INFO"
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _resolve_level(level: str) -> int:
    return LEVELS.get(level.upper().strip(), LEVELS[DEFAULT_LEVEL])


def runner_debug_enabled(env: Mapping[str, str]) -> bool:
    """True when the Actions runner asks for debug output."""
    return env.get("RUNNER_DEBUG", "").strip() == "1"


class MergebotLogging:
    """Configures the root logger for one job run."""

    def __init__(self, config: LoggingConfig, env: Mapping[str, str] | None = None) -> None:
        env = os.environ if env is None else env
        self._level = logging.DEBUG if runner_debug_enabled(env) else _resolve_level(config.level)
        self._format = config.format or DEFAULT_FORMAT

    def setup(self) -> None:
        logging.basicConfig(level=self._level, format=self._format, force=True)
