"""Recognize the ``/mergebot merge`` command in a comment body.

A comment is split into whitespace-separated tokens and validated token by
token. Every flag in ``KNOWN_FLAGS`` has a matching field on
``MergeCommand``.
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict

from mergebot.models import MergeCommand

BOT_TRIGGER = "/mergebot"
MERGE_VERB = "merge"

OVERRIDE_APPROVAL_FLAG = "--override-approval-requirement"
KNOWN_FLAGS = frozenset({OVERRIDE_APPROVAL_FLAG})

# Anything that looks addressed to a bot: "/" + 2-5 characters + "bot" at the very start.
# Only spaces and tabs may precede it; a leading newline does not count.
_TRIGGER_RE = re.compile(r"^[ \t]*/\S{2,5}bot")


class CommandStatus(str, Enum):
    NOT_A_COMMAND = "not_a_command"
    UNRECOGNIZED = "unrecognized"
    MERGE = "merge"


class ParsedCommand(BaseModel):
    """Outcome of parsing a comment body."""

    model_config = ConfigDict(frozen=True)

    status: CommandStatus
    command: MergeCommand | None = None


def looks_like_trigger(body: str) -> bool:
    """True if the comment starts like a bot command (e.g. ``/mergebot``, ``/nylbot``)."""
    return bool(_TRIGGER_RE.match(body or ""))


def tokenize(body: str) -> list[str] | None:
    """Split a single-line command into tokens.

    Returns None when the body spans several lines or starts with a newline.
    """
    stripped = (body or "").lstrip(" \t").rstrip()
    if not stripped or "\n" in stripped or "\r" in stripped:
        return None
    return stripped.split()


def parse_command(body: str) -> ParsedCommand:
    """Parse a comment body into a merge command.

    Examples:
        "/mergebot merge" -> MERGE, no override
        "/mergebot merge --override-approval-requirement" -> MERGE, override
        "/mergebot merge now" -> UNRECOGNIZED
        "looks good to me" -> NOT_A_COMMAND
    """
    fallback = CommandStatus.UNRECOGNIZED if looks_like_trigger(body) else CommandStatus.NOT_A_COMMAND
    tokens = tokenize(body)
    if not tokens or len(tokens) < 2 or tokens[0] != BOT_TRIGGER or tokens[1] != MERGE_VERB:
        return ParsedCommand(status=fallback)

    flags = tokens[2:]
    if any(flag not in KNOWN_FLAGS for flag in flags):
        return ParsedCommand(status=fallback)

    return ParsedCommand(
        status=CommandStatus.MERGE,
        command=MergeCommand(override_approval_requirement=OVERRIDE_APPROVAL_FLAG in flags),
    )
