"""Tests for the /mergebot merge command tokenizer."""

import pytest

from mergebot.command import CommandStatus, looks_like_trigger, parse_command, tokenize


def test_plain_command() -> None:
    """Bare command parses with no override."""
    parsed = parse_command("/mergebot merge")
    assert parsed.status == CommandStatus.MERGE
    assert parsed.command is not None
    assert parsed.command.override_approval_requirement is False


def test_override_flag() -> None:
    """The override flag sets override_approval_requirement."""
    parsed = parse_command("/mergebot merge --override-approval-requirement")
    assert parsed.status == CommandStatus.MERGE
    assert parsed.command is not None
    assert parsed.command.override_approval_requirement is True


@pytest.mark.parametrize("body", ["  /mergebot merge  ", "\t/mergebot merge", "/mergebot   merge\n", "/mergebot merge\r\n"])
def test_surrounding_whitespace_allowed(body: str) -> None:
    """Leading spaces or tabs and trailing whitespace are accepted."""
    assert parse_command(body).status == CommandStatus.MERGE


@pytest.mark.parametrize(
    "body",
    [
        "/mergebot merge now",
        "/mergebot merge --force",
        "/mergebot merge --override-approval-requirement extra",
        "/mergebot merge\nplease",
        "/mergebot",
        "/mergebot deploy",
        "/mergebotmerge",
    ],
)
def test_malformed_commands_are_unrecognized(body: str) -> None:
    """Looks addressed to the bot but is not a valid merge command."""
    parsed = parse_command(body)
    assert parsed.status == CommandStatus.UNRECOGNIZED
    assert parsed.command is None


@pytest.mark.parametrize(
    "body",
    [
        "",
        "LGTM",
        "please /mergebot merge",
        "\n/mergebot merge",
        "/merge",
        "merge it",
    ],
)
def test_not_a_command(body: str) -> None:
    """Ordinary comments are not commands."""
    assert parse_command(body).status == CommandStatus.NOT_A_COMMAND


@pytest.mark.parametrize("body", ["/nylbot merge", "/mergebot", " /devbot help", "/abbot"])
def test_looks_like_trigger(body: str) -> None:
    """Bodies addressed to a bot look like a trigger."""
    assert looks_like_trigger(body) is True


@pytest.mark.parametrize("body", ["\n/mergebot merge", "hi /mergebot", "/bot", "/abcdefbot"])
def test_does_not_look_like_trigger(body: str) -> None:
    """Other bodies do not look like a trigger."""
    assert looks_like_trigger(body) is False


def test_tokenize() -> None:
    """tokenize splits one line and rejects multi-line bodies."""
    assert tokenize("  /mergebot merge  --x ") == ["/mergebot", "merge", "--x"]
    assert tokenize("/mergebot merge\nmore") is None
    assert tokenize("   ") is None


@pytest.mark.parametrize(
    "body",
    [
        "/mergebot merge\n--override-approval-requirement",
        "/mergebot merge\r\n--override-approval-requirement",
        "/mergebot\nmerge",
    ],
)
def test_command_must_fit_on_one_line(body: str) -> None:
    """A flag or verb on a following line makes the command unrecognized, never an override."""
    parsed = parse_command(body)
    assert parsed.status == CommandStatus.UNRECOGNIZED
    assert parsed.command is None
    assert tokenize(body) is None
