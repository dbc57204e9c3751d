"""Tests for the console command grammar."""

import pytest

from i2c_test_tool.exceptions import ParseError, UnrecognizedCommandError
from i2c_test_tool.models.transfer import Read, Write, WriteRead
from i2c_test_tool.protocol.commands import (
    READ_USAGE,
    WRITE_USAGE,
    WRITEREAD_USAGE,
    CommandName,
    parse_command,
)


def test_write_command():
    cmd = parse_command("write { 01 02 03 }\n")
    assert cmd.name is CommandName.WRITE
    assert cmd.kind == Write(b"\x01\x02\x03")
    assert cmd.is_transfer


def test_read_command():
    cmd = parse_command("read 4")
    assert cmd.name is CommandName.READ
    assert cmd.kind == Read(4)


def test_read_length_is_decimal():
    assert parse_command("read 10").kind == Read(10)


def test_writeread_command():
    cmd = parse_command("writeread { ff } 2")
    assert cmd.name is CommandName.WRITEREAD
    assert cmd.kind == WriteRead(b"\xff", 2)


@pytest.mark.parametrize(
    "line, name",
    [
        ("info", CommandName.INFO),
        ("help", CommandName.HELP),
        ("h", CommandName.HELP),
        ("quit", CommandName.QUIT),
        ("q", CommandName.QUIT),
        ("", CommandName.EMPTY),
        ("   \n", CommandName.EMPTY),
    ],
)
def test_argumentless_commands(line, name):
    cmd = parse_command(line)
    assert cmd.name is name
    assert cmd.kind is None
    assert not cmd.is_transfer


def test_commands_are_case_sensitive():
    with pytest.raises(UnrecognizedCommandError) as exc_info:
        parse_command("WRITE { 01 }")
    assert exc_info.value.command == "WRITE"


def test_unknown_command():
    with pytest.raises(UnrecognizedCommandError) as exc_info:
        parse_command("scan 1 2")
    assert exc_info.value.command == "scan"


def test_write_bad_buffer_carries_usage():
    with pytest.raises(ParseError) as exc_info:
        parse_command("write 01 02")
    assert exc_info.value.usage == WRITE_USAGE


def test_write_empty_buffer():
    with pytest.raises(ParseError, match="Zero-length"):
        parse_command("write { }")


@pytest.mark.parametrize("line", ["read", "read x", "read -1"])
def test_read_missing_length_reports_hint_only(line):
    with pytest.raises(ParseError) as exc_info:
        parse_command(line)
    assert str(exc_info.value) == READ_USAGE
    assert exc_info.value.usage is None


def test_read_zero_length():
    with pytest.raises(ParseError, match="greater than zero") as exc_info:
        parse_command("read 0")
    assert exc_info.value.usage == READ_USAGE


def test_writeread_missing_length():
    with pytest.raises(ParseError, match="expecting integer") as exc_info:
        parse_command("writeread { 01 }")
    assert exc_info.value.usage == WRITEREAD_USAGE


def test_writeread_bad_buffer():
    with pytest.raises(ParseError, match="Out of range") as exc_info:
        parse_command("writeread { 100 } 2")
    assert exc_info.value.usage == WRITEREAD_USAGE
