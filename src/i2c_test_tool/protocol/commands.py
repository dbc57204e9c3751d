"""Console command grammar.

Each input line holds one command; its first word selects what follows::

    write { b0 b1 ... bn }
    read N
    writeread { b0 b1 ... bn } N
    info
    help | h
    quit | q
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..exceptions import ParseError, UnrecognizedCommandError
from ..models.transfer import Read, TransferKind, Write, WriteRead
from .buffer import TokenStream, parse_byte_buffer


class CommandName(str, Enum):
    """Console commands."""

    WRITE = "write"
    READ = "read"
    WRITEREAD = "writeread"
    INFO = "info"
    HELP = "help"
    QUIT = "quit"
    EMPTY = ""


# Word (case-sensitive) to command, including aliases
COMMAND_WORDS: dict[str, CommandName] = {
    "write": CommandName.WRITE,
    "read": CommandName.READ,
    "writeread": CommandName.WRITEREAD,
    "info": CommandName.INFO,
    "help": CommandName.HELP,
    "h": CommandName.HELP,
    "quit": CommandName.QUIT,
    "q": CommandName.QUIT,
}

WRITE_USAGE = "Usage: write { 55 a0 ... ff }"
READ_USAGE = "Expecting integer. e.g: read 4"
WRITEREAD_USAGE = "Usage: writeread { 55 a0 ... ff } 4"

HELP_TEXT = (
    "Commands:\n"
    " > write { 00 11 22 .. FF }         Write supplied buffer\n"
    " > read N                           Read N bytes\n"
    " > writeread { 00 11 .. FF } N      Write buffer, restart, read N bytes\n"
    " > info                             Display device information\n"
    " > help                             Display this help message\n"
    " > quit                             Quit\n"
)


@dataclass(frozen=True)
class ParsedCommand:
    """A recognized command and, for transfer commands, its request."""

    name: CommandName
    kind: TransferKind | None = None

    @property
    def is_transfer(self) -> bool:
        return self.kind is not None


def _read_length(
    stream: TokenStream, usage: str, missing: str | None = "Syntax error: expecting integer"
) -> int:
    """Read a positive length; with ``missing=None`` the usage hint alone is reported."""
    length = stream.read_unsigned()
    if length is None:
        if missing is None:
            raise ParseError(usage)
        raise ParseError(missing, usage)
    if length == 0:
        raise ParseError("Read length must be greater than zero", usage)
    return length


def _buffer(stream: TokenStream, usage: str) -> bytes:
    try:
        return parse_byte_buffer(stream)
    except ParseError as e:
        raise ParseError(str(e), usage) from e


def parse_command(line: str) -> ParsedCommand:
    """Parse one console line.

    Args:
        line: Raw input line (trailing newline allowed).

    Returns:
        The parsed command. Blank lines give ``CommandName.EMPTY``.

    Raises:
        ParseError: If a known command has malformed arguments.
        UnrecognizedCommandError: If the first word is not a command.
    """
    stream = TokenStream(line)
    word = stream.next_word()
    if word is None:
        return ParsedCommand(CommandName.EMPTY)

    name = COMMAND_WORDS.get(word)
    if name is None:
        raise UnrecognizedCommandError(word)

    if name is CommandName.WRITE:
        return ParsedCommand(name, Write(_buffer(stream, WRITE_USAGE)))
    if name is CommandName.READ:
        return ParsedCommand(name, Read(_read_length(stream, READ_USAGE, missing=None)))
    if name is CommandName.WRITEREAD:
        data = _buffer(stream, WRITEREAD_USAGE)
        return ParsedCommand(name, WriteRead(data, _read_length(stream, WRITEREAD_USAGE)))
    return ParsedCommand(name)
