"""Interactive console loop.

Reads one command per line, runs it against the session's bus handle, and
writes the formatted result. Parse errors, unknown commands and requests
too large for the controller are reported and the loop continues. Engine faults and bus errors end the session.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from typing import TextIO

from .exceptions import ParseError, TransferTooLargeError, UnrecognizedCommandError
from .protocol.commands import HELP_TEXT, CommandName, parse_command
from .protocol.engine import execute
from .protocol.formatter import format_info, format_outcome
from .transport.bus import BusHandle

logger = logging.getLogger(__name__)

PROMPT = "> "
BANNER = "  Type 'help' for a list of commands"


@dataclass
class Session:
    """Everything one console run needs: the bus handle and its streams."""

    device: BusHandle
    stdin: TextIO = field(default_factory=lambda: sys.stdin)
    stdout: TextIO = field(default_factory=lambda: sys.stdout)

    def write_line(self, text: str) -> None:
        self.stdout.write(text + "\n")


def handle_line(session: Session, line: str) -> bool:
    """Process one input line. Returns False when the session should end."""
    try:
        command = parse_command(line)
    except ParseError as e:
        session.write_line(str(e))
        if e.usage:
            session.write_line(e.usage)
        return True
    except UnrecognizedCommandError as e:
        session.write_line(
            f"Unrecognized command: {e.command}. Type 'help' for command usage."
        )
        return True

    if command.name is CommandName.QUIT:
        return False
    if command.name is CommandName.HELP:
        session.stdout.write(HELP_TEXT + "\n")
    elif command.name is CommandName.INFO:
        session.write_line(format_info(session.device.connection_info()))
    elif command.kind is not None:
        try:
            outcome = execute(command.kind, session.device)
        except TransferTooLargeError as e:
            session.write_line(str(e))
            return True
        text = format_outcome(command.kind, outcome)
        if text:
            session.write_line(text)
    return True


def run_console(session: Session) -> int:
    """Prompt and dispatch until ``quit`` or end of input.

    Returns:
        Number of lines processed.
    """
    count = 0
    while True:
        session.stdout.write(PROMPT)
        session.stdout.flush()
        line = session.stdin.readline()
        if not line:
            break
        count += 1
        if not handle_line(session, line):
            break
    logger.debug("Console ended after %d lines", count)
    return count
