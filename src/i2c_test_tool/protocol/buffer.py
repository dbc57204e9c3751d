"""Byte-buffer literal parser.

Buffers are written as hexadecimal byte tokens between braces::

    { 00 11 22 aa BB 0xff }

Tokens are separated by whitespace; the closing brace may follow the last
token directly. At least one token is required.
"""

from __future__ import annotations

import re

from ..exceptions import ParseError

MAX_BYTE = 0xFF

_WHITESPACE = re.compile(r"\s*")
_WORD = re.compile(r"\S+")
_HEX_TOKEN = re.compile(r"(?:0[xX])?([0-9a-fA-F]+)")
_UNSIGNED = re.compile(r"[0-9]+")


class TokenStream:
    """Cursor over a single line of console input."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.pos = 0

    def skip_whitespace(self) -> None:
        self.pos = _WHITESPACE.match(self.text, self.pos).end()

    def at_end(self) -> bool:
        self.skip_whitespace()
        return self.pos >= len(self.text)

    def expect(self, delim: str) -> bool:
        """Consume ``delim`` after optional whitespace.

        Returns False, without consuming anything else, if the next
        non-space character is something other than ``delim``.
        """
        self.skip_whitespace()
        if self.text.startswith(delim, self.pos):
            self.pos += len(delim)
            return True
        return False

    def next_word(self) -> str | None:
        """Return the next whitespace-delimited word, or None at end of line."""
        self.skip_whitespace()
        match = _WORD.match(self.text, self.pos)
        if match is None:
            return None
        self.pos = match.end()
        return match.group()

    def read_hex(self) -> tuple[str, int] | None:
        """Read one hex token, returning its text and value."""
        self.skip_whitespace()
        match = _HEX_TOKEN.match(self.text, self.pos)
        if match is None:
            return None
        self.pos = match.end()
        return match.group(), int(match.group(1), 16)

    def read_unsigned(self) -> int | None:
        """Read one decimal unsigned integer, or None if none is next."""
        self.skip_whitespace()
        match = _UNSIGNED.match(self.text, self.pos)
        if match is None:
            return None
        self.pos = match.end()
        return int(match.group())


def parse_byte_buffer(stream: TokenStream) -> bytes:
    """Parse a brace-delimited byte buffer from ``stream``.

    Args:
        stream: Token stream positioned before the opening brace.

    Returns:
        The bytes in the order they were written.

    Raises:
        ParseError: On a missing delimiter, an out-of-range token, or an
            empty buffer. No partial buffer is returned.
    """
    if not stream.expect("{"):
        raise ParseError("Syntax error: expecting '{'")

    values: list[int] = []
    while True:
        token = stream.read_hex()
        if token is None:
            break
        text, value = token
        if value > MAX_BYTE:
            raise ParseError(f"Out of range [0, 0xff]: {text}")
        values.append(value)

    if not values:
        raise ParseError("Zero-length buffers are not allowed")

    if not stream.expect("}"):
        raise ParseError("Syntax error: expecting '}'")

    return bytes(values)


def parse_buffer_text(text: str) -> bytes:
    """Parse a whole string as one byte buffer literal."""
    return parse_byte_buffer(TokenStream(text))
