"""Protocol layer: buffer literals, command grammar, transaction engine, and output formatting."""

from .buffer import TokenStream, parse_byte_buffer
from .commands import CommandName, ParsedCommand, parse_command
from .engine import execute
from .formatter import format_info, format_outcome
