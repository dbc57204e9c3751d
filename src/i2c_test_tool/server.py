"""MCP server entry point for the I2C test tool.

Exposes the console's transactions as Model Context Protocol tools using
the official Python MCP SDK with stdio transport. Buffers use the console
syntax (``"{ 00 11 22 }"``); the braces may be omitted.
"""

from __future__ import annotations

import logging
from typing import Any

from mcp.server.fastmcp import FastMCP

from .config import ToolConfig
from .exceptions import DeviceAcquisitionError, ParseError, TransferTooLargeError
from .models.transfer import (
    FullTransfer,
    PartialTransfer,
    Read,
    SlaveAddressNotAcknowledged,
    TransferKind,
    Write,
    WriteRead,
)
from .protocol.buffer import parse_buffer_text
from .protocol.commands import HELP_TEXT
from .protocol.engine import execute
from .protocol.formatter import format_bytes, format_outcome
from .transport.bus import BusHandle, acquire_device

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "i2c-test-tool",
    instructions="Raw write, read and write-read transactions against one I2C slave device",
)

# Global connection state
_connection: BusHandle | None = None


def _get_connection() -> BusHandle:
    """Get the open bus handle, raising if not connected."""
    if _connection is None:
        raise RuntimeError(
            "Not connected to a device. Use the 'connect' tool first."
        )
    return _connection


def _parse_data(data: str) -> bytes:
    text = data.strip()
    if not text.startswith("{"):
        text = "{ " + text + " }"
    return parse_buffer_text(text)


def _run(kind: TransferKind) -> dict[str, Any]:
    try:
        outcome = execute(kind, _get_connection())
    except TransferTooLargeError as e:
        return {"error": str(e)}
    status = outcome.status
    result: dict[str, Any] = {
        "status": type(status).__name__,
        "data": format_bytes(outcome.data_read),
        "text": format_outcome(kind, outcome),
    }
    if isinstance(status, FullTransfer):
        result["bytes_transferred"] = kind.requested_length
    elif isinstance(status, PartialTransfer):
        result["bytes_transferred"] = status.bytes_transferred
    elif isinstance(status, SlaveAddressNotAcknowledged):
        result["bytes_transferred"] = 0
    return result


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(slave_address: int, bus_name: str | None = None) -> dict[str, Any]:
    """Open an exclusive handle on an I2C slave address.

    Args:
        slave_address: 7-bit or 10-bit slave address.
        bus_name: Bus controller to use when more than one exists.
    """
    global _connection
    if _connection is not None:
        return {
            "connected": True,
            "message": "Already connected",
            **_connection.connection_info().to_dict(),
        }

    try:
        _connection = acquire_device(slave_address, bus_name, ToolConfig.from_env())
    except (DeviceAcquisitionError, ValueError) as e:
        return {"connected": False, "error": str(e)}

    return {"connected": True, **_connection.connection_info().to_dict()}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Release the bus handle."""
    global _connection
    if _connection is None:
        return {"disconnected": True}
    _connection.close()
    _connection = None
    return {"disconnected": True}


@mcp.tool()
def get_connection_info() -> dict[str, Any]:
    """Report the device id, slave address and bus speed of the open handle."""
    return _get_connection().connection_info().to_dict()


# ─── TRANSFER TOOLS ───────────────────────────────────────────────────

@mcp.tool()
def i2c_write(data: str) -> dict[str, Any]:
    """Write a buffer to the slave.

    Args:
        data: Hex bytes, e.g. "{ 00 11 22 }" or "00 11 22".
    """
    try:
        kind = Write(_parse_data(data))
    except ParseError as e:
        return {"error": str(e)}
    return _run(kind)


@mcp.tool()
def i2c_read(count: int) -> dict[str, Any]:
    """Read bytes from the slave.

    Args:
        count: Number of bytes to read (> 0).
    """
    try:
        kind = Read(count)
    except ValueError as e:
        return {"error": str(e)}
    return _run(kind)


@mcp.tool()
def i2c_write_read(data: str, count: int) -> dict[str, Any]:
    """Write a buffer, issue a repeated start, and read bytes back.

    Args:
        data: Hex bytes to write, e.g. "{ 10 }".
        count: Number of bytes to read (> 0).
    """
    try:
        kind = WriteRead(_parse_data(data), count)
    except ValueError as e:
        return {"error": str(e)}
    return _run(kind)


@mcp.resource("i2c://help")
def command_help() -> str:
    """Console command summary."""
    return HELP_TEXT


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
