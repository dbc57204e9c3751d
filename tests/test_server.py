"""Tests for the MCP tool functions."""

from __future__ import annotations

import sys
from unittest.mock import MagicMock, patch

import pytest

from i2c_test_tool.exceptions import DeviceNotFoundError, TransferTooLargeError
from i2c_test_tool.models.transfer import FullTransfer, PartialTransfer, SlaveAddressNotAcknowledged
from i2c_test_tool.transport.memory import InMemoryBusHandle

pytest.importorskip("mcp")


def _get_server_module():
    """Import server module with FastMCP mocked to avoid init issues."""
    mock_fastmcp_cls = MagicMock()
    mock_fastmcp_instance = MagicMock()
    # Make the @mcp.tool() decorator a no-op that returns the function unchanged
    mock_fastmcp_instance.tool.return_value = lambda fn: fn
    mock_fastmcp_instance.resource.return_value = lambda fn: fn
    mock_fastmcp_cls.return_value = mock_fastmcp_instance

    with patch("mcp.server.fastmcp.FastMCP", mock_fastmcp_cls):
        sys.modules.pop("i2c_test_tool.server", None)
        import i2c_test_tool.server as server_mod

    return server_mod


def test_not_connected():
    server = _get_server_module()
    with pytest.raises(RuntimeError, match="connect"):
        server.i2c_read(1)


def test_connect_and_info(monkeypatch):
    server = _get_server_module()
    monkeypatch.setenv("I2C_TEST_TOOL_BACKEND", "memory")
    result = server.connect(0x57, "bench")
    assert result["connected"] is True
    assert result["slave_address"] == "0x57"
    assert server.get_connection_info()["device_id"] == "bench"
    assert server.connect(0x57)["message"] == "Already connected"
    assert server.disconnect() == {"disconnected": True}
    assert server.disconnect() == {"disconnected": True}


def test_connect_failure_is_reported():
    server = _get_server_module()
    with patch.object(server, "acquire_device", side_effect=DeviceNotFoundError("I2C bus not found")):
        result = server.connect(0x57)
    assert result == {"connected": False, "error": "I2C bus not found"}


def test_write_accepts_bare_bytes():
    server = _get_server_module()
    device = InMemoryBusHandle(responses=[FullTransfer()])
    with patch.object(server, "_get_connection", return_value=device):
        result = server.i2c_write("01 02")
    assert result["status"] == "FullTransfer"
    assert result["bytes_transferred"] == 2
    assert device.calls[0].data == b"\x01\x02"


def test_write_parse_error():
    server = _get_server_module()
    device = InMemoryBusHandle(responses=[])
    with patch.object(server, "_get_connection", return_value=device):
        result = server.i2c_write("{ 100 }")
    assert "Out of range" in result["error"]
    assert device.calls == []


def test_read_partial():
    server = _get_server_module()
    device = InMemoryBusHandle(responses=[(PartialTransfer(2), b"\x11\x22")])
    with patch.object(server, "_get_connection", return_value=device):
        result = server.i2c_read(4)
    assert result == {
        "status": "PartialTransfer",
        "data": "11 22",
        "text": "Partial Transfer. Transferred 2 bytes\n11 22",
        "bytes_transferred": 2,
    }


def test_read_zero_rejected():
    server = _get_server_module()
    assert "error" in server.i2c_read(0)


def test_write_read_nack():
    server = _get_server_module()
    device = InMemoryBusHandle(responses=[(SlaveAddressNotAcknowledged(), b"")])
    with patch.object(server, "_get_connection", return_value=device):
        result = server.i2c_write_read("{ 10 }", 2)
    assert result["status"] == "SlaveAddressNotAcknowledged"
    assert result["data"] == ""
    assert result["bytes_transferred"] == 0


def test_oversize_request_returns_error():
    server = _get_server_module()
    device = InMemoryBusHandle(responses=[TransferTooLargeError("reads are limited to 512 bytes")])
    with patch.object(server, "_get_connection", return_value=device):
        result = server.i2c_read(513)
    assert result == {"error": "reads are limited to 512 bytes"}
