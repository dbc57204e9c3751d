"""Tests for transfer and connection models."""

import pytest

from i2c_test_tool.models.connection import BusSpeed, ConnectionInfo
from i2c_test_tool.models.transfer import PartialTransfer, Read, TransferOutcome, Write, WriteRead


def test_write_lengths():
    kind = Write(b"\x01\x02")
    assert (kind.write_length, kind.read_length, kind.requested_length) == (2, 0, 2)


def test_read_lengths():
    kind = Read(4)
    assert (kind.write_length, kind.read_length, kind.requested_length) == (0, 4, 4)


def test_writeread_lengths():
    kind = WriteRead(b"\x01\x02\x03", 4)
    assert (kind.write_length, kind.read_length, kind.requested_length) == (3, 4, 7)


def test_buffers_are_copied_to_bytes():
    assert Write(bytearray(b"\x01")).data == b"\x01"
    assert isinstance(WriteRead([1, 2], 1).data, bytes)


@pytest.mark.parametrize("factory", [
    lambda: Write(b""),
    lambda: Read(0),
    lambda: WriteRead(b"", 1),
    lambda: WriteRead(b"\x01", 0),
])
def test_invalid_requests(factory):
    with pytest.raises(ValueError):
        factory()


def test_outcome_repr():
    assert "11 22" in repr(TransferOutcome(PartialTransfer(2), b"\x11\x22"))


def test_connection_info_to_dict():
    info = ConnectionInfo(0x57, BusSpeed.FAST_MODE, "dev")
    assert info.to_dict() == {
        "device_id": "dev",
        "slave_address": "0x57",
        "bus_speed": "FAST_MODE",
    }
