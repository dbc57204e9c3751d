"""Tests for console output formatting."""

import pytest

from i2c_test_tool.exceptions import EngineFault
from i2c_test_tool.models.connection import BusSpeed, ConnectionInfo
from i2c_test_tool.models.transfer import (
    FullTransfer,
    PartialTransfer,
    Read,
    SlaveAddressNotAcknowledged,
    TransferOutcome,
    Write,
    WriteRead,
)
from i2c_test_tool.protocol.formatter import (
    format_bus_speed,
    format_bytes,
    format_info,
    format_outcome,
)


def test_format_bytes_lowercase_two_digit():
    assert format_bytes(b"\x0a\xff") == "0a ff"
    assert format_bytes(b"\x00") == "00"


def test_full_read():
    outcome = TransferOutcome(FullTransfer(), b"\x0a\xff")
    assert format_outcome(Read(2), outcome) == "0a ff"


def test_full_write_is_silent():
    assert format_outcome(Write(b"\x01"), TransferOutcome(FullTransfer())) == ""


def test_partial_with_data():
    outcome = TransferOutcome(PartialTransfer(2), b"\x11\x22")
    assert format_outcome(Read(4), outcome) == "Partial Transfer. Transferred 2 bytes\n11 22"


def test_partial_without_data():
    outcome = TransferOutcome(PartialTransfer(1))
    assert (
        format_outcome(WriteRead(b"\xff", 2), outcome)
        == "Partial Transfer. Transferred 1 bytes"
    )


def test_nack():
    outcome = TransferOutcome(SlaveAddressNotAcknowledged(), b"\x01")
    assert format_outcome(Read(1), outcome) == "Slave address was not acknowledged"


def test_unknown_status():
    with pytest.raises(EngineFault):
        format_outcome(Read(1), TransferOutcome("bogus"))


@pytest.mark.parametrize(
    "speed, text",
    [
        (BusSpeed.STANDARD_MODE, "StandardMode (100Khz)"),
        (BusSpeed.FAST_MODE, "FastMode (400kHz)"),
        (7, "[Invalid bus speed]"),
        (None, "[Invalid bus speed]"),
    ],
)
def test_bus_speed(speed, text):
    assert format_bus_speed(speed) == text


def test_info():
    info = ConnectionInfo(0x57, BusSpeed.FAST_MODE, "/dev/i2c-1 (bcm2835)")
    assert format_info(info) == (
        "       DeviceId: /dev/i2c-1 (bcm2835)\n"
        "  Slave address: 0x57\n"
        "      Bus Speed: FastMode (400kHz)"
    )


def test_info_invalid_speed_does_not_fail():
    info = ConnectionInfo(0x10, 42, "dev")
    assert format_info(info).endswith("[Invalid bus speed]")
