"""Render transfer outcomes and connection settings as console text."""

from __future__ import annotations

from ..exceptions import EngineFault
from ..models.connection import BusSpeed, ConnectionInfo
from ..models.transfer import (
    FullTransfer,
    PartialTransfer,
    SlaveAddressNotAcknowledged,
    TransferKind,
    TransferOutcome,
)

NACK_MESSAGE = "Slave address was not acknowledged"

BUS_SPEED_NAMES = {
    BusSpeed.STANDARD_MODE: "StandardMode (100Khz)",
    BusSpeed.FAST_MODE: "FastMode (400kHz)",
}
INVALID_BUS_SPEED = "[Invalid bus speed]"


def format_bytes(data: bytes) -> str:
    """Two-digit lowercase hex, space separated: ``b"\\x0a\\xff"`` -> ``"0a ff"``."""
    return data.hex(" ")


def format_outcome(kind: TransferKind, outcome: TransferOutcome) -> str:
    """Render ``outcome`` for display; an empty string means nothing to show.

    ``kind`` is accepted so callers can pass the request alongside the
    outcome; the write/read boundary has already been applied to
    ``outcome.data_read`` by the engine.
    """
    status = outcome.status
    if isinstance(status, FullTransfer):
        return format_bytes(outcome.data_read)
    if isinstance(status, PartialTransfer):
        lines = [f"Partial Transfer. Transferred {status.bytes_transferred} bytes"]
        if outcome.data_read:
            lines.append(format_bytes(outcome.data_read))
        return "\n".join(lines)
    if isinstance(status, SlaveAddressNotAcknowledged):
        return NACK_MESSAGE
    raise EngineFault(f"Invalid transfer status value: {status!r}")


def format_bus_speed(speed: BusSpeed | int) -> str:
    try:
        return BUS_SPEED_NAMES[BusSpeed(speed)]
    except (ValueError, TypeError, KeyError):
        return INVALID_BUS_SPEED


def format_info(info: ConnectionInfo) -> str:
    return (
        f"       DeviceId: {info.device_id}\n"
        f"  Slave address: 0x{info.slave_address:x}\n"
        f"      Bus Speed: {format_bus_speed(info.bus_speed)}"
    )
