"""Connection settings model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum


class BusSpeed(IntEnum):
    """Pre-negotiated I2C clock tiers."""

    STANDARD_MODE = 0
    FAST_MODE = 1


@dataclass(frozen=True)
class ConnectionInfo:
    """Read-only description of an open bus handle."""

    slave_address: int
    bus_speed: BusSpeed | int
    device_id: str

    def to_dict(self) -> dict:
        speed = self.bus_speed
        return {
            "device_id": self.device_id,
            "slave_address": f"0x{self.slave_address:x}",
            "bus_speed": speed.name if isinstance(speed, BusSpeed) else int(speed),
        }
