"""Bus handle interface and device acquisition.

A bus handle is an exclusively owned connection to one slave address on
one bus. The protocol engine only depends on the :class:`BusHandle`
protocol; backends are picked by :func:`acquire_device`.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from ..config import ToolConfig
from ..models.connection import ConnectionInfo
from ..models.transfer import TransferStatus

logger = logging.getLogger(__name__)

MAX_SLAVE_ADDRESS = 0x3FF  # 10-bit addressing
MAX_7BIT_ADDRESS = 0x7F


@runtime_checkable
class BusHandle(Protocol):
    """Capability to run transactions against one slave address."""

    def write_partial(self, data: bytes) -> TransferStatus:
        """Write ``data``; report how far the transfer got."""
        ...

    def read_partial(self, length: int) -> tuple[TransferStatus, bytes]:
        """Read up to ``length`` bytes; return the status and captured bytes."""
        ...

    def write_read_partial(
        self, data: bytes, length: int
    ) -> tuple[TransferStatus, bytes]:
        """Write, repeated start, read, as one transaction.

        A partial count covers both phases, write phase first.
        """
        ...

    def connection_info(self) -> ConnectionInfo:
        ...

    def close(self) -> None:
        ...


def acquire_device(
    slave_address: int,
    friendly_name: str | None = None,
    config: ToolConfig | None = None,
) -> BusHandle:
    """Open an exclusive bus handle for ``slave_address``.

    Args:
        slave_address: 7-bit or 10-bit slave address.
        friendly_name: Selects one bus controller when several exist.
        config: Backend selection; defaults to :meth:`ToolConfig.from_env`.

    Raises:
        ValueError: If the address is outside the 10-bit range.
        DeviceNotFoundError: If zero or several buses match.
        DeviceBusyError: If the address is already claimed.
    """
    if not 0 <= slave_address <= MAX_SLAVE_ADDRESS:
        raise ValueError(
            f"Slave address must be 0-0x{MAX_SLAVE_ADDRESS:x}, got 0x{slave_address:x}"
        )
    if config is None:
        config = ToolConfig.from_env()

    logger.debug(
        "Acquiring 0x%x on %s via %s backend",
        slave_address,
        friendly_name or "(default bus)",
        config.backend,
    )

    if config.backend == "linux":
        from .linux_i2c import LinuxI2CDevice

        return LinuxI2CDevice.open(slave_address, friendly_name, config)
    if config.backend == "cp2112":
        from .cp2112 import CP2112Device

        return CP2112Device.open(slave_address, friendly_name, config)

    from .memory import InMemoryBusHandle

    return InMemoryBusHandle(
        slave_address=slave_address,
        bus_speed=config.bus_speed,
        device_id=friendly_name or "memory",
    )
