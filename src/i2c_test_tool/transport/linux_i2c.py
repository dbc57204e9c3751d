"""Linux i2c-dev backend.

Adapters are discovered through sysfs (``/sys/class/i2c-dev/i2c-N/name``)
and opened as ``/dev/i2c-N`` with ``smbus2``. Every transfer is a single
``I2C_RDWR`` ioctl; a write-read sends both messages in one call so the
adapter issues a repeated start between them.

The kernel reports transfers as all-or-nothing, so this backend never
returns :class:`PartialTransfer`. A NACK surfaces as ``ENXIO`` or
``EREMOTEIO`` depending on the adapter driver; both map to
:class:`SlaveAddressNotAcknowledged`.
"""

from __future__ import annotations

import errno
import fcntl
import logging
from dataclasses import dataclass
from pathlib import Path

from smbus2 import SMBus, i2c_msg

from ..config import ToolConfig
from ..exceptions import (
    BusTransactionError,
    DeviceAcquisitionError,
    DeviceBusyError,
    DeviceNotFoundError,
    TransferTooLargeError,
)
from ..models.connection import BusSpeed, ConnectionInfo
from ..models.transfer import FullTransfer, SlaveAddressNotAcknowledged, TransferStatus
from .bus import MAX_7BIT_ADDRESS
from .locking import AddressClaim

logger = logging.getLogger(__name__)

# linux/i2c-dev.h, linux/i2c.h
I2C_SLAVE = 0x0703
I2C_TENBIT = 0x0704
I2C_M_TEN = 0x0010

# i2cdev_ioctl_rdwr rejects longer messages with EINVAL
MAX_MESSAGE_LENGTH = 8192

NACK_ERRNOS = (errno.ENXIO, errno.EREMOTEIO)
FAST_MODE_HZ = 400_000


@dataclass(frozen=True)
class Adapter:
    """One i2c-dev adapter as listed in sysfs."""

    node: str  # e.g. "i2c-1"
    name: str  # adapter name, e.g. "bcm2835 (i2c@7e804000)"
    sysfs_path: Path

    @property
    def number(self) -> int:
        return int(self.node.split("-", 1)[1])

    def matches(self, friendly_name: str) -> bool:
        return friendly_name in (self.node, self.name, f"/dev/{self.node}")


def list_adapters(sysfs_root: Path) -> list[Adapter]:
    """List i2c-dev adapters, sorted by bus number."""
    class_dir = Path(sysfs_root) / "class" / "i2c-dev"
    if not class_dir.is_dir():
        return []

    adapters = []
    for entry in class_dir.iterdir():
        if not entry.name.startswith("i2c-"):
            continue
        name_file = entry / "name"
        name = name_file.read_text().strip() if name_file.exists() else ""
        adapters.append(Adapter(node=entry.name, name=name, sysfs_path=entry))
    return sorted(adapters, key=lambda a: a.number)


def find_adapter(sysfs_root: Path, friendly_name: str | None) -> Adapter:
    """Pick exactly one adapter, optionally filtered by ``friendly_name``.

    Raises:
        DeviceNotFoundError: If zero or several adapters qualify.
    """
    adapters = list_adapters(sysfs_root)
    if friendly_name is not None:
        adapters = [a for a in adapters if a.matches(friendly_name)]
    if len(adapters) != 1:
        found = ", ".join(a.node for a in adapters) or "none"
        raise DeviceNotFoundError(
            f"I2C bus not found (requested {friendly_name or 'any'}, found {found})"
        )
    return adapters[0]


def read_bus_speed(adapter: Adapter) -> BusSpeed:
    """Bus speed from the adapter's device-tree ``clock-frequency``, if any."""
    freq_file = adapter.sysfs_path / "device" / "of_node" / "clock-frequency"
    try:
        raw = freq_file.read_bytes()
    except OSError:
        return BusSpeed.STANDARD_MODE
    if len(raw) < 4:
        return BusSpeed.STANDARD_MODE
    hz = int.from_bytes(raw[:4], "big")
    return BusSpeed.FAST_MODE if hz >= FAST_MODE_HZ else BusSpeed.STANDARD_MODE


def _set_slave_address(fd: int, slave_address: int) -> None:
    """Bind ``fd`` to the address without forcing past a kernel driver."""
    fcntl.ioctl(fd, I2C_TENBIT, 1 if slave_address > MAX_7BIT_ADDRESS else 0)
    fcntl.ioctl(fd, I2C_SLAVE, slave_address)


class LinuxI2CDevice:
    """Bus handle on a Linux i2c-dev adapter.

    Usage::

        with LinuxI2CDevice.open(0x50, "i2c-1", config) as dev:
            status = dev.write_partial(b"\\x00\\x10")
    """

    def __init__(
        self,
        bus: SMBus,
        adapter: Adapter,
        slave_address: int,
        bus_speed: BusSpeed,
        claim: AddressClaim,
    ) -> None:
        self._bus = bus
        self._adapter = adapter
        self._slave_address = slave_address
        self._bus_speed = bus_speed
        self._claim = claim
        self._ten_bit = slave_address > MAX_7BIT_ADDRESS

    @classmethod
    def open(
        cls,
        slave_address: int,
        friendly_name: str | None,
        config: ToolConfig,
    ) -> LinuxI2CDevice:
        """Find the adapter, claim the address, and open the device node.

        Raises:
            DeviceNotFoundError: If no single adapter matches.
            DeviceBusyError: If the address is claimed by another process
                or bound to a kernel driver.
            DeviceAcquisitionError: If the device node cannot be opened.
        """
        adapter = find_adapter(config.sysfs_root, friendly_name)
        dev_path = Path(config.dev_root) / adapter.node

        claim = AddressClaim(config.lock_dir, adapter.node, slave_address)
        claim.acquire()
        try:
            bus = SMBus(str(dev_path))
        except OSError as e:
            claim.release()
            raise DeviceAcquisitionError(
                f"Could not open {dev_path} for slave address 0x{slave_address:x}: {e}"
            ) from e

        try:
            _set_slave_address(bus.fd, slave_address)
        except OSError as e:
            bus.close()
            claim.release()
            if e.errno == errno.EBUSY:
                raise DeviceBusyError(
                    f"Slave address 0x{slave_address:x} on bus {dev_path} is in use. "
                    f"Please ensure that no other applications are using I2C."
                ) from e
            raise DeviceAcquisitionError(
                f"Could not select slave address 0x{slave_address:x} on bus {dev_path}: {e}"
            ) from e

        device = cls(bus, adapter, slave_address, read_bus_speed(adapter), claim)
        logger.info(
            "Opened %s (%s) for slave address 0x%x", dev_path, adapter.name, slave_address
        )
        return device

    def __enter__(self) -> LinuxI2CDevice:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def device_id(self) -> str:
        return f"/dev/{self._adapter.node} ({self._adapter.name})"

    def _check_length(self, op_name: str, length: int) -> None:
        if length > MAX_MESSAGE_LENGTH:
            raise TransferTooLargeError(
                f"i2c-dev messages are limited to {MAX_MESSAGE_LENGTH} bytes, "
                f"{op_name} requested {length}"
            )

    def _message(self, msg: i2c_msg) -> i2c_msg:
        if self._ten_bit:
            msg.flags |= I2C_M_TEN
        return msg

    def _transfer(self, op_name: str, *msgs: i2c_msg) -> TransferStatus:
        if self._bus is None:
            raise BusTransactionError("Device is closed")
        try:
            self._bus.i2c_rdwr(*msgs)
        except OSError as e:
            if e.errno in NACK_ERRNOS:
                logger.debug("%s to 0x%x NACKed: %s", op_name, self._slave_address, e)
                return SlaveAddressNotAcknowledged()
            raise BusTransactionError(
                f"I2C {op_name} failed (addr=0x{self._slave_address:x}, "
                f"bus={self._adapter.node}): {e}"
            ) from e
        return FullTransfer()

    def write_partial(self, data: bytes) -> TransferStatus:
        self._check_length("write", len(data))
        msg = self._message(i2c_msg.write(self._slave_address, data))
        return self._transfer("write", msg)

    def read_partial(self, length: int) -> tuple[TransferStatus, bytes]:
        self._check_length("read", length)
        msg = self._message(i2c_msg.read(self._slave_address, length))
        status = self._transfer("read", msg)
        if isinstance(status, FullTransfer):
            return status, bytes(msg)
        return status, b""

    def write_read_partial(
        self, data: bytes, length: int
    ) -> tuple[TransferStatus, bytes]:
        self._check_length("writeread", len(data))
        self._check_length("writeread", length)
        write = self._message(i2c_msg.write(self._slave_address, data))
        read = self._message(i2c_msg.read(self._slave_address, length))
        status = self._transfer("writeread", write, read)
        if isinstance(status, FullTransfer):
            return status, bytes(read)
        return status, b""

    def connection_info(self) -> ConnectionInfo:
        return ConnectionInfo(
            slave_address=self._slave_address,
            bus_speed=self._bus_speed,
            device_id=self.device_id,
        )

    def close(self) -> None:
        """Close the device node and release the address claim."""
        if self._bus is None:
            return
        try:
            self._bus.close()
        except OSError as e:
            logger.warning("Error closing %s: %s", self._adapter.node, e)
        finally:
            self._bus = None
            self._claim.release()
            logger.info("Closed /dev/%s", self._adapter.node)
