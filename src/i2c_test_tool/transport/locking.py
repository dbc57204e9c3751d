"""System-wide exclusive claim of a (bus, slave address) pair."""

from __future__ import annotations

import fcntl
import logging
import os
import re
from pathlib import Path

from ..exceptions import DeviceAcquisitionError, DeviceBusyError

logger = logging.getLogger(__name__)

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")


class AddressClaim:
    """An advisory ``flock`` held for as long as a bus handle is open.

    A second claim of the same pair, from this or any other process,
    raises :class:`DeviceBusyError`.
    """

    def __init__(self, lock_dir: Path, bus_id: str, slave_address: int) -> None:
        name = _UNSAFE.sub("_", bus_id).strip("_")
        self.path = Path(lock_dir) / f"i2c-test-tool-{name}-{slave_address:03x}.lock"
        self.bus_id = bus_id
        self.slave_address = slave_address
        self._fd: int | None = None

    @property
    def held(self) -> bool:
        return self._fd is not None

    def acquire(self) -> None:
        try:
            fd = os.open(self.path, os.O_RDWR | os.O_CREAT, 0o666)
        except OSError as e:
            raise DeviceAcquisitionError(
                f"Could not claim slave address 0x{self.slave_address:x} on bus "
                f"{self.bus_id}: {e}"
            ) from e
        try:
            fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except BlockingIOError as e:
            os.close(fd)
            raise DeviceBusyError(
                f"Slave address 0x{self.slave_address:x} on bus {self.bus_id} is in use. "
                f"Please ensure that no other applications are using I2C."
            ) from e
        except OSError as e:
            os.close(fd)
            raise DeviceAcquisitionError(
                f"Could not claim slave address 0x{self.slave_address:x} on bus "
                f"{self.bus_id}: {e}"
            ) from e
        self._fd = fd
        logger.debug("Claimed %s", self.path)

    def release(self) -> None:
        if self._fd is None:
            return
        try:
            fcntl.flock(self._fd, fcntl.LOCK_UN)
        finally:
            os.close(self._fd)
            self._fd = None
            logger.debug("Released %s", self.path)
