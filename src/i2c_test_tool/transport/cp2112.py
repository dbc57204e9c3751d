"""Silicon Labs CP2112 USB-HID to I2C bridge backend.

The bridge is driven with HID reports (AN495)::

    0x06  SMBus configuration (feature)   clock Hz (4, BE), address, auto-read, timeouts, retries
    0x10  Data read request               addr<<1, length (2, BE)
    0x11  Data write-read request         addr<<1, length (2, BE), target length, target bytes
    0x12  Data read force send            length (2, BE)
    0x13  Data read response              status, length, data
    0x14  Data write                      addr<<1, length, data
    0x15  Transfer status request         0x01
    0x16  Transfer status response        status0, status1, retries (2), bytes read (2)
    0x17  Cancel transfer                 0x01

Unlike i2c-dev, the bridge reports how far a failed transfer got, so
this backend can return :class:`PartialTransfer`.
"""

from __future__ import annotations

import logging
import time

from ..config import ToolConfig
from ..exceptions import (
    BusTransactionError,
    DeviceAcquisitionError,
    DeviceNotFoundError,
    TransferTooLargeError,
)
from ..models.connection import BusSpeed, ConnectionInfo
from ..models.transfer import (
    FullTransfer,
    PartialTransfer,
    SlaveAddressNotAcknowledged,
    TransferStatus,
)
from .bus import MAX_7BIT_ADDRESS
from .locking import AddressClaim

logger = logging.getLogger(__name__)

VENDOR_ID = 0x10C4
PRODUCT_ID = 0xEA90

REPORT_SMBUS_CONFIG = 0x06
REPORT_READ_REQUEST = 0x10
REPORT_WRITE_READ_REQUEST = 0x11
REPORT_READ_FORCE_SEND = 0x12
REPORT_READ_RESPONSE = 0x13
REPORT_WRITE = 0x14
REPORT_STATUS_REQUEST = 0x15
REPORT_STATUS_RESPONSE = 0x16
REPORT_CANCEL = 0x17

SMBUS_CONFIG_SIZE = 14
HID_REPORT_SIZE = 64
MAX_WRITE = 61
MAX_WRITE_READ_TARGET = 16
MAX_READ = 512

# Transfer status response, status0
STATUS_IDLE = 0x00
STATUS_BUSY = 0x01
STATUS_COMPLETE = 0x02
STATUS_ERROR = 0x03

# status1 when status0 == STATUS_ERROR
ERROR_ADDRESS_NACKED = 0x00
ERROR_BUS_NOT_FREE = 0x01
ERROR_ARBITRATION_LOST = 0x02
ERROR_READ_INCOMPLETE = 0x03
ERROR_WRITE_INCOMPLETE = 0x04
ERROR_SUCCEEDED_AFTER_RETRIES = 0x05

CLOCK_HZ = {
    BusSpeed.STANDARD_MODE: 100_000,
    BusSpeed.FAST_MODE: 400_000,
}

READ_TIMEOUT_MS = 100
STATUS_POLL_LIMIT = 500
STATUS_POLL_INTERVAL = 0.002


def find_bridge(friendly_name: str | None) -> dict:
    """Pick exactly one attached CP2112.

    ``friendly_name`` matches the USB serial number or product string.

    Raises:
        DeviceNotFoundError: If zero or several bridges qualify.
    """
    import hid

    bridges = hid.enumerate(VENDOR_ID, PRODUCT_ID)
    if friendly_name is not None:
        bridges = [
            b for b in bridges
            if friendly_name in (b.get("serial_number"), b.get("product_string"))
        ]
    if len(bridges) != 1:
        raise DeviceNotFoundError(
            f"I2C bus not found (requested {friendly_name or 'any'} CP2112, "
            f"found {len(bridges)})"
        )
    return bridges[0]


class CP2112Device:
    """Bus handle on a CP2112 bridge."""

    def __init__(
        self,
        device,
        device_id: str,
        slave_address: int,
        bus_speed: BusSpeed,
        claim: AddressClaim,
    ) -> None:
        self._device = device
        self._device_id = device_id
        self._slave_address = slave_address
        self._bus_speed = bus_speed
        self._claim = claim

    @classmethod
    def open(
        cls,
        slave_address: int,
        friendly_name: str | None,
        config: ToolConfig,
    ) -> CP2112Device:
        """Find the bridge, claim the address, open it, and set the clock.

        Raises:
            DeviceNotFoundError: If no single bridge matches, or for a
                10-bit address.
            DeviceBusyError: If the address is already claimed.
            DeviceAcquisitionError: If the bridge cannot be opened.
        """
        import hid

        if slave_address > MAX_7BIT_ADDRESS:
            raise DeviceNotFoundError(
                f"CP2112 supports 7-bit addresses only, got 0x{slave_address:x}"
            )

        info = find_bridge(friendly_name)
        serial = info.get("serial_number") or ""
        device_id = f"CP2112 {serial}".strip()

        claim = AddressClaim(config.lock_dir, f"cp2112-{serial or 'default'}", slave_address)
        claim.acquire()
        try:
            device = hid.device()
            device.open_path(info["path"])
            device.set_nonblocking(False)
        except OSError as e:
            claim.release()
            raise DeviceAcquisitionError(
                f"Could not open {device_id} for slave address 0x{slave_address:x}: {e}"
            ) from e

        bridge = cls(device, device_id, slave_address, config.bus_speed, claim)
        try:
            bridge._configure_clock()
        except OSError as e:
            bridge.close()
            raise DeviceAcquisitionError(
                f"Could not configure {device_id}: {e}"
            ) from e

        logger.info("Opened %s for slave address 0x%x", device_id, slave_address)
        return bridge

    def __enter__(self) -> CP2112Device:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def _address_byte(self) -> int:
        return self._slave_address << 1

    def _configure_clock(self) -> None:
        report = list(
            self._device.get_feature_report(REPORT_SMBUS_CONFIG, SMBUS_CONFIG_SIZE)
        )
        report[1:5] = CLOCK_HZ[self._bus_speed].to_bytes(4, "big")
        self._device.send_feature_report(report)
        logger.debug("CP2112 clock set to %d Hz", CLOCK_HZ[self._bus_speed])

    def _write(self, report: list[int]) -> None:
        if self._device is None:
            raise BusTransactionError("Device is closed")
        try:
            self._device.write(report)
        except OSError as e:
            raise BusTransactionError(f"CP2112 write failed: {e}") from e

    def _read_report(self, report_id: int) -> list[int]:
        """Read input reports until one with ``report_id`` arrives."""
        for _ in range(STATUS_POLL_LIMIT):
            try:
                data = self._device.read(HID_REPORT_SIZE, READ_TIMEOUT_MS)
            except OSError as e:
                raise BusTransactionError(f"CP2112 read failed: {e}") from e
            if data and data[0] == report_id:
                return list(data)
        raise BusTransactionError(f"CP2112 did not send report 0x{report_id:02x}")

    def _wait_for_completion(self) -> tuple[int, int, int]:
        """Poll transfer status; return (status0, status1, bytes read)."""
        for _ in range(STATUS_POLL_LIMIT):
            self._write([REPORT_STATUS_REQUEST, 0x01])
            response = self._read_report(REPORT_STATUS_RESPONSE)
            status0, status1 = response[1], response[2]
            bytes_read = int.from_bytes(bytes(response[5:7]), "big")
            if status0 in (STATUS_COMPLETE, STATUS_ERROR):
                return status0, status1, bytes_read
            time.sleep(STATUS_POLL_INTERVAL)
        self._write([REPORT_CANCEL, 0x01])
        raise BusTransactionError(
            f"CP2112 transfer to 0x{self._slave_address:x} did not complete"
        )

    def _classify(
        self, status0: int, status1: int, write_length: int, bytes_read: int
    ) -> TransferStatus:
        if status0 == STATUS_COMPLETE or status1 == ERROR_SUCCEEDED_AFTER_RETRIES:
            return FullTransfer()
        if status1 == ERROR_ADDRESS_NACKED:
            return SlaveAddressNotAcknowledged()
        if status1 == ERROR_WRITE_INCOMPLETE:
            return PartialTransfer(0)
        if status1 == ERROR_READ_INCOMPLETE:
            return PartialTransfer(write_length + bytes_read)
        raise BusTransactionError(
            f"CP2112 transfer to 0x{self._slave_address:x} failed "
            f"(status 0x{status0:02x}/0x{status1:02x})"
        )

    def _collect(self, count: int) -> bytes:
        """Fetch ``count`` bytes buffered by the bridge after a read."""
        if count <= 0:
            return b""
        self._write([REPORT_READ_FORCE_SEND, *count.to_bytes(2, "big")])
        data = bytearray()
        while len(data) < count:
            response = self._read_report(REPORT_READ_RESPONSE)
            length = response[2]
            if length == 0:
                break
            data.extend(response[3 : 3 + length])
        return bytes(data[:count])

    def write_partial(self, data: bytes) -> TransferStatus:
        if len(data) > MAX_WRITE:
            raise TransferTooLargeError(
                f"CP2112 writes are limited to {MAX_WRITE} bytes, got {len(data)}"
            )
        self._write([REPORT_WRITE, self._address_byte, len(data), *data])
        status0, status1, _ = self._wait_for_completion()
        return self._classify(status0, status1, len(data), 0)

    def read_partial(self, length: int) -> tuple[TransferStatus, bytes]:
        if length > MAX_READ:
            raise TransferTooLargeError(
                f"CP2112 reads are limited to {MAX_READ} bytes, got {length}"
            )
        self._write([REPORT_READ_REQUEST, self._address_byte, *length.to_bytes(2, "big")])
        status0, status1, bytes_read = self._wait_for_completion()
        status = self._classify(status0, status1, 0, bytes_read)
        if isinstance(status, SlaveAddressNotAcknowledged):
            return status, b""
        if isinstance(status, FullTransfer):
            bytes_read = length
        return status, self._collect(bytes_read)

    def write_read_partial(
        self, data: bytes, length: int
    ) -> tuple[TransferStatus, bytes]:
        if len(data) > MAX_WRITE_READ_TARGET or length > MAX_READ:
            raise TransferTooLargeError(
                f"CP2112 write-read is limited to {MAX_WRITE_READ_TARGET} bytes out "
                f"and {MAX_READ} bytes in"
            )
        self._write([
            REPORT_WRITE_READ_REQUEST,
            self._address_byte,
            *length.to_bytes(2, "big"),
            len(data),
            *data,
        ])
        status0, status1, bytes_read = self._wait_for_completion()
        status = self._classify(status0, status1, len(data), bytes_read)
        if isinstance(status, SlaveAddressNotAcknowledged):
            return status, b""
        if isinstance(status, FullTransfer):
            bytes_read = length
        elif status.bytes_transferred <= len(data):
            bytes_read = 0
        return status, self._collect(bytes_read)

    def connection_info(self) -> ConnectionInfo:
        return ConnectionInfo(
            slave_address=self._slave_address,
            bus_speed=self._bus_speed,
            device_id=self._device_id,
        )

    def close(self) -> None:
        """Close the HID device and release the address claim."""
        if self._device is None:
            return
        try:
            self._device.close()
        except OSError as e:
            logger.warning("Error closing %s: %s", self._device_id, e)
        finally:
            self._device = None
            self._claim.release()
            logger.info("Closed %s", self._device_id)
