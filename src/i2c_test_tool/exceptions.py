"""Exception classes for the I2C test tool."""

from __future__ import annotations


class I2CToolError(Exception):
    """Base exception for all tool errors."""


class ParseError(I2CToolError, ValueError):
    """Malformed command arguments (byte buffer or read length).

    Recovered by the console: the message and ``usage`` hint are shown and
    the command is abandoned.
    """

    def __init__(self, message: str, usage: str | None = None) -> None:
        super().__init__(message)
        self.usage = usage


class UnrecognizedCommandError(I2CToolError):
    """The first word of a line is not a known command."""

    def __init__(self, command: str) -> None:
        super().__init__(f"Unrecognized command: {command}")
        self.command = command


class EngineFault(I2CToolError):
    """A lower layer returned a transfer result the engine does not model."""


class DeviceAcquisitionError(I2CToolError, ConnectionError):
    """The bus handle for the requested slave address could not be opened."""


class DeviceNotFoundError(DeviceAcquisitionError):
    """Zero or several candidate buses matched."""


class DeviceBusyError(DeviceAcquisitionError):
    """The slave address is already claimed by another holder."""


class BusTransactionError(I2CToolError, IOError):
    """Low-level I/O failure below the transfer status abstraction."""


class TransferTooLargeError(I2CToolError, ValueError):
    """A well-formed request exceeds what the bus controller can issue at once.

    Recovered by the console like a :class:`ParseError`; nothing reached the bus.
    """
