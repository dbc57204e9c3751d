"""Transfer request and result models.

A bus transaction is described by a :data:`TransferKind` (what to send and
how much to read) and answered by a :class:`TransferOutcome`: a
:data:`TransferStatus` plus whatever read-phase bytes are valid to show.

Status variants::

    FullTransfer                  every requested byte was exchanged
    PartialTransfer(n)            n < requested bytes exchanged, address was ACKed
    SlaveAddressNotAcknowledged   no device answered; no data is valid
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


def _check_buffer(data: bytes) -> bytes:
    data = bytes(data)
    if not data:
        raise ValueError("Zero-length buffers are not allowed")
    return data


def _check_length(length: int) -> int:
    if length <= 0:
        raise ValueError(f"Read length must be > 0, got {length}")
    return length


@dataclass(frozen=True)
class Write:
    """Write ``data`` to the slave."""

    data: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", _check_buffer(self.data))

    @property
    def write_length(self) -> int:
        return len(self.data)

    @property
    def read_length(self) -> int:
        return 0

    @property
    def requested_length(self) -> int:
        return self.write_length


@dataclass(frozen=True)
class Read:
    """Read ``length`` bytes from the slave."""

    length: int

    def __post_init__(self) -> None:
        _check_length(self.length)

    @property
    def write_length(self) -> int:
        return 0

    @property
    def read_length(self) -> int:
        return self.length

    @property
    def requested_length(self) -> int:
        return self.length


@dataclass(frozen=True)
class WriteRead:
    """Write ``data``, issue a repeated start, then read ``length`` bytes."""

    data: bytes
    length: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", _check_buffer(self.data))
        _check_length(self.length)

    @property
    def write_length(self) -> int:
        return len(self.data)

    @property
    def read_length(self) -> int:
        return self.length

    @property
    def requested_length(self) -> int:
        return self.write_length + self.length


TransferKind = Union[Write, Read, WriteRead]


@dataclass(frozen=True)
class FullTransfer:
    """All requested bytes were transferred."""


@dataclass(frozen=True)
class PartialTransfer:
    """The transfer stopped early after ``bytes_transferred`` bytes.

    For a write-read the count covers both phases, write phase first.
    """

    bytes_transferred: int


@dataclass(frozen=True)
class SlaveAddressNotAcknowledged:
    """The slave address was NACKed."""


TransferStatus = Union[FullTransfer, PartialTransfer, SlaveAddressNotAcknowledged]


@dataclass(frozen=True)
class TransferOutcome:
    """Classified result of one bus transaction."""

    status: TransferStatus
    data_read: bytes = b""

    def __repr__(self) -> str:
        return (
            f"TransferOutcome(status={self.status!r}, "
            f"data_read={self.data_read.hex(' ') if self.data_read else '(empty)'})"
        )
