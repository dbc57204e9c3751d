"""Data models for transfer requests, results, and connection settings."""

from .connection import BusSpeed, ConnectionInfo
from .transfer import (
    FullTransfer,
    PartialTransfer,
    Read,
    SlaveAddressNotAcknowledged,
    TransferKind,
    TransferOutcome,
    TransferStatus,
    Write,
    WriteRead,
)
