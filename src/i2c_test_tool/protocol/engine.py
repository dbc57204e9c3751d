"""Transaction engine: issue one bus transaction and classify the result.

Bus handles report a single combined byte count for a write-read. The
engine splits that count at the write/read boundary so callers only ever
see read-phase bytes in ``TransferOutcome.data_read``. This assumes the
handle counts every write-phase byte before any read-phase byte.
"""

from __future__ import annotations

import logging

from ..exceptions import EngineFault
from ..models.transfer import (
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
from ..transport.bus import BusHandle

logger = logging.getLogger(__name__)


def _check_status(kind: TransferKind, status: TransferStatus) -> None:
    if isinstance(status, (FullTransfer, SlaveAddressNotAcknowledged)):
        return
    if isinstance(status, PartialTransfer):
        if not 0 <= status.bytes_transferred < kind.requested_length:
            raise EngineFault(
                f"Partial transfer count {status.bytes_transferred} is outside "
                f"[0, {kind.requested_length}) for {kind!r}"
            )
        return
    raise EngineFault(f"Invalid transfer status value: {status!r}")


def classify(kind: TransferKind, status: TransferStatus, data: bytes = b"") -> TransferOutcome:
    """Build the outcome for ``kind`` from a raw status and returned buffer.

    Args:
        kind: The request that was issued.
        status: Status reported by the bus handle.
        data: Read buffer returned by the handle (ignored for writes).

    Raises:
        EngineFault: If ``status`` is not a known variant, its byte count
            is inconsistent with the request, or a full read came back short.
    """
    _check_status(kind, status)

    if isinstance(status, SlaveAddressNotAcknowledged) or isinstance(kind, Write):
        return TransferOutcome(status)

    if isinstance(status, FullTransfer):
        if len(data) < kind.read_length:
            raise EngineFault(
                f"Full transfer returned {len(data)} of {kind.read_length} "
                f"requested bytes for {kind!r}"
            )
        return TransferOutcome(status, bytes(data[: kind.read_length]))

    # Partial: only bytes past the write phase belong to the read buffer
    bytes_read = status.bytes_transferred - kind.write_length
    if bytes_read > 0:
        return TransferOutcome(status, bytes(data[:bytes_read]))
    return TransferOutcome(status)


def execute(kind: TransferKind, device: BusHandle) -> TransferOutcome:
    """Run exactly one bus transaction for ``kind`` on ``device``.

    No retries are attempted. Errors raised by the handle propagate.
    """
    data = b""
    if isinstance(kind, Write):
        status = device.write_partial(kind.data)
    elif isinstance(kind, Read):
        status, data = device.read_partial(kind.length)
    elif isinstance(kind, WriteRead):
        status, data = device.write_read_partial(kind.data, kind.length)
    else:
        raise EngineFault(f"Unknown transfer kind: {kind!r}")

    outcome = classify(kind, status, data)
    logger.debug(
        "%s -> %r (%d bytes read)", type(kind).__name__, status, len(outcome.data_read)
    )
    return outcome
