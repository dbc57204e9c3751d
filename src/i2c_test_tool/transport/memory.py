"""In-memory bus handle for tests and dry runs."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ..models.connection import BusSpeed, ConnectionInfo
from ..models.transfer import FullTransfer, TransferStatus

logger = logging.getLogger(__name__)

REGISTER_COUNT = 256


@dataclass
class Call:
    """One recorded bus call."""

    method: str
    data: bytes = b""
    length: int = 0


@dataclass
class InMemoryBusHandle:
    """A bus handle that never touches hardware.

    With ``responses``, each transfer pops the next scripted entry: a bare
    status, a ``(status, bytes)`` pair, or an exception instance to raise.
    Entries are returned as-is, so a script can also feed the engine values
    it does not model.

    Without a script it behaves like a simple register-file slave: the
    first written byte sets the register pointer, further bytes are stored
    from there, and reads return bytes from the pointer. The pointer
    auto-increments and wraps at 256.
    """

    slave_address: int = 0x50
    bus_speed: BusSpeed | int = BusSpeed.STANDARD_MODE
    device_id: str = "memory"
    responses: Iterable[Any] | None = None
    registers: bytearray = field(default_factory=lambda: bytearray(REGISTER_COUNT))
    pointer: int = 0
    calls: list[Call] = field(default_factory=list)
    closed: bool = False

    def __post_init__(self) -> None:
        self._script = deque(self.responses) if self.responses is not None else None

    def __enter__(self) -> InMemoryBusHandle:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _next(self) -> Any:
        if not self._script:
            raise AssertionError("InMemoryBusHandle script exhausted")
        response = self._script.popleft()
        if isinstance(response, BaseException):
            raise response
        return response

    def _scripted_pair(self) -> tuple[Any, bytes]:
        response = self._next()
        if isinstance(response, tuple):
            status, data = response
            return status, bytes(data)
        return response, b""

    def _store(self, data: bytes) -> None:
        self.pointer = data[0]
        for byte in data[1:]:
            self.registers[self.pointer] = byte
            self.pointer = (self.pointer + 1) % REGISTER_COUNT

    def _load(self, length: int) -> bytes:
        out = bytearray()
        for _ in range(length):
            out.append(self.registers[self.pointer])
            self.pointer = (self.pointer + 1) % REGISTER_COUNT
        return bytes(out)

    def write_partial(self, data: bytes) -> TransferStatus:
        self.calls.append(Call("write", bytes(data)))
        if self._script is not None:
            return self._next()
        self._store(data)
        return FullTransfer()

    def read_partial(self, length: int) -> tuple[TransferStatus, bytes]:
        self.calls.append(Call("read", length=length))
        if self._script is not None:
            return self._scripted_pair()
        return FullTransfer(), self._load(length)

    def write_read_partial(
        self, data: bytes, length: int
    ) -> tuple[TransferStatus, bytes]:
        self.calls.append(Call("writeread", bytes(data), length))
        if self._script is not None:
            return self._scripted_pair()
        self._store(data)
        return FullTransfer(), self._load(length)

    def connection_info(self) -> ConnectionInfo:
        return ConnectionInfo(
            slave_address=self.slave_address,
            bus_speed=self.bus_speed,
            device_id=self.device_id,
        )

    def close(self) -> None:
        if not self.closed:
            logger.debug("Closed in-memory device %s", self.device_id)
        self.closed = True
