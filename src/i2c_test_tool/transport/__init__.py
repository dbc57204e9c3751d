"""Bus handle interface, device acquisition, and backends."""

from .bus import BusHandle, acquire_device
from .memory import InMemoryBusHandle
