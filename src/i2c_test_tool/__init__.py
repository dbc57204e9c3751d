"""i2c-test-tool: interactive console for exercising I2C slave devices.

Issues raw write, read and combined write-then-read transactions against a
single slave address and reports byte-level results, including partial
transfers and address NACKs.
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
