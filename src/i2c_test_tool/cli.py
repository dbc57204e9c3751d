"""Command line entry point: ``i2c-test-tool SlaveAddress [FriendlyName]``."""

from __future__ import annotations

import logging
import os
import sys

from .config import ToolConfig
from .console import BANNER, Session, run_console
from .exceptions import BusTransactionError, DeviceAcquisitionError, EngineFault
from .transport.bus import acquire_device

logger = logging.getLogger(__name__)

USAGE = (
    "I2cTestTool: Command line I2C testing utility\n"
    "Usage: {name} SlaveAddress [FriendlyName]\n"
    "Examples:\n"
    "  {name} 0x57\n"
    "  {name} 0x57 I2C1\n"
)


def parse_address(text: str) -> int:
    """Parse a slave address with C ``strtoul`` base-0 prefixes (0x, 0, decimal)."""
    text = text.strip()
    if len(text) > 1 and text[0] == "0" and text[1].isdigit():
        return int(text, 8)
    return int(text, 0)


def print_usage(name: str, stream=None) -> None:
    (stream or sys.stdout).write(USAGE.format(name=name))


def main(argv: list[str] | None = None) -> int:
    """Run the tool; returns the process exit code."""
    if argv is None:
        argv = sys.argv
    name = os.path.basename(argv[0]) if argv else "i2c-test-tool"
    args = argv[1:]

    if not args:
        sys.stderr.write("Missing required command line parameter SlaveAddress\n\n")
        print_usage(name, sys.stderr)
        return 1

    if args[0] == "-h":
        print_usage(name)
        return 0

    try:
        slave_address = parse_address(args[0])
    except ValueError:
        sys.stderr.write(f"Error: invalid slave address '{args[0]}'\n")
        return 1
    friendly_name = args[1] if len(args) > 1 else None

    try:
        config = ToolConfig.from_env()
    except ValueError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1

    logging.basicConfig(level=config.log_level, stream=sys.stderr)

    try:
        device = acquire_device(slave_address, friendly_name, config)
    except (DeviceAcquisitionError, ValueError) as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1

    try:
        print(BANNER)
        run_console(Session(device))
    except EngineFault as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1
    except BusTransactionError as e:
        sys.stderr.write(f"Error: {e}\n")
    finally:
        device.close()

    return 0
