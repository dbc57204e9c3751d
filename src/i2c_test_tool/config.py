"""Runtime configuration, read from ``I2C_TEST_TOOL_*`` environment variables."""

from __future__ import annotations

import logging
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .models.connection import BusSpeed

ENV_PREFIX = "I2C_TEST_TOOL_"

BACKENDS = ("linux", "cp2112", "memory")

BUS_SPEEDS: dict[str, BusSpeed] = {
    "standard": BusSpeed.STANDARD_MODE,
    "fast": BusSpeed.FAST_MODE,
}


@dataclass
class ToolConfig:
    """Backend selection and environment-specific paths."""

    backend: str = "linux"
    bus_speed: BusSpeed = BusSpeed.STANDARD_MODE
    log_level: str = "WARNING"
    sysfs_root: Path = Path("/sys")
    dev_root: Path = Path("/dev")
    lock_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(
                f"Unknown backend '{self.backend}'. Valid: {list(BACKENDS)}"
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level '{self.log_level}'")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ToolConfig:
        env = os.environ if environ is None else environ
        kwargs: dict = {}

        if f"{ENV_PREFIX}BACKEND" in env:
            kwargs["backend"] = env[f"{ENV_PREFIX}BACKEND"].strip().lower()
        if f"{ENV_PREFIX}BUS_SPEED" in env:
            speed = env[f"{ENV_PREFIX}BUS_SPEED"].strip().lower()
            if speed not in BUS_SPEEDS:
                raise ValueError(
                    f"Unknown bus speed '{speed}'. Valid: {list(BUS_SPEEDS)}"
                )
            kwargs["bus_speed"] = BUS_SPEEDS[speed]
        if f"{ENV_PREFIX}LOG_LEVEL" in env:
            kwargs["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"].strip().upper()
        if f"{ENV_PREFIX}SYSFS_ROOT" in env:
            kwargs["sysfs_root"] = Path(env[f"{ENV_PREFIX}SYSFS_ROOT"])
        if f"{ENV_PREFIX}DEV_ROOT" in env:
            kwargs["dev_root"] = Path(env[f"{ENV_PREFIX}DEV_ROOT"])
        if f"{ENV_PREFIX}LOCK_DIR" in env:
            kwargs["lock_dir"] = Path(env[f"{ENV_PREFIX}LOCK_DIR"])

        return cls(**kwargs)
