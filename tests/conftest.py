"""Shared fixtures."""

from __future__ import annotations

import io

import pytest

from i2c_test_tool.console import Session
from i2c_test_tool.transport.memory import InMemoryBusHandle


def make_session(lines: list[str], responses=None, **kwargs) -> Session:
    """A session reading ``lines`` and writing into a StringIO."""
    device = InMemoryBusHandle(responses=responses, **kwargs)
    stdin = io.StringIO("".join(line + "\n" for line in lines))
    return Session(device, stdin=stdin, stdout=io.StringIO())


@pytest.fixture
def config(tmp_path):
    from i2c_test_tool.config import ToolConfig

    return ToolConfig(
        backend="memory",
        sysfs_root=tmp_path / "sys",
        dev_root=tmp_path / "dev",
        lock_dir=tmp_path,
    )
