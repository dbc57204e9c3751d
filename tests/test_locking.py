"""Tests for exclusive address claims."""

import pytest

from i2c_test_tool.exceptions import DeviceAcquisitionError, DeviceBusyError
from i2c_test_tool.transport.locking import AddressClaim


def test_second_claim_is_busy(tmp_path):
    first = AddressClaim(tmp_path, "i2c-1", 0x57)
    first.acquire()
    try:
        with pytest.raises(DeviceBusyError, match="0x57 on bus i2c-1 is in use"):
            AddressClaim(tmp_path, "i2c-1", 0x57).acquire()
    finally:
        first.release()


def test_release_allows_reclaim(tmp_path):
    claim = AddressClaim(tmp_path, "i2c-1", 0x57)
    claim.acquire()
    claim.release()
    assert not claim.held
    again = AddressClaim(tmp_path, "i2c-1", 0x57)
    again.acquire()
    assert again.held
    again.release()


def test_different_addresses_do_not_conflict(tmp_path):
    a = AddressClaim(tmp_path, "i2c-1", 0x50)
    b = AddressClaim(tmp_path, "i2c-1", 0x51)
    a.acquire()
    b.acquire()
    a.release()
    b.release()


def test_bus_id_is_sanitized(tmp_path):
    claim = AddressClaim(tmp_path, "/dev/i2c-1 (bcm)", 0x10)
    assert claim.path.parent == tmp_path
    assert "/" not in claim.path.name


def test_release_is_idempotent(tmp_path):
    claim = AddressClaim(tmp_path, "i2c-1", 0x20)
    claim.release()
    claim.acquire()
    claim.release()
    claim.release()


def test_missing_lock_dir_is_acquisition_error(tmp_path):
    claim = AddressClaim(tmp_path / "missing", "i2c-1", 0x57)
    with pytest.raises(DeviceAcquisitionError, match="0x57 on bus i2c-1") as exc_info:
        claim.acquire()
    assert not isinstance(exc_info.value, DeviceBusyError)
    assert not claim.held
