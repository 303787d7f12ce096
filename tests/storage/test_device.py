"""Tests for DeviceIdentity."""

import uuid
from pathlib import Path

from prayerlog.storage.device import DEVICE_ID_KEY, DeviceIdentity
from prayerlog.storage.local import LocalStorage


class TestDeviceIdentity:
    def test_generates_and_persists(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        device_id = DeviceIdentity(storage).value

        assert uuid.UUID(device_id).version == 4
        assert storage.read_json(DEVICE_ID_KEY) == device_id

    def test_reuses_stored_id(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        first = DeviceIdentity(storage).value
        second = DeviceIdentity(storage).value
        assert first == second

    def test_resolved_once_per_instance(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        device = DeviceIdentity(storage)
        value = device.value
        storage.write_json(DEVICE_ID_KEY, "changed-elsewhere")
        assert device.value == value
        assert str(device) == value

    def test_malformed_value_is_replaced(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        storage.write_json(DEVICE_ID_KEY, {"not": "a string"})
        device_id = DeviceIdentity(storage).value
        assert isinstance(device_id, str)
        assert storage.read_json(DEVICE_ID_KEY) == device_id

    def test_unwritable_storage_still_returns_id(self, tmp_path: Path, caplog):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        device_id = DeviceIdentity(LocalStorage(blocker)).value
        assert device_id
        assert "Could not persist device id" in caplog.text
