"""Tests for LocalStorage: one JSON document per key."""

import json
from pathlib import Path

import pytest
from prayerlog.errors import PersistenceError
from prayerlog.storage.local import LocalStorage


class TestReads:
    def test_missing_key_returns_none(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        assert storage.read_text("prayer-sessions") is None
        assert storage.read_json("prayer-sessions") is None

    def test_missing_key_returns_default(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        assert storage.read_json("active-novenas", default=[]) == []

    def test_missing_directory_is_fine(self, tmp_path: Path):
        storage = LocalStorage(tmp_path / "not-created")
        assert storage.read_json("deviceId") is None
        assert storage.keys() == []

    def test_corrupt_json_returns_default(self, tmp_path: Path, caplog):
        (tmp_path / "streak-state.json").write_text("{not json", encoding="utf-8")
        storage = LocalStorage(tmp_path)
        assert storage.read_json("streak-state", default={}) == {}
        assert "Corrupt JSON" in caplog.text


class TestWrites:
    def test_round_trip(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        storage.write_json("prayer-sessions", [{"id": "a", "intention": "Paix à tous"}])
        assert storage.read_json("prayer-sessions") == [{"id": "a", "intention": "Paix à tous"}]

    def test_one_file_per_key(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        storage.write_json("deviceId", "abc")
        storage.write_json("streak-state", {"currentStreak": 1})
        assert (tmp_path / "deviceId.json").exists()
        assert json.loads((tmp_path / "streak-state.json").read_text()) == {"currentStreak": 1}
        assert storage.keys() == ["deviceId", "streak-state"]

    def test_creates_data_dir(self, tmp_path: Path):
        storage = LocalStorage(tmp_path / "nested" / "data")
        storage.write_text("deviceId", '"x"')
        assert storage.exists("deviceId")

    def test_write_failure_raises_persistence_error(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")
        storage = LocalStorage(blocker)
        with pytest.raises(PersistenceError):
            storage.write_json("deviceId", "abc")

    def test_remove(self, tmp_path: Path):
        storage = LocalStorage(tmp_path)
        storage.write_json("active-novenas", [])
        assert storage.remove("active-novenas") is True
        assert storage.remove("active-novenas") is False
        assert not storage.exists("active-novenas")


class TestKeys:
    @pytest.mark.parametrize("key", ["", "../escape", "a/b", ".hidden"])
    def test_rejects_unsafe_keys(self, tmp_path: Path, key: str):
        storage = LocalStorage(tmp_path)
        with pytest.raises(ValueError):
            storage.read_json(key)
