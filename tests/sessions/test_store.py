"""Tests for SessionStore: JSON-backed session lifecycle and streak."""

import json
from datetime import date
from pathlib import Path

from prayerlog.catalog import ChapletType, Mystery, NovenaType
from prayerlog.errors import PersistenceError
from prayerlog.sessions.models import (
    Chaplet,
    DailyRosary,
    JournalPatch,
    Mood,
    NovenaDay,
    SessionType,
    SyncStatus,
)
from prayerlog.sessions.query import TimePeriod
from prayerlog.sessions.store import LEGACY_STREAK_KEY, SESSIONS_KEY, STREAK_KEY, SessionStore
from prayerlog.storage.device import DeviceIdentity
from prayerlog.storage.local import LocalStorage

ROSARY = DailyRosary(mystery=Mystery.JOYFUL)


def _reopen(storage: LocalStorage, clock) -> SessionStore:
    return SessionStore(storage, DeviceIdentity(storage), clock=clock)


class TestCreate:
    def test_defaults(self, store: SessionStore, device: DeviceIdentity):
        session = store.create(ROSARY)

        assert session.completed is False
        assert session.version == 1
        assert session.sync_status is SyncStatus.PENDING
        assert session.device_id == device.value
        assert session.date == date(2024, 1, 15)
        assert session.created_at == session.updated_at

    def test_unique_ids(self, store: SessionStore):
        assert store.create(ROSARY).id != store.create(ROSARY).id

    def test_metadata_applied(self, store: SessionStore):
        session = store.create(ROSARY, JournalPatch(intention="For peace", mood=Mood.HOPEFUL))
        assert session.intention == "For peace"
        assert session.mood is Mood.HOPEFUL
        assert session.version == 1

    def test_persists(self, store: SessionStore, storage: LocalStorage, clock):
        session = store.create(ROSARY)
        reopened = _reopen(storage, clock)
        assert reopened.get(session.id) == session

    def test_stored_as_camel_case(self, store: SessionStore, tmp_path: Path):
        store.create(ROSARY)
        raw = json.loads((tmp_path / f"{SESSIONS_KEY}.json").read_text())
        assert raw[0]["kind"] == {"type": "daily-rosary", "mystery": "Joyful"}
        assert "createdAt" in raw[0]


class TestComplete:
    def test_complete_bumps_version(self, store: SessionStore):
        session = store.create(ROSARY)
        completed = store.complete(session.id)

        assert completed is not None
        assert completed.completed is True
        assert completed.version == 2
        assert completed.sync_status is SyncStatus.PENDING

    def test_complete_with_journal(self, store: SessionStore, clock):
        session = store.create(ROSARY, JournalPatch(intention="For my family"))
        clock.advance(minutes=20)
        completed = store.complete(
            session.id,
            duration=20,
            journal=JournalPatch(reflection="Peaceful", gratitudes=["health"]),
        )

        assert completed.duration == 20
        assert completed.intention == "For my family"
        assert completed.reflection == "Peaceful"
        assert completed.gratitudes == ["health"]
        assert completed.updated_at > completed.created_at

    def test_unknown_id_returns_none(self, store: SessionStore, caplog):
        assert store.complete("missing") is None
        assert "unknown session" in caplog.text

    def test_first_completion_starts_streak(self, store: SessionStore):
        store.record_completed(ROSARY)
        assert store.streak.current_streak == 1
        assert store.streak.total_prayers == 1
        assert store.streak.last_prayer_date == date(2024, 1, 15)

    def test_second_session_same_day_keeps_streak(self, store: SessionStore):
        store.record_completed(ROSARY)
        store.record_completed(Chaplet(chaplet=ChapletType.DIVINE_MERCY))
        assert store.streak.current_streak == 1
        assert store.streak.total_prayers == 1

    def test_recomplete_bumps_version_again(self, store: SessionStore):
        session = store.record_completed(ROSARY)
        again = store.complete(session.id, journal=JournalPatch(insights="Trust"))
        assert again.version == 3
        assert again.insights == "Trust"
        assert store.streak.current_streak == 1

    def test_streak_over_days(self, store: SessionStore, clock):
        store.record_completed(ROSARY)
        clock.advance(days=1)
        store.record_completed(ROSARY)
        assert store.streak.current_streak == 2

        clock.advance(days=2)
        store.record_completed(ROSARY)
        assert store.streak.current_streak == 1
        assert store.streak.longest_streak == 2
        assert store.streak.total_prayers == 3

    def test_streak_persists(self, store: SessionStore, storage: LocalStorage, clock):
        store.record_completed(ROSARY)
        assert _reopen(storage, clock).streak == store.streak


class TestUpdateJournal:
    def test_patch_semantics(self, store: SessionStore):
        session = store.create(ROSARY, JournalPatch(intention="Healing", mood=Mood.TROUBLED))
        updated = store.update_journal(session.id, JournalPatch(mood=Mood.PEACEFUL))

        assert updated.intention == "Healing"
        assert updated.mood is Mood.PEACEFUL
        assert updated.completed is False
        assert updated.version == 2

    def test_unknown_id_returns_none(self, store: SessionStore):
        assert store.update_journal("missing", JournalPatch(reflection="x")) is None


class TestRemoveAndClear:
    def test_remove_novena_sessions(self, store: SessionStore):
        for day in (1, 2):
            store.record_completed(NovenaDay(novena=NovenaType.ST_JUDE, novena_id="n1", day=day))
        store.record_completed(NovenaDay(novena=NovenaType.ST_JUDE, novena_id="n2", day=1))
        store.record_completed(ROSARY)

        assert store.remove_novena_sessions("n1") == 2
        assert all(s.novena_id != "n1" for s in store.list())
        assert len(store.list()) == 2
        assert store.remove_novena_sessions("n1") == 0

    def test_clear(self, store: SessionStore, storage: LocalStorage, clock):
        store.record_completed(ROSARY)
        store.clear()
        assert store.list() == []
        assert store.streak.current_streak == 0
        assert _reopen(storage, clock).list() == []


class TestQueries:
    def test_list_filters(self, store: SessionStore):
        store.create(ROSARY)
        store.record_completed(Chaplet(chaplet=ChapletType.ST_MICHAEL))

        assert len(store.list()) == 2
        assert len(store.list(completed=True)) == 1
        assert len(store.list(session_type=SessionType.DAILY_ROSARY)) == 1

    def test_search_and_recent(self, store: SessionStore, clock):
        store.record_completed(ROSARY, journal=JournalPatch(intention="Healing for Anna"))
        clock.advance(days=40)
        store.record_completed(ROSARY, journal=JournalPatch(intention="Thanksgiving"))

        assert [s.intention for s in store.search("healing")] == ["Healing for Anna"]
        assert [s.intention for s in store.recent(30)] == ["Thanksgiving"]

    def test_history_only_completed(self, store: SessionStore):
        store.create(ROSARY)
        done = store.record_completed(ROSARY)
        assert store.history(period=TimePeriod.WEEK) == [done]

    def test_has_prayed_today(self, store: SessionStore, clock):
        assert not store.has_prayed_today()
        store.record_completed(ROSARY)
        assert store.has_prayed_today()
        clock.advance(days=1)
        assert not store.has_prayed_today()

    def test_statistics(self, store: SessionStore):
        store.record_completed(ROSARY, duration=20)
        store.record_completed(DailyRosary(mystery=Mystery.LUMINOUS), duration=30)
        summary = store.statistics()
        assert summary.total_sessions == 2
        assert summary.average_duration == 25
        assert summary.current_streak == 1


class TestLoading:
    def test_corrupt_file_starts_empty(self, storage: LocalStorage, tmp_path: Path, clock):
        (tmp_path / f"{SESSIONS_KEY}.json").write_text("[{broken", encoding="utf-8")
        store = _reopen(storage, clock)
        assert store.list() == []
        assert store.streak.current_streak == 0

    def test_wrong_shape_starts_empty(self, storage: LocalStorage, clock, caplog):
        storage.write_json(SESSIONS_KEY, {"not": "a list"})
        assert _reopen(storage, clock).list() == []
        assert "Invalid session collection" in caplog.text

    def test_invalid_record_starts_empty(self, storage: LocalStorage, clock):
        storage.write_json(SESSIONS_KEY, [{"id": "x", "createdAt": "a", "updatedAt": "b"}])
        assert _reopen(storage, clock).list() == []

    def test_invalid_streak_is_recomputed(self, store: SessionStore, storage, clock):
        store.record_completed(ROSARY)
        storage.write_json(STREAK_KEY, {"currentStreak": -4})
        reopened = _reopen(storage, clock)
        assert reopened.streak.current_streak == 1
        assert reopened.streak.total_prayers == 1

    def test_legacy_records_are_migrated_and_saved(self, storage: LocalStorage, clock):
        storage.write_json(
            SESSIONS_KEY,
            [
                {
                    "id": "rosary-1234567890-abc123",
                    "date": "2024-01-14",
                    "prayerType": "daily-rosary",
                    "mystery": "Sorrowful",
                    "completed": True,
                }
            ],
        )
        store = _reopen(storage, clock)
        (session,) = store.list()

        assert session.id != "rosary-1234567890-abc123"
        assert session.version == 1
        assert session.device_id
        raw = storage.read_json(SESSIONS_KEY)
        assert raw[0]["id"] == session.id
        assert raw[0]["updatedAt"]

    def test_imports_legacy_document(self, storage: LocalStorage, clock):
        storage.write_json(
            LEGACY_STREAK_KEY,
            {
                "currentStreak": 3,
                "longestStreak": 12,
                "lastPrayerDate": "2024-01-14",
                "totalPrayers": 40,
                "sessions": [
                    {
                        "id": "chaplet-1-x",
                        "date": "2024-01-14",
                        "prayerType": "chaplet",
                        "chaplet": "divine-mercy",
                        "completed": True,
                        "intention": "World peace",
                    }
                ],
            },
        )
        store = _reopen(storage, clock)

        assert [s.intention for s in store.list()] == ["World peace"]
        assert store.streak.longest_streak == 12
        assert storage.exists(SESSIONS_KEY)
        assert storage.exists(STREAK_KEY)

        store.record_completed(ROSARY)
        assert store.streak.current_streak == 2
        assert store.streak.longest_streak == 12

    def test_legacy_import_skips_invalid_records(self, storage: LocalStorage, clock, caplog):
        storage.write_json(
            LEGACY_STREAK_KEY,
            {
                "currentStreak": 4,
                "longestStreak": 9,
                "lastPrayerDate": "2024-01-14",
                "totalPrayers": 30,
                "sessions": [
                    {
                        "id": "chaplet-1-x",
                        "date": "2024-01-15",
                        "prayerType": "chaplet",
                        "chaplet": "divine-mercy",
                        "completed": True,
                    },
                    {
                        "id": "chaplet-2-y",
                        "date": "2024-01-14",
                        "prayerType": "chaplet",
                        "chaplet": "st-expeditus",
                        "completed": True,
                    },
                ],
            },
        )
        store = _reopen(storage, clock)

        (session,) = store.list()
        assert session.kind == Chaplet(chaplet=ChapletType.DIVINE_MERCY)
        assert store.streak.current_streak == 1
        assert store.streak.longest_streak == 1
        assert store.streak.total_prayers == 1
        assert "Skipped 1 of 2 legacy session(s)" in caplog.text
        assert storage.exists(LEGACY_STREAK_KEY)

        reopened = _reopen(storage, clock)
        assert [s.id for s in reopened.list()] == [session.id]
        assert reopened.streak.total_prayers == 1


class TestWriteFailures:
    def test_failed_write_keeps_memory_state(
        self, store: SessionStore, storage: LocalStorage, monkeypatch, caplog
    ):
        def _fail(key, value):
            raise PersistenceError(f"disk full writing {key}")

        monkeypatch.setattr(storage, "write_json", _fail)
        session = store.create(ROSARY)

        assert store.last_write_ok is False
        assert store.get(session.id) == session
        assert "disk full" in caplog.text

    def test_recovers_after_successful_write(self, store: SessionStore, storage, monkeypatch):
        def _fail(key, value):
            raise PersistenceError("read-only")

        real_write = storage.write_json
        monkeypatch.setattr(storage, "write_json", _fail)
        store.create(ROSARY)
        assert store.last_write_ok is False

        monkeypatch.setattr(storage, "write_json", real_write)
        store.create(ROSARY)
        assert store.last_write_ok is True
        assert len(storage.read_json(SESSIONS_KEY)) == 2
