"""Tests for merge_journal patch semantics."""

from datetime import UTC, date, datetime, timedelta

from prayerlog.catalog import Mystery
from prayerlog.sessions.journal import merge_journal
from prayerlog.sessions.models import DailyRosary, JournalPatch, Mood, PrayerSession, SyncStatus

CREATED = datetime(2024, 1, 15, 9, 0, tzinfo=UTC)
LATER = CREATED + timedelta(minutes=25)


def _session(**kwargs: object) -> PrayerSession:
    return PrayerSession(
        id="s1",
        device_id="device-1",
        created_at=CREATED,
        updated_at=CREATED,
        sync_status=SyncStatus.SYNCED,
        version=3,
        date=date(2024, 1, 15),
        kind=DailyRosary(mystery=Mystery.JOYFUL),
        **kwargs,  # type: ignore[arg-type]
    )


class TestMergeJournal:
    def test_absent_fields_keep_stored_values(self):
        session = _session(intention="For my family", mood=Mood.PEACEFUL)
        merged = merge_journal(session, JournalPatch(reflection="Grateful"), now=LATER)

        assert merged.intention == "For my family"
        assert merged.mood is Mood.PEACEFUL
        assert merged.reflection == "Grateful"

    def test_explicit_none_clears(self):
        session = _session(intention="For my family")
        merged = merge_journal(session, JournalPatch(intention=None), now=LATER)
        assert merged.intention is None

    def test_bumps_sync_metadata(self):
        merged = merge_journal(_session(), JournalPatch(insights="Patience"), now=LATER)
        assert merged.version == 4
        assert merged.updated_at == LATER
        assert merged.created_at == CREATED
        assert merged.sync_status is SyncStatus.PENDING

    def test_no_patch_still_bumps_version(self):
        merged = merge_journal(_session(), None, now=LATER, completed=True, duration=18)
        assert merged.version == 4
        assert merged.completed is True
        assert merged.duration == 18

    def test_duration_only_written_when_given(self):
        merged = merge_journal(_session(duration=20), JournalPatch(), now=LATER)
        assert merged.duration == 20
        assert merged.completed is False

    def test_input_session_untouched(self):
        session = _session(gratitudes=["health"])
        merged = merge_journal(session, JournalPatch(gratitudes=["family"]), now=LATER)
        assert session.gratitudes == ["health"]
        assert session.version == 3
        assert merged.gratitudes == ["family"]

    def test_lists_are_not_shared_with_patch(self):
        patch = JournalPatch(tags=["advent"])
        merged = merge_journal(_session(), patch, now=LATER)
        merged.tags.append("mutated")
        assert patch.tags == ["advent"]
