"""JSON-backed prayer session store.

Holds every PrayerSession plus the derived StreakState.  Both are loaded
on init and flushed after every mutation.  Loading never raises: a
missing, unreadable or malformed document falls back to an empty
collection.  A failed write keeps the in-memory change and is reported
through ``last_write_ok``.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

from prayerlog.errors import NotFoundError, PersistenceError, RecordValidationError
from prayerlog.sessions.journal import merge_journal
from prayerlog.sessions.migration import migrate_legacy, needs_migration
from prayerlog.sessions.models import (
    JournalPatch,
    PrayerSession,
    PrayerStatistics,
    SessionKind,
    SessionType,
    SyncStatus,
)
from prayerlog.sessions.query import (
    TimePeriod,
    filter_sessions,
    has_prayed_on,
    prayer_statistics,
    recent_sessions,
    search_sessions,
)
from prayerlog.shared.clock import Clock, calendar_day, utc_now
from prayerlog.storage.device import DeviceIdentity
from prayerlog.storage.local import LocalStorage
from prayerlog.streaks.engine import recompute
from prayerlog.streaks.models import StreakState
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

SESSIONS_KEY = "prayer-sessions"
STREAK_KEY = "streak-state"
# Document written by the first release: streak counters plus sessions.
LEGACY_STREAK_KEY = "rosary-streak-data"

_SESSION_LIST = TypeAdapter(list[PrayerSession])

# Alias to avoid shadowing by SessionStore.list method
_list = list


class SessionStore:
    """CRUD store for prayer sessions and the streak aggregate."""

    def __init__(
        self,
        storage: LocalStorage,
        device: DeviceIdentity,
        clock: Clock = utc_now,
    ) -> None:
        self._storage = storage
        self._device = device
        self._clock = clock
        self._last_write_ok = True
        self._sessions: _list[PrayerSession] = []
        self._streak = StreakState()
        self._load()

    # ── Loading ──────────────────────────────────────────────────

    def _load(self) -> None:
        raw = self._storage.read_json(SESSIONS_KEY)
        if raw is None:
            legacy = self._read_legacy_document()
            if legacy is not None:
                self._import_legacy(legacy)
                return

        migrated = False
        try:
            self._sessions, migrated = self._parse_sessions(raw)
        except RecordValidationError as exc:
            logger.warning("Invalid session collection, starting fresh: %s", exc)
            self._sessions = []

        self._streak = self._load_streak()

        if migrated:
            self._save_sessions()
            self._save_streak()

    def _import_legacy(self, doc: dict[str, Any]) -> None:
        """Copy the legacy document into the current keys.

        Records that fail validation are skipped one by one; the legacy
        document itself is left in place.  The stored counters are only
        trusted when every record imported, otherwise the streak is
        recomputed from what did.
        """
        records = migrate_legacy(doc["sessions"], device_id=self._device.value, now=self._clock())
        self._sessions = []
        for record in records:
            try:
                self._sessions.append(PrayerSession.model_validate(record))
            except PydanticValidationError as exc:
                logger.warning("Skipping invalid legacy session: %s", exc)

        skipped = len(records) - len(self._sessions)
        if skipped:
            logger.warning(
                "Skipped %d of %d legacy session(s); %r left in place",
                skipped,
                len(records),
                LEGACY_STREAK_KEY,
            )
            self._streak = self._load_streak()
        else:
            self._streak = self._load_streak({k: v for k, v in doc.items() if k != "sessions"})

        self._save_sessions()
        self._save_streak()

    def _read_legacy_document(self) -> dict[str, Any] | None:
        doc = self._storage.read_json(LEGACY_STREAK_KEY)
        if isinstance(doc, dict) and isinstance(doc.get("sessions"), _list):
            logger.info(
                "Importing %d session(s) from legacy key %r",
                len(doc["sessions"]),
                LEGACY_STREAK_KEY,
            )
            return doc
        return None

    def _parse_sessions(self, raw: object) -> tuple[_list[PrayerSession], bool]:
        """Validate a raw session array, migrating legacy records first.

        Returns the sessions and whether any record was migrated.
        Raises RecordValidationError if the payload has the wrong shape.
        """
        if raw is None:
            return [], False
        if not isinstance(raw, _list):
            raise RecordValidationError(f"expected a list, got {type(raw).__name__}")

        migrated = any(needs_migration(r) for r in raw)
        if migrated:
            raw = migrate_legacy(raw, device_id=self._device.value, now=self._clock())
        try:
            return _SESSION_LIST.validate_python(raw), migrated
        except PydanticValidationError as exc:
            raise RecordValidationError(str(exc)) from exc

    def _load_streak(self, fallback: dict[str, Any] | None = None) -> StreakState:
        raw = self._storage.read_json(STREAK_KEY)
        if raw is None:
            raw = fallback
        if raw is not None:
            try:
                return StreakState.model_validate(raw)
            except PydanticValidationError:
                logger.warning("Invalid streak state, recomputing from sessions")
        return recompute(self._sessions, calendar_day(self._clock()))

    # ── Persistence ──────────────────────────────────────────────

    def _flush(self, key: str, payload: object) -> bool:
        try:
            self._storage.write_json(key, payload)
        except PersistenceError as exc:
            logger.error("%s; change kept in memory only and may not survive a restart", exc)
            return False
        return True

    def _save_sessions(self) -> bool:
        ok = self._flush(SESSIONS_KEY, [s.to_record() for s in self._sessions])
        self._last_write_ok = ok
        return ok

    def _save_streak(self) -> bool:
        ok = self._flush(STREAK_KEY, self._streak.model_dump(mode="json", by_alias=True))
        self._last_write_ok = self._last_write_ok and ok
        return ok

    @property
    def last_write_ok(self) -> bool:
        """False if the most recent mutation could not be written to disk."""
        return self._last_write_ok

    # ── Private helpers ──────────────────────────────────────────

    def _find_index(self, session_id: str) -> int | None:
        for index, session in enumerate(self._sessions):
            if session.id == session_id:
                return index
        return None

    def _require_index(self, session_id: str) -> int:
        index = self._find_index(session_id)
        if index is None:
            raise NotFoundError(session_id)
        return index

    def _completed_on(self, session: PrayerSession) -> int:
        return sum(1 for s in self._sessions if s.completed and s.date == session.date)

    # ── Write operations ─────────────────────────────────────────

    def create(self, kind: SessionKind, metadata: JournalPatch | None = None) -> PrayerSession:
        """Start a new, not yet completed session dated today.

        ``metadata`` carries the pre-prayer journal fields (usually the
        intention and mood).
        """
        now = self._clock()
        session = PrayerSession(
            id=str(uuid.uuid4()),
            device_id=self._device.value,
            created_at=now,
            updated_at=now,
            sync_status=SyncStatus.PENDING,
            version=1,
            date=calendar_day(now),
            kind=kind,
            completed=False,
        )
        if metadata is not None and not metadata.is_empty():
            session = session.model_copy(update=metadata.changes())
        self._sessions.append(session)
        self._save_sessions()
        logger.debug("Created %s session %s", session.session_type, session.id)
        return session

    def complete(
        self,
        session_id: str,
        duration: int | None = None,
        journal: JournalPatch | None = None,
    ) -> PrayerSession | None:
        """Mark a session completed and merge optional journal data.

        Returns the updated session, or None if the id is unknown.  The
        streak is recomputed when this is the first completed session on
        the session's date.  Completing an already completed session
        re-applies the journal and bumps the version again.
        """
        try:
            index = self._require_index(session_id)
        except NotFoundError:
            logger.warning("Cannot complete unknown session %s", session_id)
            return None

        current = self._sessions[index]
        updated = merge_journal(
            current, journal, now=self._clock(), duration=duration, completed=True
        )
        self._sessions[index] = updated
        self._save_sessions()

        if not current.completed and self._completed_on(updated) == 1:
            self._streak = recompute(
                self._sessions, calendar_day(self._clock()), previous=self._streak
            )
            self._save_streak()
            logger.info(
                "Streak now %d day(s) (longest %d)",
                self._streak.current_streak,
                self._streak.longest_streak,
            )
        return updated

    def update_journal(self, session_id: str, patch: JournalPatch) -> PrayerSession | None:
        """Merge journal data without touching completion.

        Returns the updated session, or None if the id is unknown.
        """
        try:
            index = self._require_index(session_id)
        except NotFoundError:
            logger.warning("Cannot update journal of unknown session %s", session_id)
            return None

        updated = merge_journal(self._sessions[index], patch, now=self._clock())
        self._sessions[index] = updated
        self._save_sessions()
        return updated

    def record_completed(
        self,
        kind: SessionKind,
        duration: int | None = None,
        journal: JournalPatch | None = None,
    ) -> PrayerSession:
        """Create and immediately complete a session."""
        session = self.create(kind)
        completed = self.complete(session.id, duration=duration, journal=journal)
        if completed is None:
            raise NotFoundError(session.id)
        return completed

    def remove_novena_sessions(self, novena_id: str) -> int:
        """Delete every session tagged with ``novena_id``.

        Returns the number of sessions removed.
        """
        kept = [s for s in self._sessions if s.novena_id != novena_id]
        removed = len(self._sessions) - len(kept)
        if removed:
            self._sessions = kept
            self._save_sessions()
            logger.info("Removed %d session(s) of novena %s", removed, novena_id)
        return removed

    def clear(self) -> None:
        """Drop all sessions and reset the streak."""
        self._sessions = []
        self._streak = StreakState()
        ok = True
        for key in (SESSIONS_KEY, STREAK_KEY):
            try:
                self._storage.remove(key)
            except PersistenceError as exc:
                logger.error("%s", exc)
                ok = False
        self._last_write_ok = ok

    # ── Read operations ──────────────────────────────────────────

    @property
    def streak(self) -> StreakState:
        return self._streak

    def get(self, session_id: str) -> PrayerSession | None:
        """Return a session by id, or None if not found."""
        index = self._find_index(session_id)
        return None if index is None else self._sessions[index]

    def list(
        self,
        session_type: SessionType | None = None,
        completed: bool | None = None,
    ) -> _list[PrayerSession]:
        """Return sessions in stored order, optionally filtered."""
        results = self._sessions
        if session_type is not None:
            results = [s for s in results if s.session_type == session_type]
        if completed is not None:
            results = [s for s in results if s.completed == completed]
        return _list(results)

    def search(self, query: str) -> _list[PrayerSession]:
        """Case-insensitive journal text search, newest first."""
        return search_sessions(self._sessions, query)

    def recent(self, days: int) -> _list[PrayerSession]:
        """Sessions dated within the last ``days`` days, newest first."""
        return recent_sessions(self._sessions, days, calendar_day(self._clock()))

    def history(
        self,
        session_type: SessionType | None = None,
        period: TimePeriod = TimePeriod.ALL,
    ) -> _list[PrayerSession]:
        """Completed sessions for the history view, newest first."""
        return filter_sessions(
            self._sessions,
            today=calendar_day(self._clock()),
            session_type=session_type,
            period=period,
        )

    def has_prayed_today(self) -> bool:
        return has_prayed_on(self._sessions, calendar_day(self._clock()))

    def statistics(self) -> PrayerStatistics:
        return prayer_statistics(self._sessions, self._streak)
