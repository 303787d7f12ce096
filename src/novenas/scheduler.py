"""Nine-day novena progression.

Tracks any number of concurrently active novenas.  A day becomes
available once its calendar offset from the start has elapsed, so missed
days can be caught up later but future days cannot be prayed early.
Each completed day is also recorded as a ``novena-day`` session so it
shows up in history and search.
"""

from __future__ import annotations

import logging
import math
import uuid
from datetime import timedelta

from prayerlog.catalog import NOVENA_INFO, NovenaType
from prayerlog.errors import PersistenceError, RecordValidationError, StateError
from prayerlog.novenas.models import (
    NOVENA_LENGTH,
    ActiveNovena,
    DayCompletion,
    DayRejected,
    NovenaStats,
)
from prayerlog.sessions.models import JournalPatch, NovenaDay, SessionType
from prayerlog.sessions.store import SessionStore
from prayerlog.shared.clock import Clock, utc_now
from prayerlog.storage.device import DeviceIdentity
from prayerlog.storage.local import LocalStorage
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

ACTIVE_NOVENAS_KEY = "active-novenas"

_NOVENA_LIST = TypeAdapter(list[ActiveNovena])

# Alias to avoid shadowing by NovenaScheduler.list method
_list = list


class NovenaScheduler:
    """Start, advance and remove nine-day novenas."""

    def __init__(
        self,
        storage: LocalStorage,
        sessions: SessionStore,
        device: DeviceIdentity,
        clock: Clock = utc_now,
    ) -> None:
        self._storage = storage
        self._sessions = sessions
        self._device = device
        self._clock = clock
        self._last_write_ok = True
        self._novenas = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> _list[ActiveNovena]:
        raw = self._storage.read_json(ACTIVE_NOVENAS_KEY)
        if raw is None:
            return []
        try:
            return self._parse(raw)
        except RecordValidationError as exc:
            logger.warning("Invalid active novenas, starting fresh: %s", exc)
            return []

    @staticmethod
    def _parse(raw: object) -> _list[ActiveNovena]:
        if not isinstance(raw, _list):
            raise RecordValidationError(f"expected a list, got {type(raw).__name__}")
        try:
            return _NOVENA_LIST.validate_python(raw)
        except PydanticValidationError as exc:
            raise RecordValidationError(str(exc)) from exc

    def _save(self) -> bool:
        try:
            self._storage.write_json(ACTIVE_NOVENAS_KEY, [n.to_record() for n in self._novenas])
        except PersistenceError as exc:
            logger.error("%s; change kept in memory only and may not survive a restart", exc)
            self._last_write_ok = False
            return False
        self._last_write_ok = True
        return True

    def _replace(self, novena: ActiveNovena) -> None:
        self._novenas = [novena if n.id == novena.id else n for n in self._novenas]

    def _unavailable_reason(self, novena: ActiveNovena, day: int) -> str | None:
        if novena.is_completed:
            return f"novena {novena.id} is already completed"
        if not 1 <= day <= NOVENA_LENGTH:
            return f"day must be between 1 and {NOVENA_LENGTH}, got {day}"
        if day in novena.completed_days:
            return f"day {day} of novena {novena.id} is already completed"
        elapsed = self.days_since_start(novena)
        if elapsed < day - 1:
            return f"day {day} opens in {day - 1 - elapsed} day(s)"
        return None

    # ── Write operations ─────────────────────────────────────────

    def start_novena(self, kind: NovenaType, intention: str | None = None) -> ActiveNovena:
        """Begin a new novena starting now."""
        novena = ActiveNovena(
            id=str(uuid.uuid4()),
            kind=kind,
            start_date=self._clock(),
            completed_days=frozenset(),
            intention=intention or None,
            device_id=self._device.value,
        )
        self._novenas.append(novena)
        self._save()
        logger.info("Started %s novena %s", kind, novena.id)
        return novena

    def complete_day(
        self,
        novena_id: str,
        day: int,
        journal: JournalPatch | None = None,
    ) -> DayCompletion | DayRejected | None:
        """Mark ``day`` completed and record it as a session.

        Returns None if the novena does not exist, and a DayRejected
        carrying a StateError if the day cannot be prayed now (out of
        range, already completed, not yet open, or the novena is
        finished).  The day-1 intention is stored on the novena unless
        one was already set.
        """
        novena = self.get(novena_id)
        if novena is None:
            logger.warning("Cannot complete day %d of unknown novena %s", day, novena_id)
            return None

        reason = self._unavailable_reason(novena, day)
        if reason is not None:
            logger.info("Rejected day %d of novena %s: %s", day, novena_id, reason)
            return DayRejected(novena=novena, day=day, error=StateError(reason))

        update: dict[str, object] = {"completed_days": novena.completed_days | {day}}
        if day == 1 and journal is not None and journal.intention and not novena.intention:
            update["intention"] = journal.intention
        updated = novena.model_copy(update=update)
        self._replace(updated)
        self._save()

        session = self._sessions.record_completed(
            NovenaDay(novena=novena.kind, novena_id=novena.id, day=day),
            duration=NOVENA_INFO[novena.kind].estimated_duration,
            journal=journal,
        )
        if updated.is_completed:
            logger.info("Novena %s completed", novena_id)
        return DayCompletion(novena=updated, session=session)

    def remove_novena(self, novena_id: str) -> bool:
        """Delete a novena and every session recorded for it.

        Returns False if the novena does not exist.
        """
        if self.get(novena_id) is None:
            return False
        self._novenas = [n for n in self._novenas if n.id != novena_id]
        self._save()
        self._sessions.remove_novena_sessions(novena_id)
        logger.info("Removed novena %s", novena_id)
        return True

    def cleanup_completed(self, older_than_days: int = 30) -> int:
        """Forget completed novenas started before the cutoff.

        Their sessions stay in history.  Returns how many were dropped.
        """
        cutoff = self._clock() - timedelta(days=older_than_days)
        kept = [n for n in self._novenas if not n.is_completed or n.start_date >= cutoff]
        dropped = len(self._novenas) - len(kept)
        if dropped:
            self._novenas = kept
            self._save()
        return dropped

    # ── Read operations ──────────────────────────────────────────

    @property
    def last_write_ok(self) -> bool:
        return self._last_write_ok and self._sessions.last_write_ok

    def get(self, novena_id: str) -> ActiveNovena | None:
        for novena in self._novenas:
            if novena.id == novena_id:
                return novena
        return None

    def list(self, include_completed: bool = True) -> _list[ActiveNovena]:
        if include_completed:
            return _list(self._novenas)
        return [n for n in self._novenas if not n.is_completed]

    def days_since_start(self, novena: ActiveNovena) -> int:
        """Whole days elapsed since ``novena.start_date``."""
        return math.floor((self._clock() - novena.start_date) / timedelta(days=1))

    def can_play_day(self, novena: ActiveNovena, day: int) -> bool:
        """True if ``day`` is open for ``novena`` right now."""
        return self._unavailable_reason(novena, day) is None

    def next_available_day(self, novena: ActiveNovena) -> int | None:
        """First uncompleted day that is open now, or None."""
        for day in range(1, NOVENA_LENGTH + 1):
            if self.can_play_day(novena, day):
                return day
        return None

    def stats(self) -> NovenaStats:
        days_prayed = len(self._sessions.list(session_type=SessionType.NOVENA_DAY, completed=True))
        completed = sum(1 for n in self._novenas if n.is_completed)
        return NovenaStats(
            total_started=len(self._novenas),
            total_completed=completed,
            total_days_prayed=days_prayed,
            current_active=len(self._novenas) - completed,
        )
