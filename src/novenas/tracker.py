"""54-day rosary novena tracker.

One tracker per device, stored under ``novena-tracker-data``: the start
date, the intention, and which of the 54 days have been prayed.  Days
are toggled freely; there is no calendar gating as there is for the
nine-day novenas.
"""

from __future__ import annotations

import logging

from prayerlog.catalog import FIFTY_FOUR_DAY_TOTAL
from prayerlog.errors import PersistenceError
from prayerlog.novenas.models import TRACKER_VERSION, RosaryNovenaProgress
from prayerlog.shared.clock import Clock, utc_now
from prayerlog.storage.local import LocalStorage
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

TRACKER_KEY = "novena-tracker-data"


class RosaryNovenaTracker:
    """Start, mark and clear the 54-day rosary novena."""

    def __init__(self, storage: LocalStorage, clock: Clock = utc_now) -> None:
        self._storage = storage
        self._clock = clock
        self._last_write_ok = True
        self._progress = self._load()

    # ── Private helpers ──────────────────────────────────────────

    def _load(self) -> RosaryNovenaProgress:
        raw = self._storage.read_json(TRACKER_KEY)
        if raw is None:
            return RosaryNovenaProgress()
        try:
            progress = RosaryNovenaProgress.model_validate(raw)
        except PydanticValidationError as exc:
            logger.warning("Invalid 54-day novena tracker, starting fresh: %s", exc)
            return RosaryNovenaProgress()
        if progress.version != TRACKER_VERSION:
            logger.info(
                "Loaded 54-day novena tracker version %d (current is %d)",
                progress.version,
                TRACKER_VERSION,
            )
        return progress

    def _save(self, progress: RosaryNovenaProgress) -> RosaryNovenaProgress:
        self._progress = progress.model_copy(
            update={"version": TRACKER_VERSION, "last_updated": self._clock()}
        )
        try:
            self._storage.write_json(TRACKER_KEY, self._progress.to_record())
        except PersistenceError as exc:
            logger.error("%s; change kept in memory only and may not survive a restart", exc)
            self._last_write_ok = False
        else:
            self._last_write_ok = True
        return self._progress

    def _set_day(self, day: int, prayed: bool) -> RosaryNovenaProgress:
        if not 1 <= day <= FIFTY_FOUR_DAY_TOTAL:
            raise ValueError(f"54-day novena day must be in 1..{FIFTY_FOUR_DAY_TOTAL}, got {day}")
        days = self._progress.completed_days
        update: dict[str, object] = {"completed_days": days | {day} if prayed else days - {day}}
        if not self._progress.is_started:
            update["start_date"] = self._clock()
        return self._save(self._progress.model_copy(update=update))

    # ── Write operations ─────────────────────────────────────────

    def start(self, intention: str | None = None) -> RosaryNovenaProgress:
        """Begin the novena today, discarding any earlier progress."""
        if self._progress.completed_days:
            logger.info(
                "Restarting 54-day novena; dropping %d prayed day(s)",
                len(self._progress.completed_days),
            )
        progress = RosaryNovenaProgress(start_date=self._clock(), intention=intention or "")
        return self._save(progress)

    def set_intention(self, intention: str) -> RosaryNovenaProgress:
        return self._save(self._progress.model_copy(update={"intention": intention}))

    def toggle_day(self, day: int) -> bool:
        """Flip ``day`` between prayed and not prayed.

        Returns True if the day is now marked prayed.  Marking a day on a
        tracker that was never started starts it now.  Raises ValueError
        for a day outside 1..54.
        """
        prayed = day not in self._progress.completed_days
        self._set_day(day, prayed)
        return prayed

    def mark_day(self, day: int) -> RosaryNovenaProgress:
        """Mark ``day`` prayed; a day already marked stays marked."""
        if day in self._progress.completed_days:
            return self._progress
        return self._set_day(day, True)

    def clear(self) -> None:
        """Forget all progress and delete the stored tracker."""
        self._progress = RosaryNovenaProgress()
        try:
            self._storage.remove(TRACKER_KEY)
        except PersistenceError as exc:
            logger.error("%s", exc)
            self._last_write_ok = False
        else:
            self._last_write_ok = True

    # ── Read operations ──────────────────────────────────────────

    @property
    def progress(self) -> RosaryNovenaProgress:
        return self._progress

    @property
    def last_write_ok(self) -> bool:
        return self._last_write_ok

    def current_day(self) -> int:
        """The day to pray next."""
        return self._progress.current_day

    def percent_complete(self) -> int:
        return self._progress.percent_complete
