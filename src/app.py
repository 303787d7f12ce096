"""Wiring for the session store, the novena scheduler and the 54-day tracker."""

from __future__ import annotations

import logging
from pathlib import Path

from prayerlog.config import PrayerlogConfig
from prayerlog.novenas.scheduler import NovenaScheduler
from prayerlog.novenas.tracker import RosaryNovenaTracker
from prayerlog.sessions.store import SessionStore
from prayerlog.shared.clock import Clock, utc_now
from prayerlog.storage.device import DeviceIdentity
from prayerlog.storage.local import LocalStorage

logger = logging.getLogger(__name__)


class PrayerJournal:
    """One device's prayer data: sessions, streak and novenas.

    The device identity is resolved once here and shared by both stores.
    """

    def __init__(self, storage: LocalStorage, clock: Clock = utc_now) -> None:
        self.storage = storage
        self.device = DeviceIdentity(storage)
        self.sessions = SessionStore(storage, self.device, clock=clock)
        self.novenas = NovenaScheduler(storage, self.sessions, self.device, clock=clock)
        self.rosary_novena = RosaryNovenaTracker(storage, clock=clock)

    @property
    def last_write_ok(self) -> bool:
        return (
            self.sessions.last_write_ok
            and self.novenas.last_write_ok
            and self.rosary_novena.last_write_ok
        )


def open_journal(
    config: PrayerlogConfig,
    data_dir: Path | None = None,
    clock: Clock = utc_now,
) -> PrayerJournal:
    """Open the journal stored under ``data_dir`` or the configured directory."""
    root = data_dir if data_dir is not None else config.storage.path
    logger.debug("Opening prayer journal at %s", root)
    return PrayerJournal(LocalStorage(root), clock=clock)
