"""Shared fixtures: a controllable clock and stores on a temp directory."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest
from prayerlog.novenas.scheduler import NovenaScheduler
from prayerlog.sessions.store import SessionStore
from prayerlog.storage.device import DeviceIdentity
from prayerlog.storage.local import LocalStorage

START = datetime(2024, 1, 15, 9, 0, tzinfo=UTC)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path)


@pytest.fixture
def device(storage: LocalStorage) -> DeviceIdentity:
    return DeviceIdentity(storage)


@pytest.fixture
def store(storage: LocalStorage, device: DeviceIdentity, clock: FakeClock) -> SessionStore:
    return SessionStore(storage, device, clock=clock)


@pytest.fixture
def scheduler(
    storage: LocalStorage, store: SessionStore, device: DeviceIdentity, clock: FakeClock
) -> NovenaScheduler:
    return NovenaScheduler(storage, store, device, clock=clock)
