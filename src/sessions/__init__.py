"""Prayer sessions: models, journal merge, migration, queries and store."""

from prayerlog.sessions.models import (
    Chaplet,
    DailyRosary,
    FiftyFourDayNovena,
    JournalPatch,
    Mood,
    NovenaDay,
    PrayerSession,
    PrayerStatistics,
    SessionKind,
    SessionType,
    SyncStatus,
)
from prayerlog.sessions.journal import merge_journal
from prayerlog.sessions.migration import migrate_legacy
from prayerlog.sessions.query import TimePeriod, recent_sessions, search_sessions
from prayerlog.sessions.store import SessionStore

__all__ = [
    "Chaplet",
    "DailyRosary",
    "FiftyFourDayNovena",
    "JournalPatch",
    "Mood",
    "NovenaDay",
    "PrayerSession",
    "PrayerStatistics",
    "SessionKind",
    "SessionStore",
    "SessionType",
    "SyncStatus",
    "TimePeriod",
    "merge_journal",
    "migrate_legacy",
    "recent_sessions",
    "search_sessions",
]
