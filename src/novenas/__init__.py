"""Nine-day novenas and the 54-day rosary novena tracker."""

from prayerlog.novenas.models import (
    NOVENA_LENGTH,
    ActiveNovena,
    DayCompletion,
    DayRejected,
    NovenaStats,
    RosaryNovenaProgress,
)
from prayerlog.novenas.scheduler import ACTIVE_NOVENAS_KEY, NovenaScheduler
from prayerlog.novenas.tracker import TRACKER_KEY, RosaryNovenaTracker

__all__ = [
    "ACTIVE_NOVENAS_KEY",
    "NOVENA_LENGTH",
    "TRACKER_KEY",
    "ActiveNovena",
    "DayCompletion",
    "DayRejected",
    "NovenaScheduler",
    "NovenaStats",
    "RosaryNovenaProgress",
    "RosaryNovenaTracker",
]
