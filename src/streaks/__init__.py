"""Daily prayer streaks."""

from prayerlog.streaks.engine import completed_dates, current_streak, recompute
from prayerlog.streaks.models import StreakState

__all__ = [
    "StreakState",
    "completed_dates",
    "current_streak",
    "recompute",
]
