"""Daily streak computation.

A streak is the run of consecutive calendar days, ending today, that
each have at least one completed session.  Multiple completions on the
same day count once.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import TYPE_CHECKING

from prayerlog.streaks.models import StreakState

if TYPE_CHECKING:
    from prayerlog.sessions.models import PrayerSession


def completed_dates(sessions: Iterable[PrayerSession]) -> list[date]:
    """Distinct dates with at least one completed session, newest first."""
    return sorted({s.date for s in sessions if s.completed}, reverse=True)


def current_streak(dates_desc: list[date], today: date) -> int:
    """Length of the unbroken run of ``dates_desc`` ending at ``today``.

    ``dates_desc`` must be distinct and sorted newest first.  Returns 0
    when there is no prayer dated today, even if yesterday's run is intact.
    """
    streak = 0
    for offset, prayed_on in enumerate(dates_desc):
        if prayed_on != today - timedelta(days=offset):
            break
        streak += 1
    return streak


def recompute(
    sessions: Iterable[PrayerSession],
    today: date,
    previous: StreakState | None = None,
) -> StreakState:
    """Recompute the streak aggregate from the full session collection."""
    dates = completed_dates(sessions)
    current = current_streak(dates, today)
    longest = max(previous.longest_streak if previous else 0, current)
    return StreakState(
        current_streak=current,
        longest_streak=longest,
        last_prayer_date=dates[0] if dates else None,
        total_prayers=len(dates),
    )
