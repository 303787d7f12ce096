"""Search, date-window filtering and statistics over session collections.

Pure functions: callers pass the session list and "today" explicitly.
"""

from __future__ import annotations

import calendar
from collections import Counter
from collections.abc import Iterable
from datetime import date, timedelta
from enum import StrEnum

from prayerlog.sessions.models import PrayerSession, PrayerStatistics, SessionType
from prayerlog.streaks.models import StreakState


class TimePeriod(StrEnum):
    """History windows offered by the history view."""

    ALL = "all"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def sort_by_date_desc(sessions: Iterable[PrayerSession]) -> list[PrayerSession]:
    """Most recent first; same-day sessions by creation time."""
    return sorted(sessions, key=lambda s: (s.date, s.created_at), reverse=True)


def search_sessions(sessions: Iterable[PrayerSession], query: str) -> list[PrayerSession]:
    """Case-insensitive substring search over the journal text fields.

    Matches intention, reflection, insights and every gratitude and tag.
    A blank query returns all sessions.
    """
    term = query.strip().casefold()
    if not term:
        return sort_by_date_desc(sessions)
    matches = [
        s for s in sessions if any(term in text.casefold() for text in s.journal_text())
    ]
    return sort_by_date_desc(matches)


def recent_sessions(
    sessions: Iterable[PrayerSession], days: int, today: date
) -> list[PrayerSession]:
    """Sessions dated within the trailing ``days`` window (inclusive)."""
    cutoff = today - timedelta(days=days)
    return sort_by_date_desc(s for s in sessions if s.date >= cutoff)


def _months_before(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def period_cutoff(period: TimePeriod, today: date) -> date | None:
    """First date included in ``period``, or None for all time."""
    if period is TimePeriod.WEEK:
        return today - timedelta(days=7)
    if period is TimePeriod.MONTH:
        return _months_before(today, 1)
    if period is TimePeriod.YEAR:
        return _months_before(today, 12)
    return None


def filter_sessions(
    sessions: Iterable[PrayerSession],
    *,
    today: date,
    session_type: SessionType | None = None,
    period: TimePeriod = TimePeriod.ALL,
    completed_only: bool = True,
) -> list[PrayerSession]:
    """Filter by completion, session type and history window; newest first."""
    cutoff = period_cutoff(period, today)
    results = []
    for session in sessions:
        if completed_only and not session.completed:
            continue
        if session_type is not None and session.session_type != session_type:
            continue
        if cutoff is not None and session.date < cutoff:
            continue
        results.append(session)
    return sort_by_date_desc(results)


def has_prayed_on(sessions: Iterable[PrayerSession], day: date) -> bool:
    return any(s.completed and s.date == day for s in sessions)


def prayer_statistics(
    sessions: Iterable[PrayerSession], streak: StreakState
) -> PrayerStatistics:
    """Counts by mystery and type, average duration, and streak figures."""
    completed = [s for s in sessions if s.completed]
    mysteries = Counter(s.mystery for s in completed if s.mystery is not None)
    types = Counter(s.session_type for s in completed)
    durations = [s.duration for s in completed if s.duration]
    average = round(sum(durations) / len(durations)) if durations else None
    return PrayerStatistics(
        total_sessions=len(completed),
        mystery_counts=dict(mysteries),
        type_counts=dict(types),
        average_duration=average,
        current_streak=streak.current_streak,
        longest_streak=streak.longest_streak,
        last_prayer_date=streak.last_prayer_date,
    )
