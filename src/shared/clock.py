"""Clock helpers.

Stores and the scheduler take a ``Clock`` callable instead of reading
the wall clock directly so tests can pin "now".
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(tz=UTC)


def calendar_day(moment: datetime) -> date:
    """Calendar day of ``moment`` in UTC."""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(UTC).date()
