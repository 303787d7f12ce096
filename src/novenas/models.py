"""Novena models.

``ActiveNovena`` (nine-day novenas) and ``RosaryNovenaProgress`` (the
54-day rosary novena) are frozen: each transition produces a new instance
via ``model_copy`` with a new ``completed_days`` frozenset.
"""

from __future__ import annotations

from datetime import UTC, datetime

from prayerlog.catalog import (
    DAYS_PER_PHASE,
    FIFTY_FOUR_DAY_TOTAL,
    NovenaType,
    completion_percentage,
)
from prayerlog.errors import StateError
from prayerlog.sessions.models import PrayerSession
from prayerlog.shared.models import CamelModel
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_serializer, field_validator

NOVENA_LENGTH = 9


class ActiveNovena(CamelModel):
    """One in-progress or finished nine-day devotion."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: NovenaType = Field(alias="type")
    start_date: datetime
    completed_days: frozenset[int] = frozenset()
    intention: str | None = None
    device_id: str = ""

    @field_validator("start_date")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("completed_days")
    @classmethod
    def _check_days(cls, value: frozenset[int]) -> frozenset[int]:
        bad = sorted(d for d in value if not 1 <= d <= NOVENA_LENGTH)
        if bad:
            raise ValueError(f"novena days must be in 1..{NOVENA_LENGTH}, got {bad}")
        return value

    @field_serializer("completed_days")
    def _serialize_days(self, value: frozenset[int]) -> list[int]:
        return sorted(value)

    @computed_field(alias="isCompleted")  # type: ignore[prop-decorator]
    @property
    def is_completed(self) -> bool:
        return len(self.completed_days) >= NOVENA_LENGTH

    @computed_field(alias="currentDay")  # type: ignore[prop-decorator]
    @property
    def current_day(self) -> int:
        """Display hint: the day after the furthest completed day, capped at 9.

        Derived from ``completed_days``; which days may actually be prayed
        is decided by ``NovenaScheduler.can_play_day``.
        """
        if not self.completed_days:
            return 1
        return min(max(self.completed_days) + 1, NOVENA_LENGTH)

    def to_record(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class DayCompletion(BaseModel):
    """Result of completing one novena day."""

    novena: ActiveNovena
    session: PrayerSession


class DayRejected(BaseModel):
    """A day that could not be completed; the novena is unchanged."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    novena: ActiveNovena
    day: int
    error: StateError

    @property
    def reason(self) -> str:
        return str(self.error)


class NovenaStats(BaseModel):
    total_started: int = 0
    total_completed: int = 0
    total_days_prayed: int = 0
    current_active: int = 0


# ---------------------------------------------------------------------------
# 54-day rosary novena
# ---------------------------------------------------------------------------

TRACKER_VERSION = 1


class RosaryNovenaProgress(CamelModel):
    """Progress through the 54-day rosary novena.

    Days may be prayed in any order; the day to pray next is the first
    one not yet marked.
    """

    model_config = ConfigDict(frozen=True)

    version: int = TRACKER_VERSION
    completed_days: frozenset[int] = frozenset()
    start_date: datetime | None = None
    intention: str = ""
    last_updated: datetime | None = None

    @field_validator("start_date", "last_updated")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value

    @field_validator("completed_days")
    @classmethod
    def _check_days(cls, value: frozenset[int]) -> frozenset[int]:
        bad = sorted(d for d in value if not 1 <= d <= FIFTY_FOUR_DAY_TOTAL)
        if bad:
            raise ValueError(f"54-day novena days must be in 1..{FIFTY_FOUR_DAY_TOTAL}, got {bad}")
        return value

    @field_serializer("completed_days")
    def _serialize_days(self, value: frozenset[int]) -> list[int]:
        return sorted(value)

    @property
    def is_started(self) -> bool:
        return self.start_date is not None

    @property
    def is_completed(self) -> bool:
        return len(self.completed_days) >= FIFTY_FOUR_DAY_TOTAL

    @property
    def current_day(self) -> int:
        """First day not yet prayed, or the last day once all are done."""
        for day in range(1, FIFTY_FOUR_DAY_TOTAL + 1):
            if day not in self.completed_days:
                return day
        return FIFTY_FOUR_DAY_TOTAL

    @property
    def percent_complete(self) -> int:
        return completion_percentage(self.completed_days, FIFTY_FOUR_DAY_TOTAL)

    @property
    def petition_days_done(self) -> int:
        return sum(1 for d in self.completed_days if d <= DAYS_PER_PHASE)

    @property
    def thanksgiving_days_done(self) -> int:
        return len(self.completed_days) - self.petition_days_done

    def to_record(self) -> dict[str, object]:
        return self.model_dump(mode="json", by_alias=True)
