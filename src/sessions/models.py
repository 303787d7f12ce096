"""Prayer session models: pure Pydantic v2 data types.

A PrayerSession is one recorded rosary, chaplet, 54-day novena day or
nine-day novena day.  Stored JSON uses camelCase keys so documents
written by earlier releases load unchanged.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from typing import Annotated, Any, Literal

from prayerlog.catalog import ChapletType, Mystery, NovenaType
from prayerlog.shared.models import CamelModel
from pydantic import BaseModel, Field, field_validator, model_validator

MAX_LIST_ENTRIES = 5


class SyncStatus(StrEnum):
    """Placeholder for a future multi-device sync pass."""

    PENDING = "pending"
    SYNCED = "synced"
    CONFLICT = "conflict"


class Mood(StrEnum):
    PEACEFUL = "peaceful"
    JOYFUL = "joyful"
    HOPEFUL = "hopeful"
    TROUBLED = "troubled"
    SORROWFUL = "sorrowful"


class SessionType(StrEnum):
    """Discriminator values for ``PrayerSession.kind``."""

    DAILY_ROSARY = "daily-rosary"
    FIFTY_FOUR_DAY_NOVENA = "54-day-novena"
    CHAPLET = "chaplet"
    NOVENA_DAY = "novena-day"


# ---------------------------------------------------------------------------
# Session kinds
# ---------------------------------------------------------------------------


class DailyRosary(CamelModel):
    type: Literal["daily-rosary"] = "daily-rosary"
    mystery: Mystery


class FiftyFourDayNovena(CamelModel):
    type: Literal["54-day-novena"] = "54-day-novena"
    mystery: Mystery
    day: int | None = Field(default=None, ge=1, le=54)


class Chaplet(CamelModel):
    type: Literal["chaplet"] = "chaplet"
    chaplet: ChapletType


class NovenaDay(CamelModel):
    type: Literal["novena-day"] = "novena-day"
    novena: NovenaType
    novena_id: str
    day: int = Field(ge=1, le=9)


SessionKind = Annotated[
    DailyRosary | FiftyFourDayNovena | Chaplet | NovenaDay,
    Field(discriminator="type"),
]

# Legacy ``prayerType`` values that were renamed when ``kind`` was introduced.
_LEGACY_TYPE_NAMES = {"novena": SessionType.NOVENA_DAY.value}


def _fold_legacy_kind(data: dict[str, Any]) -> dict[str, Any]:
    data = dict(data)
    prayer_type = data.pop("prayerType", None)
    kind: dict[str, Any] = {"type": _LEGACY_TYPE_NAMES.get(prayer_type, prayer_type)}
    for key in ("mystery", "chaplet", "novena", "novenaId"):
        if key in data:
            kind[key] = data.pop(key)
    if "currentDay" in data:
        kind["day"] = data.pop("currentDay")
    data["kind"] = kind
    return data


# ---------------------------------------------------------------------------
# Session record
# ---------------------------------------------------------------------------


class PrayerSession(CamelModel):
    """One recorded prayer, with journal data and sync metadata."""

    id: str
    device_id: str = ""
    created_at: datetime
    updated_at: datetime
    sync_status: SyncStatus = SyncStatus.PENDING
    version: int = Field(default=1, ge=1)
    date: date
    kind: SessionKind
    completed: bool = False

    # Journal
    duration: int | None = None  # minutes
    intention: str | None = None
    reflection: str | None = None
    mood: Mood | None = None
    gratitudes: list[str] | None = None
    insights: str | None = None
    tags: list[str] | None = None

    @model_validator(mode="before")
    @classmethod
    def _accept_legacy_shape(cls, data: Any) -> Any:
        if isinstance(data, dict) and "kind" not in data and "prayerType" in data:
            return _fold_legacy_kind(data)
        return data

    @property
    def session_type(self) -> SessionType:
        return SessionType(self.kind.type)

    @property
    def novena_id(self) -> str | None:
        """Id of the active novena this session belongs to, if any."""
        if isinstance(self.kind, NovenaDay):
            return self.kind.novena_id
        return None

    @property
    def mystery(self) -> Mystery | None:
        if isinstance(self.kind, (DailyRosary, FiftyFourDayNovena)):
            return self.kind.mystery
        return None

    def journal_text(self) -> list[str]:
        """All free-text journal values, for searching."""
        values = [self.intention, self.reflection, self.insights]
        values.extend(self.gratitudes or [])
        values.extend(self.tags or [])
        return [v for v in values if v]

    def to_record(self) -> dict[str, Any]:
        """Serialize to the stored JSON shape."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class JournalPatch(CamelModel):
    """Journal fields to merge onto a session.

    Only fields explicitly set on the patch are applied; passing ``None``
    explicitly clears the stored value.
    """

    intention: str | None = None
    reflection: str | None = None
    mood: Mood | None = None
    gratitudes: list[str] | None = Field(default=None, max_length=MAX_LIST_ENTRIES)
    insights: str | None = None
    tags: list[str] | None = Field(default=None, max_length=MAX_LIST_ENTRIES)

    @field_validator("gratitudes", "tags")
    @classmethod
    def _drop_blank_entries(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return [v.strip() for v in value if v and v.strip()]

    @field_validator("tags")
    @classmethod
    def _normalize_tags(cls, value: list[str] | None) -> list[str] | None:
        if value is None:
            return None
        return list(dict.fromkeys(v.lower() for v in value))

    def changes(self) -> dict[str, Any]:
        """Return ``{field: value}`` for every explicitly set field."""
        changes: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            changes[name] = list(value) if isinstance(value, list) else value
        return changes

    def is_empty(self) -> bool:
        return not self.model_fields_set


class PrayerStatistics(BaseModel):
    """Aggregate view over completed sessions."""

    total_sessions: int = 0
    mystery_counts: dict[Mystery, int] = Field(default_factory=dict)
    type_counts: dict[SessionType, int] = Field(default_factory=dict)
    average_duration: int | None = None
    current_streak: int = 0
    longest_streak: int = 0
    last_prayer_date: date | None = None
