"""Streak aggregate."""

from __future__ import annotations

from datetime import date

from prayerlog.shared.models import CamelModel
from pydantic import Field


class StreakState(CamelModel):
    """Derived streak figures, persisted between runs."""

    current_streak: int = Field(default=0, ge=0)
    longest_streak: int = Field(default=0, ge=0)
    last_prayer_date: date | None = None
    total_prayers: int = Field(default=0, ge=0)
