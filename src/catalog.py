"""Fixed prayer catalogs and 54-day novena day arithmetic.

Pure data and pure functions: mysteries, chaplets, nine-day novenas and
the petition/thanksgiving rotation used by the 54-day rosary novena.
"""

from __future__ import annotations

import math
from collections.abc import Collection
from datetime import date
from enum import StrEnum

from pydantic import BaseModel

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Mystery(StrEnum):
    """Rosary mysteries."""

    JOYFUL = "Joyful"
    SORROWFUL = "Sorrowful"
    GLORIOUS = "Glorious"
    LUMINOUS = "Luminous"


class ChapletType(StrEnum):
    """Supported chaplets."""

    SEVEN_SORROWS = "seven-sorrows"
    DIVINE_MERCY = "divine-mercy"
    ST_MICHAEL = "st-michael"
    SACRED_HEART = "sacred-heart"


class NovenaType(StrEnum):
    """Nine-day novenas offered by the app."""

    DIVINE_MERCY = "divine-mercy"
    SACRED_HEART = "sacred-heart"
    ST_JOSEPH = "st-joseph"
    IMMACULATE_HEART = "immaculate-heart"
    ST_THERESE = "st-therese"
    ST_JUDE = "st-jude"
    ST_ANTHONY = "st-anthony"
    BLESSED_MOTHER = "blessed-mother"
    HOLY_SPIRIT = "holy-spirit"


class NovenaPhase(StrEnum):
    """Halves of the 54-day rosary novena."""

    PETITION = "petition"
    THANKSGIVING = "thanksgiving"


# ---------------------------------------------------------------------------
# Catalog entries
# ---------------------------------------------------------------------------


class ChapletInfo(BaseModel):
    name: str
    description: str
    bead_count: int
    estimated_duration: int  # minutes


class NovenaInfo(BaseModel):
    name: str
    description: str
    patron: str
    feast_day: str
    estimated_duration: int  # minutes


CHAPLET_INFO: dict[ChapletType, ChapletInfo] = {
    ChapletType.SEVEN_SORROWS: ChapletInfo(
        name="Seven Sorrows of Mary",
        description="Meditate on the seven sorrows that pierced the Immaculate Heart of Mary",
        bead_count=52,
        estimated_duration=20,
    ),
    ChapletType.DIVINE_MERCY: ChapletInfo(
        name="Divine Mercy Chaplet",
        description="Trust in Jesus' infinite mercy for yourself and the whole world",
        bead_count=59,
        estimated_duration=15,
    ),
    ChapletType.ST_MICHAEL: ChapletInfo(
        name="Chaplet of St. Michael",
        description="Honor the nine choirs of angels with St. Michael's protection",
        bead_count=39,
        estimated_duration=25,
    ),
    ChapletType.SACRED_HEART: ChapletInfo(
        name="Chaplet of the Sacred Heart",
        description="Make acts of love and reparation to the Sacred Heart of Jesus",
        bead_count=33,
        estimated_duration=18,
    ),
}

NOVENA_INFO: dict[NovenaType, NovenaInfo] = {
    NovenaType.DIVINE_MERCY: NovenaInfo(
        name="Divine Mercy Novena",
        description="Nine days of prayer to Jesus' Divine Mercy",
        patron="Jesus Christ",
        feast_day="Divine Mercy Sunday",
        estimated_duration=15,
    ),
    NovenaType.SACRED_HEART: NovenaInfo(
        name="Sacred Heart Novena",
        description="Nine days of devotion to the Sacred Heart of Jesus",
        patron="Jesus Christ",
        feast_day="Sacred Heart Friday",
        estimated_duration=18,
    ),
    NovenaType.ST_JOSEPH: NovenaInfo(
        name="St. Joseph Novena",
        description="Nine days of prayer to the patron of workers and families",
        patron="St. Joseph",
        feast_day="March 19",
        estimated_duration=12,
    ),
    NovenaType.IMMACULATE_HEART: NovenaInfo(
        name="Immaculate Heart Novena",
        description="Nine days of prayer to Mary's Immaculate Heart",
        patron="Blessed Virgin Mary",
        feast_day="August 22",
        estimated_duration=20,
    ),
    NovenaType.ST_THERESE: NovenaInfo(
        name="St. Thérèse Novena",
        description="Nine days of prayer to the Little Flower",
        patron="St. Thérèse of Lisieux",
        feast_day="October 1",
        estimated_duration=15,
    ),
    NovenaType.ST_JUDE: NovenaInfo(
        name="St. Jude Novena",
        description="Nine days of prayer to the patron of hopeless causes",
        patron="St. Jude Thaddeus",
        feast_day="October 28",
        estimated_duration=14,
    ),
    NovenaType.ST_ANTHONY: NovenaInfo(
        name="St. Anthony Novena",
        description="Nine days of prayer to the finder of lost things",
        patron="St. Anthony of Padua",
        feast_day="June 13",
        estimated_duration=16,
    ),
    NovenaType.BLESSED_MOTHER: NovenaInfo(
        name="Blessed Mother Novena",
        description="Nine days of prayer to Our Lady",
        patron="Blessed Virgin Mary",
        feast_day="Various",
        estimated_duration=18,
    ),
    NovenaType.HOLY_SPIRIT: NovenaInfo(
        name="Holy Spirit Novena",
        description="Nine days of prayer for the gifts of the Holy Spirit",
        patron="Holy Spirit",
        feast_day="Pentecost",
        estimated_duration=20,
    ),
}

# ---------------------------------------------------------------------------
# Daily rosary
# ---------------------------------------------------------------------------

# Indexed by date.weekday(): Monday == 0
_WEEKDAY_MYSTERY: tuple[Mystery, ...] = (
    Mystery.JOYFUL,
    Mystery.SORROWFUL,
    Mystery.GLORIOUS,
    Mystery.LUMINOUS,
    Mystery.SORROWFUL,
    Mystery.JOYFUL,
    Mystery.GLORIOUS,
)


def mystery_for_weekday(day: date) -> Mystery:
    """Return the customary mystery for the weekday of ``day``."""
    return _WEEKDAY_MYSTERY[day.weekday()]


# ---------------------------------------------------------------------------
# 54-day rosary novena
# ---------------------------------------------------------------------------

FIFTY_FOUR_DAY_TOTAL = 54
DAYS_PER_PHASE = 27
DAYS_PER_CYCLE = 3
MYSTERY_ROTATION: tuple[Mystery, ...] = (Mystery.JOYFUL, Mystery.SORROWFUL, Mystery.GLORIOUS)


class CycleInfo(BaseModel):
    phase: NovenaPhase
    cycle: int
    mystery: Mystery


def _check_day(day: int) -> None:
    if not 1 <= day <= FIFTY_FOUR_DAY_TOTAL:
        raise ValueError(f"54-day novena day must be in 1..{FIFTY_FOUR_DAY_TOTAL}, got {day}")


def phase_for_day(day: int) -> NovenaPhase:
    """Days 1-27 are petition, 28-54 thanksgiving."""
    _check_day(day)
    return NovenaPhase.PETITION if day <= DAYS_PER_PHASE else NovenaPhase.THANKSGIVING


def mystery_for_day(day: int) -> Mystery:
    """Mysteries rotate Joyful, Sorrowful, Glorious across the 54 days."""
    _check_day(day)
    return MYSTERY_ROTATION[(day - 1) % DAYS_PER_CYCLE]


def cycle_info(day: int) -> CycleInfo:
    """Phase, three-day cycle number within the phase, and mystery."""
    phase = phase_for_day(day)
    day_in_phase = day if phase is NovenaPhase.PETITION else day - DAYS_PER_PHASE
    return CycleInfo(
        phase=phase,
        cycle=math.ceil(day_in_phase / DAYS_PER_CYCLE),
        mystery=mystery_for_day(day),
    )


def completion_percentage(completed_days: Collection[int], total_days: int) -> int:
    """Whole-number percentage of ``total_days`` present in ``completed_days``."""
    if total_days <= 0:
        return 0
    return math.floor(len(set(completed_days)) / total_days * 100 + 0.5)
