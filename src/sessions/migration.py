"""Upgrade session records written before sync metadata existed.

Early releases stored sessions without ``createdAt``/``updatedAt``,
``version``, ``syncStatus`` or ``deviceId``, and used ids like
``rosary-1705312345678-abc123``.  Migration runs on raw JSON dicts
before model validation.
"""

from __future__ import annotations

import logging
import re
import uuid
from datetime import UTC, date, datetime, time
from typing import Any

logger = logging.getLogger(__name__)

# Legacy records only carry a calendar day; creation is pinned to noon UTC.
LEGACY_TIME_OF_DAY = time(12, 0, tzinfo=UTC)

_UUID4_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_canonical_id(value: object) -> bool:
    """True if ``value`` is a UUID4 string."""
    return isinstance(value, str) and bool(_UUID4_RE.match(value))


def needs_migration(record: object) -> bool:
    return isinstance(record, dict) and not (record.get("createdAt") and record.get("updatedAt"))


def _backfill_created_at(raw_date: object, now: datetime) -> datetime:
    if isinstance(raw_date, str):
        try:
            return datetime.combine(date.fromisoformat(raw_date), LEGACY_TIME_OF_DAY)
        except ValueError:
            logger.warning("Legacy session has unparseable date %r", raw_date)
    return now


def migrate_record(record: dict[str, Any], *, device_id: str, now: datetime) -> dict[str, Any]:
    """Return a migrated copy of one legacy record."""
    migrated = dict(record)
    if not is_canonical_id(migrated.get("id")):
        migrated["id"] = str(uuid.uuid4())
    if not migrated.get("createdAt"):
        migrated["createdAt"] = _backfill_created_at(migrated.get("date"), now).isoformat()
    migrated["updatedAt"] = now.isoformat()
    migrated["version"] = 1
    migrated["syncStatus"] = "pending"
    if not migrated.get("deviceId"):
        migrated["deviceId"] = device_id
    return migrated


def migrate_legacy(
    records: list[Any],
    *,
    device_id: str,
    now: datetime,
) -> list[Any]:
    """Migrate every record lacking timestamps; leave the rest untouched.

    Idempotent: migrated records carry both timestamps, so a second pass
    returns them unchanged.  Non-dict entries are passed through for the
    validator to reject.
    """
    migrated: list[Any] = []
    count = 0
    for record in records:
        if needs_migration(record):
            migrated.append(migrate_record(record, device_id=device_id, now=now))
            count += 1
        else:
            migrated.append(record)
    if count:
        logger.info("Migrated %d legacy session record(s)", count)
    return migrated
