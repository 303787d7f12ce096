"""Journal merge: the single write path for reflection data.

Every mutation of a stored session goes through ``merge_journal`` so the
patch rule and the sync bookkeeping (version, updated_at, sync_status)
are applied the same way for ``complete``, ``update_journal`` and novena
day completion.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from prayerlog.sessions.models import JournalPatch, PrayerSession, SyncStatus


def merge_journal(
    session: PrayerSession,
    patch: JournalPatch | None,
    *,
    now: datetime,
    duration: int | None = None,
    completed: bool | None = None,
) -> PrayerSession:
    """Return a copy of ``session`` with ``patch`` applied.

    Fields absent from the patch keep their stored value; fields set on
    the patch (including an explicit ``None``) overwrite it.  ``duration``
    and ``completed`` are written only when given.  The copy always has
    ``version + 1``, ``updated_at = now`` and a pending sync status.
    """
    update: dict[str, Any] = patch.changes() if patch is not None else {}
    if duration is not None:
        update["duration"] = duration
    if completed is not None:
        update["completed"] = completed
    update["version"] = session.version + 1
    update["updated_at"] = now
    update["sync_status"] = SyncStatus.PENDING
    return session.model_copy(update=update)
