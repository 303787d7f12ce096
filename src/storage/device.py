"""Process-wide device identity.

The identifier is generated once, persisted under ``DEVICE_ID_KEY`` and
reused afterwards.  Every session and novena records it for a future
multi-device sync pass.
"""

from __future__ import annotations

import logging
import uuid

from prayerlog.errors import PersistenceError
from prayerlog.storage.local import LocalStorage

logger = logging.getLogger(__name__)

DEVICE_ID_KEY = "deviceId"


class DeviceIdentity:
    """Lazily resolved device id bound to one storage."""

    def __init__(self, storage: LocalStorage) -> None:
        self._storage = storage
        self._value: str | None = None

    @property
    def value(self) -> str:
        """Return the device id, creating and persisting it on first use."""
        if self._value is None:
            self._value = self._resolve()
        return self._value

    def __str__(self) -> str:
        return self.value

    def _resolve(self) -> str:
        stored = self._storage.read_json(DEVICE_ID_KEY)
        if isinstance(stored, str) and stored.strip():
            return stored
        if stored is not None:
            logger.warning("Ignoring malformed device id %r", stored)

        device_id = str(uuid.uuid4())
        try:
            self._storage.write_json(DEVICE_ID_KEY, device_id)
        except PersistenceError as exc:
            # The id still holds for this process; a later run will mint another.
            logger.error("Could not persist device id: %s", exc)
        logger.info("Generated device id %s", device_id)
        return device_id
