"""Durable key/value storage backed by one JSON file per key.

Each key maps to ``<data_dir>/<key>.json``.  Reads never raise: a missing
or unreadable file yields ``None`` so callers can fall back to their
default state.  Writes open, write and close the file on every call.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any

from prayerlog.errors import PersistenceError

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.-]*$")


class LocalStorage:
    """File-per-key JSON store rooted at ``data_dir``."""

    def __init__(self, data_dir: Path) -> None:
        self._dir = Path(data_dir).expanduser()

    @property
    def data_dir(self) -> Path:
        return self._dir

    def _path(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._dir / f"{key}.json"

    # ── Reads ────────────────────────────────────────────────────

    def read_text(self, key: str) -> str | None:
        """Return the raw stored text for ``key``, or None."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return None

    def read_json(self, key: str, default: Any = None) -> Any:
        """Return the decoded JSON document for ``key``.

        Returns ``default`` if the key is missing or the document is not
        valid JSON.
        """
        raw = self.read_text(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Corrupt JSON under key %r, ignoring", key)
            return default

    def exists(self, key: str) -> bool:
        return self._path(key).exists()

    def keys(self) -> list[str]:
        """Return every stored key, sorted."""
        if not self._dir.is_dir():
            return []
        return sorted(p.stem for p in self._dir.glob("*.json"))

    # ── Writes ───────────────────────────────────────────────────

    def write_text(self, key: str, text: str) -> None:
        """Store ``text`` under ``key``.

        Raises PersistenceError if the file cannot be written.
        """
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Failed to write {path}: {exc}") from exc

    def write_json(self, key: str, value: Any) -> None:
        """Encode ``value`` as JSON and store it under ``key``."""
        self.write_text(key, json.dumps(value, ensure_ascii=False, indent=2))

    def remove(self, key: str) -> bool:
        """Delete ``key``.  Returns False if it was not stored."""
        path = self._path(key)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as exc:
            raise PersistenceError(f"Failed to remove {path}: {exc}") from exc
        return True
