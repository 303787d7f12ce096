"""Error taxonomy shared by the stores, the scheduler and the CLI."""


class PrayerlogError(Exception):
    """Base class for all prayerlog errors."""


class NotFoundError(PrayerlogError, KeyError):
    """An id does not resolve to a stored entity."""


class RecordValidationError(PrayerlogError, ValueError):
    """A loaded payload failed its shape check."""


class PersistenceError(PrayerlogError, OSError):
    """A durable write failed (disk full, permissions, ...)."""


class StateError(PrayerlogError, ValueError):
    """An operation was attempted against an invalid logical state."""
