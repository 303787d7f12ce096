"""prayerlog: prayer sessions, daily streaks and nine-day novenas."""

__version__ = "0.3.0"
