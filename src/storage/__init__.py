"""Durable local storage and device identity."""

from prayerlog.storage.device import DEVICE_ID_KEY, DeviceIdentity
from prayerlog.storage.local import LocalStorage

__all__ = [
    "DEVICE_ID_KEY",
    "DeviceIdentity",
    "LocalStorage",
]
