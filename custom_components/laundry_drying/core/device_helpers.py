"""Device info helpers for the Laundry Drying integration."""
from __future__ import annotations

from homeassistant.config_entries import ConfigEntry
from homeassistant.helpers.device_registry import DeviceInfo

from ..const import DOMAIN, MANUFACTURER, MODEL_NAME, VERSION


def get_device_info(entry: ConfigEntry) -> DeviceInfo:
    """Get device info for an entry.

    Creates exactly ONE device per config entry, shared by all platforms.
    """
    return DeviceInfo(
        identifiers={(DOMAIN, entry.entry_id)},
        name=entry.title,
        manufacturer=MANUFACTURER,
        model=MODEL_NAME,
        sw_version=VERSION,
    )
