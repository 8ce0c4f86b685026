"""Diagnostics support for Laundry Drying."""
from __future__ import annotations

from typing import Any

from homeassistant.components.diagnostics import async_redact_data
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant

from .const import CONF_CUSTOM_LATITUDE, CONF_CUSTOM_LONGITUDE, DOMAIN, VERSION

TO_REDACT = {CONF_CUSTOM_LATITUDE, CONF_CUSTOM_LONGITUDE, "latitude", "longitude"}


async def async_get_config_entry_diagnostics(
    hass: HomeAssistant, entry: ConfigEntry
) -> dict[str, Any]:
    """Return diagnostics for a config entry."""
    payload: dict[str, Any] = {
        "version": VERSION,
        "entry": {
            "title": entry.title,
            "data": async_redact_data(dict(entry.data), TO_REDACT),
            "options": async_redact_data(dict(entry.options), TO_REDACT),
        },
    }

    entry_data = hass.data.get(DOMAIN, {}).get(entry.entry_id)
    if not entry_data:
        return payload

    coordinator = entry_data["coordinator"]
    session = coordinator.session
    payload["coordinator"] = {
        "last_update_success": coordinator.last_update_success,
        "update_interval": str(coordinator.update_interval),
        "last_exception": (
            repr(coordinator.last_exception) if coordinator.last_exception else None
        ),
    }
    payload["session"] = session.snapshot().as_dict()
    payload["calibration"] = session.calibration.to_dict()
    payload["observation"] = (
        session.observation.to_dict() if session.observation else None
    )
    payload["sources"] = async_redact_data(
        {
            "latitude": session.aggregator.settings.latitude,
            "longitude": session.aggregator.settings.longitude,
            "use_fallback": session.aggregator.settings.use_fallback,
            "max_age_minutes": session.aggregator.settings.max_age_minutes,
        },
        TO_REDACT,
    )
    return payload
