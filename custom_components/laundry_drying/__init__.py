"""The Laundry Drying integration."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import config_validation as cv
import voluptuous as vol

from .const import (
    ATTR_ENTRY_ID,
    DOMAIN,
    SERVICE_MARK_DRY,
    SERVICE_PAUSE,
    SERVICE_REFRESH,
    SERVICE_RESET,
    SERVICE_RESET_CALIBRATION,
    SERVICE_START,
)
from .coordinator import LaundryDryingCoordinator

if TYPE_CHECKING:
    from homeassistant.helpers.typing import ConfigType

_LOGGER = logging.getLogger(__name__)

PLATFORMS: list[Platform] = [
    Platform.SENSOR,
    Platform.BUTTON,
    Platform.SWITCH,
    Platform.SELECT,
]

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)

SERVICE_SCHEMA = vol.Schema({vol.Optional(ATTR_ENTRY_ID): cv.string})

# Service name -> coordinator method
SERVICE_HANDLERS: dict[str, str] = {
    SERVICE_START: "async_start",
    SERVICE_PAUSE: "async_pause",
    SERVICE_MARK_DRY: "async_mark_dry",
    SERVICE_RESET: "async_reset",
    SERVICE_RESET_CALIBRATION: "async_reset_calibration",
    SERVICE_REFRESH: "async_refresh_now",
}


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    """Set up the Laundry Drying component."""
    hass.data.setdefault(DOMAIN, {})
    async_register_services(hass)
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Laundry Drying from a config entry."""
    hass.data.setdefault(DOMAIN, {})
    _LOGGER.info("Setting up laundry drying: %s", entry.title)

    coordinator = LaundryDryingCoordinator(hass, entry)
    await coordinator.async_load()
    await coordinator.async_config_entry_first_refresh()

    hass.data[DOMAIN][entry.entry_id] = {
        "coordinator": coordinator,
        "entry": entry,
    }

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    entry.async_on_unload(coordinator.async_start_health_check())
    entry.async_on_unload(entry.add_update_listener(async_reload_entry))
    return True


def _get_coordinators(
    hass: HomeAssistant, entry_id: str | None
) -> list[LaundryDryingCoordinator]:
    """Coordinators targeted by a service call."""
    entries = hass.data.get(DOMAIN, {})
    if entry_id:
        entry_data = entries.get(entry_id)
        if not entry_data:
            raise HomeAssistantError(f"Laundry drying entry not found: {entry_id}")
        return [entry_data["coordinator"]]
    return [entry_data["coordinator"] for entry_data in entries.values()]


def async_register_services(hass: HomeAssistant) -> None:
    """Register services for Laundry Drying."""

    async def handle_service(call: ServiceCall) -> None:
        method = SERVICE_HANDLERS[call.service]
        coordinators = _get_coordinators(hass, call.data.get(ATTR_ENTRY_ID))
        for coordinator in coordinators:
            await getattr(coordinator, method)()
        _LOGGER.debug("Service %s handled for %d entries", call.service, len(coordinators))

    for service in SERVICE_HANDLERS:
        hass.services.async_register(DOMAIN, service, handle_service, schema=SERVICE_SCHEMA)


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    entry_data = hass.data[DOMAIN].get(entry.entry_id)
    if not entry_data:
        return True

    await entry_data["coordinator"].async_save()

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        hass.data[DOMAIN].pop(entry.entry_id)

    return unload_ok


async def async_reload_entry(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Reload config entry."""
    await hass.config_entries.async_reload(entry.entry_id)
