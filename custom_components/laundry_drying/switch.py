"""Switch platform for Laundry Drying."""

from __future__ import annotations

import logging
from typing import Any

from homeassistant.components.switch import SwitchEntity
from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN, ICON_PROGRESS
from .coordinator import LaundryDryingCoordinator
from .core.device_helpers import get_device_info
from .core.session import DryingState

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Laundry Drying switch entities."""
    coordinator: LaundryDryingCoordinator = hass.data[DOMAIN][config_entry.entry_id][
        "coordinator"
    ]
    async_add_entities([LaundryDryingSwitch(coordinator, config_entry)])


class LaundryDryingSwitch(CoordinatorEntity[LaundryDryingCoordinator], SwitchEntity):
    """On starts drying, off pauses it."""

    _attr_has_entity_name = True
    _attr_name = "Drying"
    _attr_icon = ICON_PROGRESS

    def __init__(self, coordinator: LaundryDryingCoordinator, entry: ConfigEntry) -> None:
        """Initialize the switch entity."""
        super().__init__(coordinator)
        self._attr_unique_id = f"{entry.entry_id}_drying"
        self._attr_device_info = get_device_info(entry)

    @property
    def available(self) -> bool:
        """The switch reflects the session, not the last tick."""
        return True

    @property
    def is_on(self) -> bool:
        """Return True while drying."""
        return self.coordinator.session.state == DryingState.DRYING

    async def async_turn_on(self, **kwargs: Any) -> None:
        """Start drying."""
        await self.coordinator.async_start()

    async def async_turn_off(self, **kwargs: Any) -> None:
        """Pause drying."""
        await self.coordinator.async_pause()
