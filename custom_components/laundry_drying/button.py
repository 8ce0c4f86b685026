"""Button platform for Laundry Drying."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging

from homeassistant.components.button import ButtonEntity, ButtonEntityDescription
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    DOMAIN,
    ICON_LEARNING,
    ICON_MARK_DRY,
    ICON_PAUSE,
    ICON_REFRESH,
    ICON_RESET,
    ICON_START,
)
from .coordinator import LaundryDryingCoordinator
from .core.device_helpers import get_device_info

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class LaundryDryingButtonEntityDescription(ButtonEntityDescription):
    """Describes a Laundry Drying command button."""

    press_fn: Callable[[LaundryDryingCoordinator], Awaitable[None]]


BUTTON_TYPES: tuple[LaundryDryingButtonEntityDescription, ...] = (
    LaundryDryingButtonEntityDescription(
        key="start",
        name="Start",
        icon=ICON_START,
        press_fn=lambda coordinator: coordinator.async_start(),
    ),
    LaundryDryingButtonEntityDescription(
        key="pause",
        name="Pause",
        icon=ICON_PAUSE,
        press_fn=lambda coordinator: coordinator.async_pause(),
    ),
    LaundryDryingButtonEntityDescription(
        key="mark_dry",
        name="Mark Dry",
        icon=ICON_MARK_DRY,
        press_fn=lambda coordinator: coordinator.async_mark_dry(),
    ),
    LaundryDryingButtonEntityDescription(
        key="reset",
        name="Reset",
        icon=ICON_RESET,
        press_fn=lambda coordinator: coordinator.async_reset(),
    ),
    LaundryDryingButtonEntityDescription(
        key="reset_calibration",
        name="Reset Calibration",
        icon=ICON_LEARNING,
        entity_category=EntityCategory.CONFIG,
        press_fn=lambda coordinator: coordinator.async_reset_calibration(),
    ),
    LaundryDryingButtonEntityDescription(
        key="refresh",
        name="Refresh",
        icon=ICON_REFRESH,
        entity_category=EntityCategory.DIAGNOSTIC,
        press_fn=lambda coordinator: coordinator.async_refresh_now(),
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Laundry Drying button entities."""
    coordinator: LaundryDryingCoordinator = hass.data[DOMAIN][config_entry.entry_id][
        "coordinator"
    ]

    entities = [
        LaundryDryingButton(coordinator, config_entry, description)
        for description in BUTTON_TYPES
    ]
    async_add_entities(entities)
    _LOGGER.debug("Button platform setup complete with %d buttons", len(entities))


class LaundryDryingButton(CoordinatorEntity[LaundryDryingCoordinator], ButtonEntity):
    """Button that runs one drying command."""

    _attr_has_entity_name = True
    entity_description: LaundryDryingButtonEntityDescription

    def __init__(
        self,
        coordinator: LaundryDryingCoordinator,
        entry: ConfigEntry,
        description: LaundryDryingButtonEntityDescription,
    ) -> None:
        """Initialize the button."""
        super().__init__(coordinator)
        self.entity_description = description
        self._attr_unique_id = f"{entry.entry_id}_{description.key}"
        self._attr_device_info = get_device_info(entry)

    @property
    def available(self) -> bool:
        """Commands stay usable even when the last tick failed."""
        return True

    async def async_press(self) -> None:
        """Handle button press."""
        await self.entity_description.press_fn(self.coordinator)
