"""Select platform for Laundry Drying integration."""

from __future__ import annotations

from dataclasses import dataclass
import logging

from homeassistant.components.select import SelectEntity, SelectEntityDescription
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    CONF_DRYING_LOCATION,
    CONF_DRYING_SPEED,
    DEFAULT_DRYING_LOCATION,
    DEFAULT_DRYING_SPEED,
    DOMAIN,
    DRYING_LOCATIONS,
    DRYING_SPEEDS,
    ICON_LOCATION,
    ICON_SPEED,
)
from .coordinator import LaundryDryingCoordinator
from .core.device_helpers import get_device_info

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class LaundryDryingSelectEntityDescription(SelectEntityDescription):
    """Describes a select bound to one entry option."""

    config_key: str
    default: str


SELECT_TYPES: tuple[LaundryDryingSelectEntityDescription, ...] = (
    LaundryDryingSelectEntityDescription(
        key="drying_location_select",
        name="Location",
        icon=ICON_LOCATION,
        entity_category=EntityCategory.CONFIG,
        options=list(DRYING_LOCATIONS),
        config_key=CONF_DRYING_LOCATION,
        default=DEFAULT_DRYING_LOCATION,
    ),
    LaundryDryingSelectEntityDescription(
        key="drying_speed_select",
        name="Speed",
        icon=ICON_SPEED,
        entity_category=EntityCategory.CONFIG,
        options=list(DRYING_SPEEDS),
        config_key=CONF_DRYING_SPEED,
        default=DEFAULT_DRYING_SPEED,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Laundry Drying select entities."""
    coordinator: LaundryDryingCoordinator = hass.data[DOMAIN][entry.entry_id][
        "coordinator"
    ]
    async_add_entities(
        LaundryDryingSelect(coordinator, entry, description)
        for description in SELECT_TYPES
    )


class LaundryDryingSelect(CoordinatorEntity[LaundryDryingCoordinator], SelectEntity):
    """Select that rewrites one entry option; the entry reloads on change."""

    _attr_has_entity_name = True
    entity_description: LaundryDryingSelectEntityDescription

    def __init__(
        self,
        coordinator: LaundryDryingCoordinator,
        entry: ConfigEntry,
        description: LaundryDryingSelectEntityDescription,
    ) -> None:
        """Initialize the select."""
        super().__init__(coordinator)
        self.entity_description = description
        self._entry = entry
        self._attr_unique_id = f"{entry.entry_id}_{description.key}"
        self._attr_device_info = get_device_info(entry)

    @property
    def available(self) -> bool:
        """Options can be changed at any time."""
        return True

    @property
    def current_option(self) -> str | None:
        """Return the selected option."""
        description = self.entity_description
        return self.coordinator.config.get(description.config_key, description.default)

    async def async_select_option(self, option: str) -> None:
        """Change the selected option."""
        key = self.entity_description.config_key
        if option not in self.options:
            _LOGGER.error("Invalid %s: %s (available: %s)", key, option, self.options)
            return

        _LOGGER.info("%s changed to: %s", key, option)
        self.hass.config_entries.async_update_entry(
            self._entry, options={**self._entry.options, key: option}
        )
