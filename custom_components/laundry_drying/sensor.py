"""Sensor platform for Laundry Drying integration."""
from __future__ import annotations
from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import PERCENTAGE, UnitOfTemperature, UnitOfTime
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity import EntityCategory
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    DOMAIN,
    ICON_ETA,
    ICON_LEARNING,
    ICON_LOCATION,
    ICON_PROGRESS,
    ICON_STATUS,
    ICON_WEATHER,
)
from .coordinator import LaundryDryingCoordinator
from .core.device_helpers import get_device_info
from .core.session import DryingSnapshot, WeatherStatus

_LOGGER = logging.getLogger(__name__)

RATE_UNIT = "1/h"


@dataclass(frozen=True, kw_only=True)
class LaundryDryingSensorEntityDescription(SensorEntityDescription):
    """Describes Laundry Drying sensor entity."""
    value_fn: Callable[[DryingSnapshot], Any]
    attr_fn: Callable[[DryingSnapshot], dict[str, Any]] | None = None


SENSOR_TYPES: tuple[LaundryDryingSensorEntityDescription, ...] = (
    LaundryDryingSensorEntityDescription(
        key="progress",
        name="Progress",
        native_unit_of_measurement=PERCENTAGE,
        state_class=SensorStateClass.MEASUREMENT,
        icon=ICON_PROGRESS,
        value_fn=lambda data: data.percent_dry,
        attr_fn=lambda data: {
            "drying_state": str(data.state),
            "progress": f"{data.percent_dry}% dry",
        },
    ),
    LaundryDryingSensorEntityDescription(
        key="wetness",
        name="Wetness",
        native_unit_of_measurement=PERCENTAGE,
        device_class=SensorDeviceClass.MOISTURE,
        state_class=SensorStateClass.MEASUREMENT,
        value_fn=lambda data: data.wetness,
    ),
    LaundryDryingSensorEntityDescription(
        key="drying_rate",
        name="Drying Rate",
        native_unit_of_measurement=RATE_UNIT,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=4,
        value_fn=lambda data: data.rate_per_hour,
    ),
    LaundryDryingSensorEntityDescription(
        key="smoothed_rate",
        name="Smoothed Drying Rate",
        native_unit_of_measurement=RATE_UNIT,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=4,
        entity_category=EntityCategory.DIAGNOSTIC,
        value_fn=lambda data: data.smoothed_rate,
    ),
    LaundryDryingSensorEntityDescription(
        key="evaporation_power",
        name="Evaporation Power",
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=3,
        icon=ICON_WEATHER,
        value_fn=lambda data: data.evaporation_power,
    ),
    LaundryDryingSensorEntityDescription(
        key="dew_point_depression",
        name="Dew Point Depression",
        native_unit_of_measurement=UnitOfTemperature.CELSIUS,
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=1,
        value_fn=lambda data: data.dew_point_depression,
    ),
    LaundryDryingSensorEntityDescription(
        key="eta",
        name="Time Remaining",
        native_unit_of_measurement=UnitOfTime.MINUTES,
        device_class=SensorDeviceClass.DURATION,
        icon=ICON_ETA,
        value_fn=lambda data: data.eta_minutes,
        attr_fn=lambda data: {
            "raw_eta_minutes": data.raw_eta_minutes,
            "eta_display": data.eta_display,
        },
    ),
    LaundryDryingSensorEntityDescription(
        key="estimated_done",
        name="Estimated Done",
        device_class=SensorDeviceClass.TIMESTAMP,
        icon=ICON_ETA,
        value_fn=lambda data: data.estimated_done,
    ),
    LaundryDryingSensorEntityDescription(
        key="started_at",
        name="Started At",
        device_class=SensorDeviceClass.TIMESTAMP,
        value_fn=lambda data: data.started_at,
    ),
    LaundryDryingSensorEntityDescription(
        key="time_elapsed",
        name="Time Elapsed",
        native_unit_of_measurement=UnitOfTime.MINUTES,
        device_class=SensorDeviceClass.DURATION,
        value_fn=lambda data: data.elapsed_minutes,
        attr_fn=lambda data: {"elapsed_display": data.elapsed_display},
    ),
    LaundryDryingSensorEntityDescription(
        key="conditions",
        name="Conditions",
        icon=ICON_WEATHER,
        value_fn=lambda data: data.conditions,
    ),
    LaundryDryingSensorEntityDescription(
        key="status",
        name="Status",
        icon=ICON_STATUS,
        value_fn=lambda data: data.status,
        attr_fn=lambda data: {"reason": data.reason},
    ),
    LaundryDryingSensorEntityDescription(
        key="weather_status",
        name="Weather Status",
        device_class=SensorDeviceClass.ENUM,
        options=[str(status) for status in WeatherStatus],
        icon=ICON_WEATHER,
        value_fn=lambda data: str(data.weather_status),
    ),
    LaundryDryingSensorEntityDescription(
        key="calibration_factor",
        name="Calibration Factor",
        state_class=SensorStateClass.MEASUREMENT,
        suggested_display_precision=2,
        icon=ICON_LEARNING,
        value_fn=lambda data: data.calibration_factor,
        attr_fn=lambda data: {
            "session_count": data.calibration_sessions,
            "learning_status": data.learning_status,
        },
    ),
    LaundryDryingSensorEntityDescription(
        key="last_update",
        name="Last Update",
        device_class=SensorDeviceClass.TIMESTAMP,
        entity_category=EntityCategory.DIAGNOSTIC,
        value_fn=lambda data: data.last_update,
    ),
    LaundryDryingSensorEntityDescription(
        key="drying_location",
        name="Drying Location",
        icon=ICON_LOCATION,
        value_fn=lambda data: data.location_label,
        attr_fn=lambda data: {"location": data.location},
    ),
    LaundryDryingSensorEntityDescription(
        key="debug_summary",
        name="Debug",
        entity_category=EntityCategory.DIAGNOSTIC,
        entity_registry_enabled_default=False,
        value_fn=lambda data: data.debug_summary,
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    config_entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up Laundry Drying sensors."""
    coordinator: LaundryDryingCoordinator = hass.data[DOMAIN][config_entry.entry_id][
        "coordinator"
    ]

    async_add_entities(
        LaundryDryingSensor(coordinator, config_entry, description)
        for description in SENSOR_TYPES
    )
    _LOGGER.debug("Added %d sensors for %s", len(SENSOR_TYPES), config_entry.title)


class LaundryDryingSensor(CoordinatorEntity[LaundryDryingCoordinator], SensorEntity):
    """Sensor showing one value of the drying session."""

    _attr_has_entity_name = True
    entity_description: LaundryDryingSensorEntityDescription

    def __init__(
        self,
        coordinator: LaundryDryingCoordinator,
        entry: ConfigEntry,
        description: LaundryDryingSensorEntityDescription,
    ) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self.entity_description = description
        self._attr_unique_id = f"{entry.entry_id}_{description.key}"
        self._attr_device_info = get_device_info(entry)

    @property
    def native_value(self) -> Any:
        """Return the state of the sensor."""
        if self.coordinator.data is None:
            return None
        return self.entity_description.value_fn(self.coordinator.data)

    @property
    def extra_state_attributes(self) -> dict[str, Any] | None:
        """Return entity specific state attributes."""
        if self.coordinator.data is None or self.entity_description.attr_fn is None:
            return None
        return self.entity_description.attr_fn(self.coordinator.data)
