"""Options flow for Laundry Drying integration."""
from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry, OptionsFlow
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers import selector

from .const import (
    CONF_CUSTOM_LATITUDE,
    CONF_CUSTOM_LONGITUDE,
    CONF_DEW_POINT_ATTRIBUTE,
    CONF_DEW_POINT_ENTITY,
    CONF_DRYING_LOCATION,
    CONF_DRYING_SPEED,
    CONF_ENABLE_DEBUG,
    CONF_HUMIDITY_ENTITY,
    CONF_ILLUMINANCE_ENTITY,
    CONF_MAX_AGE_MINUTES,
    CONF_RAIN_ATTRIBUTE,
    CONF_RAIN_ENTITY,
    CONF_RAIN_NOMINAL_RATE,
    CONF_RAIN_UNITS,
    CONF_TEMPERATURE_ENTITY,
    CONF_UPDATE_MINUTES,
    CONF_USE_FALLBACK,
    CONF_WIND_ATTRIBUTE,
    CONF_WIND_ENTITY,
    CONF_WIND_UNITS,
    DEFAULT_DEW_POINT_ATTRIBUTE,
    DEFAULT_DRYING_LOCATION,
    DEFAULT_DRYING_SPEED,
    DEFAULT_ENABLE_DEBUG,
    DEFAULT_MAX_AGE_MINUTES,
    DEFAULT_RAIN_ATTRIBUTE,
    DEFAULT_RAIN_NOMINAL_RATE,
    DEFAULT_RAIN_UNITS,
    DEFAULT_UPDATE_MINUTES,
    DEFAULT_USE_FALLBACK,
    DEFAULT_WIND_ATTRIBUTE,
    DEFAULT_WIND_UNITS,
    DEW_POINT_ATTRIBUTES,
    DRYING_LOCATIONS,
    DRYING_SPEEDS,
    MAX_MAX_AGE_MINUTES,
    MAX_RAIN_NOMINAL_RATE,
    MAX_UPDATE_MINUTES,
    MIN_MAX_AGE_MINUTES,
    MIN_RAIN_NOMINAL_RATE,
    MIN_UPDATE_MINUTES,
    RAIN_ATTRIBUTES,
    RAIN_UNIT_OPTIONS,
    WIND_ATTRIBUTES,
    WIND_UNIT_OPTIONS,
)

_LOGGER = logging.getLogger(__name__)

SOURCE_ENTITIES: tuple[tuple[str, str | None], ...] = (
    (CONF_TEMPERATURE_ENTITY, "temperature"),
    (CONF_HUMIDITY_ENTITY, "humidity"),
    (CONF_DEW_POINT_ENTITY, None),
    (CONF_ILLUMINANCE_ENTITY, "illuminance"),
    (CONF_WIND_ENTITY, None),
    (CONF_RAIN_ENTITY, None),
)


def _dropdown(options: list[str]) -> selector.SelectSelector:
    """Fixed choice dropdown."""
    return selector.SelectSelector(
        selector.SelectSelectorConfig(
            options=options,
            mode=selector.SelectSelectorMode.DROPDOWN,
        )
    )


def build_general_schema(current: dict[str, Any]) -> dict[Any, Any]:
    """Schema fields shared by the config flow and the options flow."""
    schema_dict: dict[Any, Any] = {}

    schema_dict[
        vol.Required(
            CONF_UPDATE_MINUTES,
            default=current.get(CONF_UPDATE_MINUTES, DEFAULT_UPDATE_MINUTES),
        )
    ] = selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=MIN_UPDATE_MINUTES,
            max=MAX_UPDATE_MINUTES,
            step=1,
            unit_of_measurement="min",
            mode=selector.NumberSelectorMode.BOX,
        )
    )
    schema_dict[
        vol.Required(
            CONF_DRYING_LOCATION,
            default=current.get(CONF_DRYING_LOCATION, DEFAULT_DRYING_LOCATION),
        )
    ] = _dropdown(list(DRYING_LOCATIONS))
    schema_dict[
        vol.Required(
            CONF_DRYING_SPEED,
            default=current.get(CONF_DRYING_SPEED, DEFAULT_DRYING_SPEED),
        )
    ] = _dropdown(list(DRYING_SPEEDS))

    for key, device_class in SOURCE_ENTITIES:
        config = selector.EntitySelectorConfig(domain=["sensor", "weather"])
        if device_class:
            config = selector.EntitySelectorConfig(
                domain="sensor", device_class=device_class
            )
        schema_dict[
            vol.Optional(key, description={"suggested_value": current.get(key)})
        ] = selector.EntitySelector(config)

    schema_dict[
        vol.Required(
            CONF_USE_FALLBACK,
            default=current.get(CONF_USE_FALLBACK, DEFAULT_USE_FALLBACK),
        )
    ] = selector.BooleanSelector()

    return schema_dict


def build_advanced_schema(current: dict[str, Any]) -> dict[Any, Any]:
    """Attribute names, units, staleness, location override and debug."""
    schema_dict: dict[Any, Any] = {}

    schema_dict[
        vol.Required(
            CONF_DEW_POINT_ATTRIBUTE,
            default=current.get(CONF_DEW_POINT_ATTRIBUTE, DEFAULT_DEW_POINT_ATTRIBUTE),
        )
    ] = _dropdown(list(DEW_POINT_ATTRIBUTES))
    schema_dict[
        vol.Required(
            CONF_WIND_ATTRIBUTE,
            default=current.get(CONF_WIND_ATTRIBUTE, DEFAULT_WIND_ATTRIBUTE),
        )
    ] = _dropdown(list(WIND_ATTRIBUTES))
    schema_dict[
        vol.Required(
            CONF_WIND_UNITS,
            default=current.get(CONF_WIND_UNITS, DEFAULT_WIND_UNITS),
        )
    ] = _dropdown(list(WIND_UNIT_OPTIONS))
    schema_dict[
        vol.Required(
            CONF_RAIN_ATTRIBUTE,
            default=current.get(CONF_RAIN_ATTRIBUTE, DEFAULT_RAIN_ATTRIBUTE),
        )
    ] = _dropdown(list(RAIN_ATTRIBUTES))
    schema_dict[
        vol.Required(
            CONF_RAIN_UNITS,
            default=current.get(CONF_RAIN_UNITS, DEFAULT_RAIN_UNITS),
        )
    ] = _dropdown(list(RAIN_UNIT_OPTIONS))
    schema_dict[
        vol.Required(
            CONF_RAIN_NOMINAL_RATE,
            default=current.get(CONF_RAIN_NOMINAL_RATE, DEFAULT_RAIN_NOMINAL_RATE),
        )
    ] = selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=MIN_RAIN_NOMINAL_RATE,
            max=MAX_RAIN_NOMINAL_RATE,
            step=0.01,
            unit_of_measurement="mm/h",
            mode=selector.NumberSelectorMode.BOX,
        )
    )
    schema_dict[
        vol.Required(
            CONF_MAX_AGE_MINUTES,
            default=current.get(CONF_MAX_AGE_MINUTES, DEFAULT_MAX_AGE_MINUTES),
        )
    ] = selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=MIN_MAX_AGE_MINUTES,
            max=MAX_MAX_AGE_MINUTES,
            step=1,
            unit_of_measurement="min",
            mode=selector.NumberSelectorMode.BOX,
        )
    )
    schema_dict[
        vol.Optional(
            CONF_CUSTOM_LATITUDE,
            description={"suggested_value": current.get(CONF_CUSTOM_LATITUDE)},
        )
    ] = selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=-90, max=90, step="any", mode=selector.NumberSelectorMode.BOX
        )
    )
    schema_dict[
        vol.Optional(
            CONF_CUSTOM_LONGITUDE,
            description={"suggested_value": current.get(CONF_CUSTOM_LONGITUDE)},
        )
    ] = selector.NumberSelector(
        selector.NumberSelectorConfig(
            min=-180, max=180, step="any", mode=selector.NumberSelectorMode.BOX
        )
    )
    schema_dict[
        vol.Required(
            CONF_ENABLE_DEBUG,
            default=current.get(CONF_ENABLE_DEBUG, DEFAULT_ENABLE_DEBUG),
        )
    ] = selector.BooleanSelector()

    return schema_dict


def validate_sources(user_input: dict[str, Any]) -> dict[str, str]:
    """Return form errors for an unusable source setup."""
    errors: dict[str, str] = {}
    if not user_input.get(CONF_USE_FALLBACK, DEFAULT_USE_FALLBACK):
        required = (CONF_TEMPERATURE_ENTITY, CONF_HUMIDITY_ENTITY, CONF_WIND_ENTITY)
        if not all(user_input.get(key) for key in required):
            errors["base"] = "sources_required"
    return errors


def validate_location(user_input: dict[str, Any]) -> dict[str, str]:
    """Latitude and longitude must be given together."""
    has_lat = user_input.get(CONF_CUSTOM_LATITUDE) is not None
    has_lon = user_input.get(CONF_CUSTOM_LONGITUDE) is not None
    if has_lat != has_lon:
        return {"base": "incomplete_location"}
    return {}


def clean_input(
    user_input: dict[str, Any], cleared_keys: tuple[str, ...] = ()
) -> dict[str, Any]:
    """Remove empty optional fields.

    Keys in cleared_keys left empty are kept as None so they override the
    value stored in the entry data.
    """
    cleaned = {k: v for k, v in user_input.items() if v not in ("", [], None)}
    for key in cleared_keys:
        cleaned.setdefault(key, None)
    return cleaned


class LaundryDryingOptionsFlowHandler(OptionsFlow):
    """Handle options flow for Laundry Drying."""

    def __init__(self, config_entry: ConfigEntry) -> None:
        """Initialize options flow."""
        self._entry = config_entry
        self._options: dict[str, Any] = {}

    @property
    def config_entry(self) -> ConfigEntry:
        """Return config entry."""
        return self._entry

    @property
    def _current(self) -> dict[str, Any]:
        """Effective configuration of the entry."""
        return {**self.config_entry.data, **self.config_entry.options}

    async def async_step_init(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Sources, location and speed."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = validate_sources(user_input)
            if not errors:
                self._options = clean_input(
                    user_input, tuple(key for key, _ in SOURCE_ENTITIES)
                )
                return await self.async_step_advanced()

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(build_general_schema(self._current)),
            errors=errors,
        )

    async def async_step_advanced(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Attribute names, units and the rest."""
        errors: dict[str, str] = {}

        if user_input is not None:
            errors = validate_location(user_input)
            if not errors:
                options = {
                    **self._options,
                    **clean_input(
                        user_input, (CONF_CUSTOM_LATITUDE, CONF_CUSTOM_LONGITUDE)
                    ),
                }
                _LOGGER.debug("Options updated for %s: %s", self.config_entry.title, options)
                return self.async_create_entry(title="", data=options)

        return self.async_show_form(
            step_id="advanced",
            data_schema=vol.Schema(build_advanced_schema(self._current)),
            errors=errors,
        )
