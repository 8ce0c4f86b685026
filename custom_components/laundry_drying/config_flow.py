"""Config flow for Laundry Drying integration."""
from __future__ import annotations

import logging
from typing import Any

import voluptuous as vol

from homeassistant.config_entries import ConfigEntry, ConfigFlow
from homeassistant.const import CONF_NAME
from homeassistant.core import callback
from homeassistant.data_entry_flow import FlowResult
from homeassistant.helpers import selector

from .const import DEFAULT_NAME, DOMAIN
from .options_flow import (
    LaundryDryingOptionsFlowHandler,
    build_general_schema,
    clean_input,
    validate_sources,
)

_LOGGER = logging.getLogger(__name__)


class LaundryDryingConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Laundry Drying."""

    VERSION = 1

    @staticmethod
    @callback
    def async_get_options_flow(
        config_entry: ConfigEntry,
    ) -> LaundryDryingOptionsFlowHandler:
        """Get the options flow for this handler."""
        return LaundryDryingOptionsFlowHandler(config_entry)

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> FlowResult:
        """Handle the initial step."""
        errors: dict[str, str] = {}

        if user_input is not None:
            name = user_input[CONF_NAME].strip()

            # Check for duplicate names
            existing = [
                entry
                for entry in self.hass.config_entries.async_entries(DOMAIN)
                if entry.title == name
            ]

            if not name:
                errors[CONF_NAME] = "empty_name"
            elif existing:
                errors["base"] = "name_exists"
            else:
                errors = validate_sources(user_input)

            if not errors:
                data = clean_input(user_input)
                data[CONF_NAME] = name
                _LOGGER.info("Creating laundry drying entry: %s", name)
                return self.async_create_entry(title=name, data=data)

        schema_dict: dict[Any, Any] = {
            vol.Required(CONF_NAME, default=DEFAULT_NAME): selector.TextSelector()
        }
        schema_dict.update(build_general_schema(user_input or {}))

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(schema_dict),
            errors=errors,
        )
