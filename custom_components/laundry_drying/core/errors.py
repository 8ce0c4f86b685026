"""Exceptions raised while gathering weather data."""

from __future__ import annotations

from homeassistant.exceptions import HomeAssistantError


class WeatherDataError(HomeAssistantError):
    """Base error for a tick that could not produce an observation."""


class ConfigurationError(WeatherDataError):
    """No location or no usable data source is configured."""


class FetchError(WeatherDataError):
    """Remote weather call failed, timed out or returned a bad payload."""


class StaleDataError(WeatherDataError):
    """A sensor reading is older than the configured maximum age."""

    def __init__(self, entity_id: str, age_minutes: float, max_age_minutes: int) -> None:
        """Initialize the error."""
        super().__init__(
            f"{entity_id} is stale ({age_minutes:.0f} min old, max {max_age_minutes} min)"
        )
        self.entity_id = entity_id
        self.age_minutes = age_minutes
        self.max_age_minutes = max_age_minutes
