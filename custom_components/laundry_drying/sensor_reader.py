"""Read bound sensor entities from the Home Assistant state machine."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
import logging

from homeassistant.const import STATE_UNAVAILABLE, STATE_UNKNOWN
from homeassistant.core import HomeAssistant
from homeassistant.util import dt as dt_util

from .core.errors import StaleDataError
from .core.weather import SensorValue, SourceBinding

_LOGGER = logging.getLogger(__name__)


class HassSensorReader:
    """SensorReader backed by hass.states."""

    def __init__(
        self, hass: HomeAssistant, now: Callable[[], datetime] = dt_util.utcnow
    ) -> None:
        """Initialize the reader."""
        self.hass = hass
        self._now = now

    def _check_fresh(
        self, entity_id: str, last_updated: datetime, max_age_minutes: int
    ) -> timedelta:
        """Return the reading age, raising StaleDataError when too old."""
        age = self._now() - last_updated
        if age > timedelta(minutes=max_age_minutes):
            raise StaleDataError(entity_id, age.total_seconds() / 60.0, max_age_minutes)
        return age

    def read_fresh(
        self, binding: SourceBinding, max_age_minutes: int
    ) -> SensorValue | None:
        """Get a fresh numeric value for a binding.

        Returns None when the entity is missing or not numeric and raises
        StaleDataError when the reading is older than max_age_minutes.
        """
        state = self.hass.states.get(binding.entity_id)
        if state is None:
            _LOGGER.debug("Entity %s not found", binding.entity_id)
            return None

        if binding.attribute is None:
            raw = state.state
        else:
            raw = state.attributes.get(binding.attribute)

        if raw is None or raw in (STATE_UNKNOWN, STATE_UNAVAILABLE):
            return None

        try:
            value = float(raw)
        except (ValueError, TypeError):
            _LOGGER.debug(
                "Non-numeric value %r from %s (%s)",
                raw,
                binding.entity_id,
                binding.attribute or "state",
            )
            return None

        age = self._check_fresh(binding.entity_id, state.last_updated, max_age_minutes)
        return SensorValue(value=value, age_ms=int(age.total_seconds() * 1000))
