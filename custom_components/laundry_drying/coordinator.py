"""DataUpdateCoordinator for Laundry Drying."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime, timedelta
import logging
from typing import Any

from homeassistant.config_entries import ConfigEntry
from homeassistant.core import HomeAssistant, callback
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.event import async_track_time_interval
from homeassistant.helpers.storage import Store
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from .const import (
    CONF_CUSTOM_LATITUDE,
    CONF_CUSTOM_LONGITUDE,
    CONF_UPDATE_MINUTES,
    DEFAULT_UPDATE_MINUTES,
    HEALTH_CHECK_INTERVAL,
    STORAGE_KEY,
    STORAGE_VERSION,
)
from .core.calibration import CalibrationLearner
from .core.logger import DryingLogger
from .core.open_meteo import OpenMeteoClient
from .core.session import DryingSession, DryingSnapshot, SessionSettings
from .core.weather import AggregatorSettings, WeatherAggregator
from .sensor_reader import HassSensorReader

_LOGGER = logging.getLogger(__name__)


class LaundryDryingCoordinator(DataUpdateCoordinator[DryingSnapshot]):
    """Drive one drying session: periodic ticks, commands and persistence."""

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry) -> None:
        """Initialize coordinator."""
        self.entry = entry
        self.config: dict[str, Any] = {**entry.data, **entry.options}
        self.debug_logger = DryingLogger(self)
        self._lock = asyncio.Lock()
        self._unsub_health_check: Callable[[], None] | None = None
        # A restored drying session must not advance before an interval elapses
        self._skip_next_tick = False

        # Storage
        self._store = Store(hass, STORAGE_VERSION, f"{STORAGE_KEY}_{entry.entry_id}")

        update_minutes = int(self.config.get(CONF_UPDATE_MINUTES, DEFAULT_UPDATE_MINUTES))
        super().__init__(
            hass,
            _LOGGER,
            config_entry=entry,
            name=entry.title,
            update_interval=timedelta(minutes=update_minutes),
        )

        latitude, longitude = self._resolve_location()
        self.client = OpenMeteoClient(
            async_get_clientsession(hass), debug_callback=self.debug
        )
        aggregator = WeatherAggregator(
            HassSensorReader(hass),
            self.client,
            AggregatorSettings.from_config(self.config, latitude, longitude),
            debug_callback=self.debug,
        )
        self.session = DryingSession(
            aggregator,
            SessionSettings.from_config(self.config),
            CalibrationLearner(debug_callback=self.debug),
            debug_callback=self.debug,
        )

    def debug(self, category: str, message: str, *args: Any) -> None:
        """Log a debug message for this entry."""
        self.debug_logger.debug(category, message, *args)

    def _resolve_location(self) -> tuple[float | None, float | None]:
        """Per-entry coordinates if set, else the Home Assistant home location."""
        latitude = self.config.get(CONF_CUSTOM_LATITUDE)
        longitude = self.config.get(CONF_CUSTOM_LONGITUDE)
        if latitude is not None and longitude is not None:
            return float(latitude), float(longitude)
        return self.hass.config.latitude, self.hass.config.longitude

    # Persistence

    async def async_load(self) -> None:
        """Restore session and calibration from storage."""
        try:
            data = await self._store.async_load()
        except (HomeAssistantError, ValueError) as err:
            _LOGGER.warning("Failed to load stored drying data, starting fresh: %s", err)
            return

        if not data:
            _LOGGER.info("No stored drying data for %s, starting fresh", self.name)
            return

        self.session.calibration = CalibrationLearner.from_dict(
            data.get("calibration"), debug_callback=self.debug
        )
        self.session.restore(data.get("session") or {})
        self._skip_next_tick = self.session.is_drying
        _LOGGER.debug(
            "Restored %s: state=%s, %d%% dry, calibration %.2f",
            self.name,
            self.session.state,
            self.session.percent_dry,
            self.session.calibration.factor,
        )

    async def async_save(self) -> None:
        """Save session and calibration to storage."""
        await self._store.async_save(
            {
                "session": self.session.to_dict(),
                "calibration": self.session.calibration.to_dict(),
            }
        )

    # Periodic work

    async def _async_update_data(self) -> DryingSnapshot:
        """Run one tick."""
        try:
            async with self._lock:
                if self._skip_next_tick:
                    self._skip_next_tick = False
                    self.debug("coordinator", "Restored drying session, tick deferred")
                else:
                    await self.session.async_tick()
                snapshot = self.session.snapshot()
            await self.async_save()
            return snapshot
        except Exception as err:
            _LOGGER.error("Error updating %s: %s", self.name, err)
            raise UpdateFailed(f"Error updating drying progress: {err}") from err

    @callback
    def async_start_health_check(self) -> Callable[[], None]:
        """Start the stale-data check; returns the unsubscribe callback."""
        self._unsub_health_check = async_track_time_interval(
            self.hass,
            self._async_health_check,
            timedelta(seconds=HEALTH_CHECK_INTERVAL),
        )
        return self._async_stop_health_check

    @callback
    def _async_stop_health_check(self) -> None:
        """Stop the stale-data check."""
        if self._unsub_health_check:
            self._unsub_health_check()
            self._unsub_health_check = None

    async def _async_health_check(self, now: datetime | None = None) -> None:
        """Mark the data stale when ticks stopped succeeding."""
        async with self._lock:
            stale = self.session.health_check()
            snapshot = self.session.snapshot()
        if not stale:
            return
        # Publish without rescheduling the next tick
        self.data = snapshot
        self.async_update_listeners()
        await self.async_save()

    # Commands

    async def _async_command(self, name: str, action: Callable[[], Any]) -> None:
        """Run a session command under the lock and publish the result."""
        _LOGGER.info("%s: %s", self.name, name)
        async with self._lock:
            action()
            snapshot = self.session.snapshot()
        self.async_set_updated_data(snapshot)
        await self.async_save()

    async def async_start(self) -> None:
        """Start drying and run a tick straight away."""
        _LOGGER.info("%s: start", self.name)
        async with self._lock:
            self.session.start_now()
            await self.session.async_tick()
            snapshot = self.session.snapshot()
        self.async_set_updated_data(snapshot)
        await self.async_save()

    async def async_pause(self) -> None:
        """Pause drying."""
        await self._async_command("pause", self.session.pause_now)

    async def async_mark_dry(self) -> None:
        """Laundry is dry: learn from the session and finish."""
        await self._async_command("mark dry", self.session.mark_dry)

    async def async_reset(self) -> None:
        """Reset the session, keeping calibration."""
        await self._async_command("reset", self.session.reset)

    async def async_reset_calibration(self) -> None:
        """Forget the learned calibration."""
        await self._async_command("reset calibration", self.session.reset_calibration)

    async def async_refresh_now(self) -> None:
        """Run a tick now."""
        await self.async_refresh()
