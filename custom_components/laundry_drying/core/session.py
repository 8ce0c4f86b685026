"""Drying session: lifecycle and progress tracking for one load.

Per tick while drying:
  1. WeatherAggregator   → one observation
  2. evaporation_power   → score in [0, 1] for the location
  3. RateSmoother        → instantaneous and smoothed drying rate
  4. percent dry         → advanced by the instantaneous rate over the interval
  5. ETA                 → from the smoothed rate, scaled by the calibration
  6. classify_status     → status and reason
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from enum import StrEnum
import logging
import math
from typing import Any

from homeassistant.util import dt as dt_util

from ..const import (
    CONF_DRYING_LOCATION,
    CONF_DRYING_SPEED,
    CONF_ENABLE_DEBUG,
    CONF_UPDATE_MINUTES,
    DEFAULT_DRYING_LOCATION,
    DEFAULT_DRYING_SPEED,
    DEFAULT_ENABLE_DEBUG,
    DEFAULT_UPDATE_MINUTES,
)
from .calibration import CalibrationLearner
from .display import NO_DURATION, format_conditions, format_debug_summary, format_eta
from .errors import WeatherDataError
from .evaporation import evaporation_power, get_location_profile, get_speed_hours
from .helpers import clamp, round_half_up
from .smoothing import RateSmoother
from .status import classify_status
from .weather import Observation, WeatherAggregator

_LOGGER = logging.getLogger(__name__)

# Below this smoothed rate the ETA cannot be projected
MIN_PROJECTABLE_RATE = 0.0001

# Initial ETA is only captured near the start of a session
INITIAL_ETA_MAX_PERCENT = 10

# Health check: stale after this many missed intervals, never under the floor
STALE_INTERVALS = 3
STALE_FLOOR_MINUTES = 2

STATUS_READY = "Ready"
STATUS_DRYING = "Drying"
STATUS_PAUSED = "Paused"
STATUS_DONE = "Done"
STATUS_ERROR = "Error"
STATUS_STALE = "Warning: Stale data"

REASON_STARTING = "Starting…"
REASON_DONE = "Laundry estimated dry"

ETA_PAUSED = "Paused"
ETA_DONE = "Done!"

CONDITIONS_ERROR = "Error fetching data"


class DryingState(StrEnum):
    """Lifecycle state of a drying session."""

    READY = "ready"
    DRYING = "drying"
    PAUSED = "paused"
    DONE = "done"


class WeatherStatus(StrEnum):
    """Health of the weather data feed."""

    OK = "OK"
    STALE = "STALE"
    ERROR = "ERROR"


@dataclass
class SessionSettings:
    """Per-entry settings the session depends on."""

    location: str = DEFAULT_DRYING_LOCATION
    speed: str = DEFAULT_DRYING_SPEED
    update_minutes: int = DEFAULT_UPDATE_MINUTES
    debug: bool = DEFAULT_ENABLE_DEBUG

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> SessionSettings:
        """Create settings from merged config entry data and options."""
        return cls(
            location=config.get(CONF_DRYING_LOCATION, DEFAULT_DRYING_LOCATION),
            speed=config.get(CONF_DRYING_SPEED, DEFAULT_DRYING_SPEED),
            update_minutes=int(
                config.get(CONF_UPDATE_MINUTES, DEFAULT_UPDATE_MINUTES)
            ),
            debug=bool(config.get(CONF_ENABLE_DEBUG, DEFAULT_ENABLE_DEBUG)),
        )

    @property
    def preset_hours(self) -> float:
        """Baseline drying hours for the configured speed."""
        return get_speed_hours(self.speed)

    @property
    def stale_after_minutes(self) -> int:
        """Minutes without a successful update before data counts as stale."""
        return max(STALE_FLOOR_MINUTES, STALE_INTERVALS * self.update_minutes)


@dataclass
class DryingSnapshot:
    """Everything the entities show for one session."""

    state: DryingState
    percent_dry: int
    wetness: int
    rate_per_hour: float | None
    smoothed_rate: float
    evaporation_power: float | None
    dew_point_depression: float | None
    eta_minutes: int | None
    raw_eta_minutes: int | None
    eta_display: str
    estimated_done: datetime | None
    started_at: datetime | None
    elapsed_minutes: int | None
    elapsed_display: str
    conditions: str | None
    status: str
    reason: str | None
    weather_status: WeatherStatus
    calibration_factor: float
    calibration_sessions: int
    learning_status: str
    last_update: datetime | None
    location: str
    location_label: str
    debug_summary: str | None

    @property
    def is_drying(self) -> bool:
        """Return True while a load is drying."""
        return self.state == DryingState.DRYING

    def as_dict(self) -> dict[str, Any]:
        """Convert to a JSON friendly dictionary."""
        data = asdict(self)
        for key in ("estimated_done", "started_at", "last_update"):
            if data[key] is not None:
                data[key] = data[key].isoformat()
        data["state"] = str(self.state)
        data["weather_status"] = str(self.weather_status)
        return data


def _parse_datetime(value: str | None) -> datetime | None:
    """Parse a stored ISO timestamp."""
    if not value:
        return None
    return dt_util.parse_datetime(value)


class DryingSession:
    """One drying cycle with its state machine and derived values."""

    def __init__(
        self,
        aggregator: WeatherAggregator,
        settings: SessionSettings,
        calibration: CalibrationLearner | None = None,
        smoother: RateSmoother | None = None,
        debug_callback: Callable[..., None] | None = None,
        now: Callable[[], datetime] = dt_util.utcnow,
    ) -> None:
        """Initialize the session in the ready state."""
        self.aggregator = aggregator
        self.settings = settings
        self.calibration = calibration or CalibrationLearner(
            debug_callback=debug_callback, now=now
        )
        self._smoother = smoother or RateSmoother()
        self._debug_fn = debug_callback
        self._now = now
        self._clear()

    def _debug(self, message: str, *args: Any) -> None:
        """Log via the drying debug logger if available, else fallback to _LOGGER."""
        if self._debug_fn:
            self._debug_fn("session", message, *args)
        else:
            _LOGGER.debug(message, *args)

    def _clear(self) -> None:
        """Return every session value to the ready state."""
        self.state = DryingState.READY
        self.percent_dry = 0
        self.smoothed_rate = 0.0
        self.started_at: datetime | None = None
        self.initial_eta_minutes: int | None = None
        self.last_success: datetime | None = None

        self.rate_per_hour: float | None = None
        self.evaporation_power: float | None = None
        self.dew_point_depression: float | None = None
        self.raw_eta_minutes: int | None = None
        self.eta_minutes: int | None = None
        self.eta_display = NO_DURATION
        self.estimated_done: datetime | None = None
        self.conditions: str | None = None
        self.status = STATUS_READY
        self.reason: str | None = None
        self.weather_status = WeatherStatus.OK
        self.debug_summary: str | None = None
        self.observation: Observation | None = None

    @property
    def is_drying(self) -> bool:
        """Return True while a load is drying."""
        return self.state == DryingState.DRYING

    def elapsed_minutes(self) -> int | None:
        """Whole minutes since the session started, for display."""
        exact = self._exact_elapsed_minutes()
        if exact is None:
            return None
        return int(exact)

    def _exact_elapsed_minutes(self) -> float | None:
        """Fractional minutes since the session started."""
        if self.started_at is None:
            return None
        seconds = (self._now() - self.started_at).total_seconds()
        return max(0.0, seconds / 60.0)

    # Commands

    def start_now(self) -> None:
        """Start (or restart) drying from 0%."""
        if self.is_drying:
            self._debug("Restarting an active session")
        self.state = DryingState.DRYING
        self.percent_dry = 0
        self.smoothed_rate = 0.0
        self.started_at = self._now()
        self.initial_eta_minutes = None
        self.status = STATUS_DRYING
        self.reason = REASON_STARTING
        _LOGGER.info("Drying started at %s", self.started_at.isoformat())

    def pause_now(self) -> None:
        """Pause drying, keeping progress."""
        if not self.is_drying:
            self._debug("Pause ignored in state %s", self.state)
            return
        self.state = DryingState.PAUSED
        self.status = STATUS_PAUSED
        self.reason = None
        self.eta_display = ETA_PAUSED
        self.estimated_done = None
        _LOGGER.info("Drying paused at %d%%", self.percent_dry)

    def mark_dry(self) -> bool:
        """User confirms the load is dry; learn from it and finish."""
        if not self.is_drying:
            _LOGGER.warning("Mark dry ignored: drying is not active (%s)", self.state)
            return False

        actual = self._exact_elapsed_minutes()
        if self.initial_eta_minutes is not None and actual is not None:
            self.calibration.record_outcome(self.initial_eta_minutes, actual)
        else:
            self._debug("No initial ETA captured, skipping calibration")

        self._finish()
        return True

    def reset(self) -> None:
        """Back to ready; calibration is kept."""
        self._clear()
        _LOGGER.info("Drying session reset")

    def reset_calibration(self) -> None:
        """Forget the learned calibration; session is untouched."""
        self.calibration.reset()

    def _finish(self) -> None:
        """Transition to done."""
        self.state = DryingState.DONE
        self.percent_dry = 100
        self.eta_minutes = 0
        self.raw_eta_minutes = 0
        self.eta_display = ETA_DONE
        self.estimated_done = None
        self.status = STATUS_DONE
        self.reason = REASON_DONE
        _LOGGER.info("Laundry estimated dry after %s min", self.elapsed_minutes())

    # Periodic work

    async def async_tick(self) -> bool:
        """Advance the session by one update interval.

        Returns True if the tick produced a new estimate.
        """
        if not self.is_drying:
            self._debug("Tick skipped in state %s", self.state)
            return False

        try:
            obs = await self.aggregator.async_observe()
        except WeatherDataError as err:
            _LOGGER.warning("Weather update failed: %s", err)
            self.weather_status = WeatherStatus.ERROR
            self.status = STATUS_ERROR
            self.reason = str(err)
            self.conditions = CONDITIONS_ERROR
            return False

        settings = self.settings
        profile = get_location_profile(settings.location)
        preset_hours = settings.preset_hours

        power = evaporation_power(obs, profile)
        rate = self._smoother.instant_rate(power, preset_hours)
        self.smoothed_rate = self._smoother.update(
            self.smoothed_rate, power, preset_hours
        )

        step = int(round_half_up(rate * (settings.update_minutes / 60.0) * 100.0))
        self.percent_dry = int(clamp(self.percent_dry + step, 0, 100))

        if self.smoothed_rate > MIN_PROJECTABLE_RATE:
            remaining = (100 - self.percent_dry) / 100.0
            raw_eta: int | None = math.ceil(remaining / self.smoothed_rate * 60.0)
        else:
            raw_eta = None

        if (
            self.initial_eta_minutes is None
            and raw_eta is not None
            and self.percent_dry < INITIAL_ETA_MAX_PERCENT
        ):
            self.initial_eta_minutes = raw_eta
            self._debug("Captured initial ETA: %d minutes", raw_eta)

        now = self._now()
        eta = self.calibration.apply_to(raw_eta)

        self.observation = obs
        self.evaporation_power = round_half_up(power, 3)
        self.rate_per_hour = round_half_up(rate, 4)
        depression = obs.dew_point_depression
        self.dew_point_depression = (
            round_half_up(depression, 1) if depression is not None else None
        )
        self.raw_eta_minutes = raw_eta
        self.eta_minutes = eta
        self.eta_display = format_eta(eta)
        self.estimated_done = now + timedelta(minutes=eta) if eta is not None else None
        self.conditions = format_conditions(obs)
        self.last_success = now
        self.weather_status = WeatherStatus.OK
        self.status, self.reason = classify_status(obs, profile.key, rate)
        self.debug_summary = format_debug_summary(obs) if settings.debug else None

        self._debug(
            "power=%.3f rate=%.4f ema=%.4f +%d%% -> %d%% eta=%s",
            power,
            rate,
            self.smoothed_rate,
            step,
            self.percent_dry,
            eta,
        )

        if self.percent_dry >= 100:
            self._finish()
        return True

    def health_check(self) -> bool:
        """Flag stale data when ticks stopped succeeding.

        Returns True if the session was marked stale.
        """
        if not self.is_drying or self.last_success is None:
            return False

        age = self._now() - self.last_success
        if age <= timedelta(minutes=self.settings.stale_after_minutes):
            return False

        age_minutes = int(round_half_up(age.total_seconds() / 60.0))
        self.weather_status = WeatherStatus.STALE
        self.status = STATUS_STALE
        self.reason = f"No successful update for ~{age_minutes} min"
        _LOGGER.warning("No successful weather update for ~%d min", age_minutes)
        return True

    # Output and persistence

    def snapshot(self) -> DryingSnapshot:
        """Build the values shown by the entities."""
        elapsed = self.elapsed_minutes()
        profile = get_location_profile(self.settings.location)
        return DryingSnapshot(
            state=self.state,
            percent_dry=self.percent_dry,
            wetness=100 - self.percent_dry,
            rate_per_hour=self.rate_per_hour,
            smoothed_rate=round_half_up(self.smoothed_rate, 4),
            evaporation_power=self.evaporation_power,
            dew_point_depression=self.dew_point_depression,
            eta_minutes=self.eta_minutes,
            raw_eta_minutes=self.raw_eta_minutes,
            eta_display=self.eta_display,
            estimated_done=self.estimated_done,
            started_at=self.started_at,
            elapsed_minutes=elapsed,
            elapsed_display=format_eta(elapsed) if elapsed is not None else NO_DURATION,
            conditions=self.conditions,
            status=self.status,
            reason=self.reason,
            weather_status=self.weather_status,
            calibration_factor=round_half_up(self.calibration.factor, 2),
            calibration_sessions=self.calibration.session_count,
            learning_status=self.calibration.learning_status,
            last_update=self.last_success,
            location=profile.key,
            location_label=profile.label,
            debug_summary=self.debug_summary,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert session state to dictionary for storage."""

        def _iso(value: datetime | None) -> str | None:
            return value.isoformat() if value else None

        return {
            "state": str(self.state),
            "percent_dry": self.percent_dry,
            "smoothed_rate": self.smoothed_rate,
            "started_at": _iso(self.started_at),
            "initial_eta_minutes": self.initial_eta_minutes,
            "last_success": _iso(self.last_success),
            "rate_per_hour": self.rate_per_hour,
            "evaporation_power": self.evaporation_power,
            "dew_point_depression": self.dew_point_depression,
            "raw_eta_minutes": self.raw_eta_minutes,
            "eta_minutes": self.eta_minutes,
            "eta_display": self.eta_display,
            "estimated_done": _iso(self.estimated_done),
            "conditions": self.conditions,
            "status": self.status,
            "reason": self.reason,
            "weather_status": str(self.weather_status),
        }

    def restore(self, data: Mapping[str, Any]) -> None:
        """Restore session state saved by to_dict."""
        try:
            state = DryingState(data.get("state", DryingState.READY))
        except ValueError:
            _LOGGER.warning("Unknown stored state %s, starting fresh", data.get("state"))
            self._clear()
            return
        try:
            weather_status = WeatherStatus(data.get("weather_status", WeatherStatus.OK))
        except ValueError:
            weather_status = WeatherStatus.OK

        self.state = state
        self.percent_dry = int(clamp(int(data.get("percent_dry", 0) or 0), 0, 100))
        self.smoothed_rate = max(0.0, float(data.get("smoothed_rate", 0.0) or 0.0))
        self.started_at = _parse_datetime(data.get("started_at"))
        self.initial_eta_minutes = data.get("initial_eta_minutes")
        self.last_success = _parse_datetime(data.get("last_success"))
        self.rate_per_hour = data.get("rate_per_hour")
        self.evaporation_power = data.get("evaporation_power")
        self.dew_point_depression = data.get("dew_point_depression")
        self.raw_eta_minutes = data.get("raw_eta_minutes")
        self.eta_minutes = data.get("eta_minutes")
        self.eta_display = data.get("eta_display", NO_DURATION)
        self.estimated_done = _parse_datetime(data.get("estimated_done"))
        self.conditions = data.get("conditions")
        self.status = data.get("status", STATUS_READY)
        self.reason = data.get("reason")
        self.weather_status = weather_status
