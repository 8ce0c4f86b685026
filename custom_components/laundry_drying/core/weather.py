"""Weather aggregation for the laundry drying model.

Merges readings from bound sensor entities with a remote current-conditions
snapshot into one normalized observation:
  device readings   → used when fresh and numeric
  remote snapshot   → fills only what the devices could not supply
  derived values    → dew point (Magnus-Tetens), lux from cloud cover
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
import logging
import math
from typing import Any, NamedTuple, Protocol

from ..const import (
    ATTRIBUTE_STATE,
    CONF_DEW_POINT_ATTRIBUTE,
    CONF_DEW_POINT_ENTITY,
    CONF_HUMIDITY_ENTITY,
    CONF_ILLUMINANCE_ENTITY,
    CONF_MAX_AGE_MINUTES,
    CONF_RAIN_ATTRIBUTE,
    CONF_RAIN_ENTITY,
    CONF_RAIN_NOMINAL_RATE,
    CONF_RAIN_UNITS,
    CONF_TEMPERATURE_ENTITY,
    CONF_USE_FALLBACK,
    CONF_WIND_ATTRIBUTE,
    CONF_WIND_ENTITY,
    CONF_WIND_UNITS,
    DEFAULT_DEW_POINT_ATTRIBUTE,
    DEFAULT_MAX_AGE_MINUTES,
    DEFAULT_RAIN_ATTRIBUTE,
    DEFAULT_RAIN_NOMINAL_RATE,
    DEFAULT_RAIN_UNITS,
    DEFAULT_USE_FALLBACK,
    DEFAULT_WIND_ATTRIBUTE,
    DEFAULT_WIND_UNITS,
    RAIN_UNITS_MM,
    WIND_UNITS_MS,
)
from .errors import ConfigurationError, FetchError, StaleDataError
from .helpers import clamp, round_half_up

_LOGGER = logging.getLogger(__name__)

# Magnus-Tetens constants
MAGNUS_A: float = 17.27
MAGNUS_B: float = 237.7

# Full daylight on a clear day
FULL_SUN_LUX: float = 60000.0

KMH_PER_MS: float = 3.6

FIELD_TEMPERATURE = "temperature"
FIELD_HUMIDITY = "humidity"
FIELD_DEW_POINT = "dew_point"
FIELD_WIND_SPEED = "wind_speed"
FIELD_ILLUMINANCE = "illuminance"
FIELD_RAIN_RATE = "rain_rate"

REQUIRED_FIELDS: tuple[str, ...] = (FIELD_TEMPERATURE, FIELD_HUMIDITY, FIELD_WIND_SPEED)
FALLBACK_FIELDS: tuple[str, ...] = (
    FIELD_TEMPERATURE,
    FIELD_HUMIDITY,
    FIELD_WIND_SPEED,
    FIELD_ILLUMINANCE,
    FIELD_RAIN_RATE,
)


class ObservationSource(StrEnum):
    """Where a value in an observation came from."""

    DEVICE = "device"
    REMOTE = "remote"
    DERIVED = "derived"


@dataclass(frozen=True)
class SourceBinding:
    """A sensor entity bound to one observation field.

    attribute None reads the entity state, otherwise the named attribute.
    """

    entity_id: str
    attribute: str | None = None

    @classmethod
    def from_config(
        cls, entity_id: str | None, attribute: str | None = None
    ) -> SourceBinding | None:
        """Build a binding from config values, None when no entity is set."""
        if not entity_id:
            return None
        if attribute in (None, "", ATTRIBUTE_STATE):
            attribute = None
        return cls(entity_id=entity_id, attribute=attribute)


class SensorValue(NamedTuple):
    """A fresh numeric sensor reading."""

    value: float
    age_ms: int


class SensorReader(Protocol):
    """Reads the latest numeric value of a bound source."""

    def read_fresh(
        self, binding: SourceBinding, max_age_minutes: int
    ) -> SensorValue | None:
        """Return the value, or None if missing or non-numeric.

        Raises StaleDataError when the reading is too old.
        """


@dataclass
class RemoteConditions:
    """Current conditions from the remote weather provider, already normalized."""

    temperature: float | None
    humidity: float | None
    dew_point: float | None
    wind_speed: float | None  # m/s
    rain_rate: float | None  # mm/hr
    illuminance: float | None  # lux, derived from cloud cover


class WeatherProvider(Protocol):
    """Remote current-conditions source."""

    async def async_fetch_current(
        self, latitude: float, longitude: float
    ) -> RemoteConditions:
        """Fetch a snapshot, raising FetchError on any failure."""


@dataclass
class AggregatorSettings:
    """Resolved data-source configuration for one drying instance."""

    temperature: SourceBinding | None = None
    humidity: SourceBinding | None = None
    dew_point: SourceBinding | None = None
    illuminance: SourceBinding | None = None
    wind: SourceBinding | None = None
    rain: SourceBinding | None = None
    wind_units: str = DEFAULT_WIND_UNITS
    rain_units: str = DEFAULT_RAIN_UNITS
    rain_nominal_rate: float = DEFAULT_RAIN_NOMINAL_RATE
    use_fallback: bool = DEFAULT_USE_FALLBACK
    max_age_minutes: int = DEFAULT_MAX_AGE_MINUTES
    latitude: float | None = None
    longitude: float | None = None

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        latitude: float | None = None,
        longitude: float | None = None,
    ) -> AggregatorSettings:
        """Create settings from merged config entry data and options."""
        return cls(
            temperature=SourceBinding.from_config(config.get(CONF_TEMPERATURE_ENTITY)),
            humidity=SourceBinding.from_config(config.get(CONF_HUMIDITY_ENTITY)),
            dew_point=SourceBinding.from_config(
                config.get(CONF_DEW_POINT_ENTITY),
                config.get(CONF_DEW_POINT_ATTRIBUTE, DEFAULT_DEW_POINT_ATTRIBUTE),
            ),
            illuminance=SourceBinding.from_config(config.get(CONF_ILLUMINANCE_ENTITY)),
            wind=SourceBinding.from_config(
                config.get(CONF_WIND_ENTITY),
                config.get(CONF_WIND_ATTRIBUTE, DEFAULT_WIND_ATTRIBUTE),
            ),
            rain=SourceBinding.from_config(
                config.get(CONF_RAIN_ENTITY),
                config.get(CONF_RAIN_ATTRIBUTE, DEFAULT_RAIN_ATTRIBUTE),
            ),
            wind_units=config.get(CONF_WIND_UNITS, DEFAULT_WIND_UNITS),
            rain_units=config.get(CONF_RAIN_UNITS, DEFAULT_RAIN_UNITS),
            rain_nominal_rate=float(
                config.get(CONF_RAIN_NOMINAL_RATE, DEFAULT_RAIN_NOMINAL_RATE)
            ),
            use_fallback=config.get(CONF_USE_FALLBACK, DEFAULT_USE_FALLBACK),
            max_age_minutes=int(
                config.get(CONF_MAX_AGE_MINUTES, DEFAULT_MAX_AGE_MINUTES)
            ),
            latitude=latitude,
            longitude=longitude,
        )


@dataclass
class Observation:
    """One normalized weather observation."""

    temperature: float  # °C
    humidity: float  # %
    wind_speed: float  # m/s
    illuminance: float = 0.0  # lux
    rain_rate: float = 0.0  # mm/hr
    dew_point: float | None = None  # °C
    sources: dict[str, ObservationSource] = field(default_factory=dict)

    @property
    def dew_point_depression(self) -> float | None:
        """Temperature minus dew point, None if the dew point is unknown."""
        if self.dew_point is None:
            return None
        return self.temperature - self.dew_point

    @property
    def is_raining(self) -> bool:
        """Return True if any rain is falling."""
        return self.rain_rate > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "temperature": self.temperature,
            "humidity": self.humidity,
            "wind_speed": self.wind_speed,
            "illuminance": self.illuminance,
            "rain_rate": self.rain_rate,
            "dew_point": self.dew_point,
            "sources": {key: str(src) for key, src in self.sources.items()},
        }


def calculate_dew_point(temperature: float, humidity: float) -> float:
    """Dew point in °C from temperature and RH (Magnus-Tetens), one decimal."""
    if humidity <= 0:
        humidity = 1.0
    if humidity > 100:
        humidity = 100.0

    alpha = (MAGNUS_A * temperature) / (MAGNUS_B + temperature) + math.log(
        humidity / 100.0
    )
    dew_point = (MAGNUS_B * alpha) / (MAGNUS_A - alpha)
    return round_half_up(dew_point, 1)


def illuminance_from_cloud_cover(cloud_cover: float) -> float:
    """Approximate illuminance (lux) from cloud cover (%)."""
    return clamp(1.0 - cloud_cover / 100.0, 0.0, 1.0) * FULL_SUN_LUX


class WeatherAggregator:
    """Builds one observation per tick from devices and the fallback provider."""

    def __init__(
        self,
        reader: SensorReader,
        provider: WeatherProvider | None,
        settings: AggregatorSettings,
        debug_callback: Callable[..., None] | None = None,
    ) -> None:
        """Initialize the aggregator."""
        self._reader = reader
        self._provider = provider
        self.settings = settings
        self._debug_fn = debug_callback

    def _debug(self, message: str, *args: Any) -> None:
        """Log via the drying debug logger if available, else fallback to _LOGGER."""
        if self._debug_fn:
            self._debug_fn("weather", message, *args)
        else:
            _LOGGER.debug(message, *args)

    def _read(self, binding: SourceBinding | None) -> float | None:
        """Read one binding, None when unbound or unusable."""
        if binding is None:
            return None
        try:
            reading = self._reader.read_fresh(binding, self.settings.max_age_minutes)
        except StaleDataError as err:
            self._debug("Ignoring stale reading: %s", err)
            return None
        if reading is None:
            self._debug("No value from %s", binding.entity_id)
            return None
        return reading.value

    def _read_devices(self) -> tuple[dict[str, float], dict[str, ObservationSource]]:
        """Read all bound devices and normalize units."""
        settings = self.settings
        values: dict[str, float] = {}
        sources: dict[str, ObservationSource] = {}

        def _put(name: str, value: float | None) -> None:
            if value is not None:
                values[name] = value
                sources[name] = ObservationSource.DEVICE

        _put(FIELD_TEMPERATURE, self._read(settings.temperature))
        _put(FIELD_HUMIDITY, self._read(settings.humidity))
        _put(FIELD_DEW_POINT, self._read(settings.dew_point))
        _put(FIELD_ILLUMINANCE, self._read(settings.illuminance))

        wind = self._read(settings.wind)
        if wind is not None and settings.wind_units != WIND_UNITS_MS:
            wind = wind / KMH_PER_MS
        _put(FIELD_WIND_SPEED, wind)

        rain = self._read(settings.rain)
        if rain is not None and settings.rain_units == RAIN_UNITS_MM:
            rain = settings.rain_nominal_rate if rain > 0 else 0.0
        _put(FIELD_RAIN_RATE, rain)

        return values, sources

    async def _async_fill_from_remote(
        self, values: dict[str, float], sources: dict[str, ObservationSource]
    ) -> None:
        """Fill missing fields from the remote snapshot."""
        settings = self.settings
        if settings.latitude is None or settings.longitude is None:
            raise ConfigurationError(
                "Location not set. Configure a custom latitude/longitude "
                "or set the Home Assistant home location."
            )
        if self._provider is None:
            raise ConfigurationError("No remote weather provider available")

        remote = await self._provider.async_fetch_current(
            settings.latitude, settings.longitude
        )
        remote_values = {
            FIELD_TEMPERATURE: remote.temperature,
            FIELD_HUMIDITY: remote.humidity,
            FIELD_WIND_SPEED: remote.wind_speed,
            FIELD_RAIN_RATE: remote.rain_rate,
            FIELD_ILLUMINANCE: remote.illuminance,
            FIELD_DEW_POINT: remote.dew_point,
        }
        for name, value in remote_values.items():
            if name in values or value is None:
                continue
            values[name] = value
            sources[name] = (
                ObservationSource.DERIVED
                if name == FIELD_ILLUMINANCE
                else ObservationSource.REMOTE
            )

    async def async_observe(self) -> Observation:
        """Produce one observation, raising WeatherDataError if unusable."""
        values, sources = self._read_devices()

        missing = [name for name in FALLBACK_FIELDS if name not in values]
        fallback_attempted = False
        if missing and self.settings.use_fallback:
            self._debug("Fetching remote weather for: %s", ", ".join(missing))
            fallback_attempted = True
            await self._async_fill_from_remote(values, sources)

        if (
            FIELD_DEW_POINT not in values
            and FIELD_TEMPERATURE in values
            and FIELD_HUMIDITY in values
        ):
            values[FIELD_DEW_POINT] = calculate_dew_point(
                values[FIELD_TEMPERATURE], values[FIELD_HUMIDITY]
            )
            sources[FIELD_DEW_POINT] = ObservationSource.DERIVED

        missing_required = [name for name in REQUIRED_FIELDS if name not in values]
        if missing_required:
            message = (
                f"Missing required data ({', '.join(missing_required)}); "
                f"fallback {'attempted' if fallback_attempted else 'not attempted'}"
            )
            if fallback_attempted:
                raise FetchError(message)
            raise ConfigurationError(
                f"{message}. Select devices or enable the Open-Meteo fallback."
            )

        for name in (FIELD_ILLUMINANCE, FIELD_RAIN_RATE):
            if name not in values:
                values[name] = 0.0
                sources[name] = ObservationSource.DERIVED

        observation = Observation(
            temperature=values[FIELD_TEMPERATURE],
            humidity=values[FIELD_HUMIDITY],
            wind_speed=values[FIELD_WIND_SPEED],
            illuminance=values[FIELD_ILLUMINANCE],
            rain_rate=values[FIELD_RAIN_RATE],
            dew_point=values.get(FIELD_DEW_POINT),
            sources=sources,
        )
        self._debug(
            "Observation: T=%.1f RH=%.0f W=%.2f m/s lux=%.0f rain=%.2f dp=%s",
            observation.temperature,
            observation.humidity,
            observation.wind_speed,
            observation.illuminance,
            observation.rain_rate,
            observation.dew_point,
        )
        return observation
