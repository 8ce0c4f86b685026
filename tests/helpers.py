"""Test doubles for the drying core."""

from __future__ import annotations

from datetime import datetime, timedelta

from custom_components.laundry_drying.core.errors import StaleDataError
from custom_components.laundry_drying.core.weather import (
    Observation,
    RemoteConditions,
    SensorValue,
    SourceBinding,
)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


class FakeAggregator:
    """Returns a fixed observation, or raises the configured error."""

    def __init__(self, observation: Observation | None = None) -> None:
        self.observation = observation
        self.error: Exception | None = None
        self.calls = 0

    async def async_observe(self) -> Observation:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.observation


class FixedRateSmoother:
    """Smoother whose instantaneous and smoothed rate are both fixed."""

    def __init__(self, rate: float) -> None:
        self.rate = rate

    def instant_rate(self, power: float, preset_hours: float) -> float:
        return self.rate

    def update(self, previous_ema: float, power: float, preset_hours: float) -> float:
        return self.rate


class FakeReader:
    """SensorReader over a dict of entity_id -> value (None means absent)."""

    def __init__(
        self, values: dict[str, float | None], stale: set[str] | None = None
    ) -> None:
        self.values = values
        self.stale = stale or set()
        self.reads: list[SourceBinding] = []

    def read_fresh(self, binding: SourceBinding, max_age_minutes: int) -> SensorValue | None:
        self.reads.append(binding)
        if binding.entity_id in self.stale:
            raise StaleDataError(binding.entity_id, max_age_minutes + 5.0, max_age_minutes)
        value = self.values.get(binding.entity_id)
        if value is None:
            return None
        return SensorValue(value=value, age_ms=1000)


class FakeProvider:
    """Remote provider returning fixed conditions."""

    def __init__(self, conditions: RemoteConditions | None = None) -> None:
        self.conditions = conditions or RemoteConditions(
            temperature=18.0,
            humidity=70.0,
            dew_point=12.5,
            wind_speed=2.5,
            rain_rate=0.0,
            illuminance=30000.0,
        )
        self.error: Exception | None = None
        self.calls: list[tuple[float, float]] = []

    async def async_fetch_current(self, latitude: float, longitude: float) -> RemoteConditions:
        self.calls.append((latitude, longitude))
        if self.error is not None:
            raise self.error
        return self.conditions


def sunny_observation(**overrides) -> Observation:
    """Warm, dry, breezy afternoon in full sun."""
    values = {
        "temperature": 25.0,
        "humidity": 52.0,
        "wind_speed": 3.0,
        "illuminance": 60000.0,
        "rain_rate": 0.0,
        "dew_point": 14.4,
    }
    values.update(overrides)
    return Observation(**values)
