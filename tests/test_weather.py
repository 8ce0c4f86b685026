"""Tests for weather aggregation."""

import logging

import pytest

from custom_components.laundry_drying.core.errors import ConfigurationError, FetchError
from custom_components.laundry_drying.core.weather import (
    AggregatorSettings,
    ObservationSource,
    SourceBinding,
    WeatherAggregator,
    calculate_dew_point,
    illuminance_from_cloud_cover,
)

from .helpers import FakeProvider, FakeReader

LAT, LON = 52.37, 4.89


def _settings(**overrides) -> AggregatorSettings:
    values = {
        "temperature": SourceBinding("sensor.temperature"),
        "humidity": SourceBinding("sensor.humidity"),
        "wind": SourceBinding("sensor.wind"),
        "wind_units": "m/s",
        "use_fallback": False,
        "latitude": LAT,
        "longitude": LON,
    }
    values.update(overrides)
    return AggregatorSettings(**values)


def test_dew_point():
    assert calculate_dew_point(25.0, 52.0) == 14.4
    assert calculate_dew_point(20.0, 100.0) == 20.0
    assert calculate_dew_point(20.0, 150.0) == 20.0
    # Zero humidity is clamped to 1%
    assert calculate_dew_point(20.0, 0.0) == calculate_dew_point(20.0, 1.0)


def test_illuminance_from_cloud_cover():
    assert illuminance_from_cloud_cover(0) == 60000.0
    assert illuminance_from_cloud_cover(25) == 45000.0
    assert illuminance_from_cloud_cover(100) == 0.0
    assert illuminance_from_cloud_cover(140) == 0.0


def test_source_binding_from_config():
    assert SourceBinding.from_config(None) is None
    assert SourceBinding.from_config("") is None
    assert SourceBinding.from_config("weather.home", "state") == SourceBinding("weather.home")
    assert SourceBinding.from_config("weather.home", "wind_speed").attribute == "wind_speed"


def test_aggregator_settings_from_config():
    settings = AggregatorSettings.from_config(
        {
            "temperature_entity": "sensor.t",
            "wind_entity": "weather.home",
            "wind_attribute": "wind_speed",
            "rain_units": "mm",
            "use_open_meteo_fallback": False,
            "max_age_minutes": 30.0,
        },
        LAT,
        LON,
    )
    assert settings.temperature == SourceBinding("sensor.t")
    assert settings.humidity is None
    assert settings.wind == SourceBinding("weather.home", "wind_speed")
    assert settings.wind_units == "km/h"
    assert settings.rain_units == "mm"
    assert settings.rain_nominal_rate == 0.2
    assert settings.use_fallback is False
    assert settings.max_age_minutes == 30
    assert (settings.latitude, settings.longitude) == (LAT, LON)


async def test_devices_only():
    reader = FakeReader({"sensor.temperature": 25.0, "sensor.humidity": 52.0, "sensor.wind": 3.0})
    provider = FakeProvider()
    obs = await WeatherAggregator(reader, provider, _settings()).async_observe()

    assert (obs.temperature, obs.humidity, obs.wind_speed) == (25.0, 52.0, 3.0)
    assert obs.dew_point == 14.4
    assert obs.illuminance == 0.0
    assert obs.rain_rate == 0.0
    assert obs.sources["temperature"] is ObservationSource.DEVICE
    assert obs.sources["dew_point"] is ObservationSource.DERIVED
    assert obs.sources["illuminance"] is ObservationSource.DERIVED
    assert provider.calls == []


async def test_device_dew_point_is_kept():
    reader = FakeReader(
        {
            "sensor.temperature": 25.0,
            "sensor.humidity": 52.0,
            "sensor.wind": 3.0,
            "sensor.dew_point": 12.0,
        }
    )
    settings = _settings(dew_point=SourceBinding("sensor.dew_point"))
    obs = await WeatherAggregator(reader, None, settings).async_observe()
    assert obs.dew_point == 12.0
    assert obs.sources["dew_point"] is ObservationSource.DEVICE


async def test_wind_in_kmh_is_converted():
    reader = FakeReader({"sensor.temperature": 20.0, "sensor.humidity": 60.0, "sensor.wind": 18.0})
    obs = await WeatherAggregator(reader, None, _settings(wind_units="km/h")).async_observe()
    assert obs.wind_speed == pytest.approx(5.0)


@pytest.mark.parametrize(("reading", "expected"), [(3.4, 0.5), (0.0, 0.0)])
async def test_rain_total_maps_to_nominal_rate(reading, expected):
    reader = FakeReader(
        {
            "sensor.temperature": 20.0,
            "sensor.humidity": 60.0,
            "sensor.wind": 1.0,
            "sensor.rain": reading,
        }
    )
    settings = _settings(
        rain=SourceBinding("sensor.rain"), rain_units="mm", rain_nominal_rate=0.5
    )
    obs = await WeatherAggregator(reader, None, settings).async_observe()
    assert obs.rain_rate == expected


async def test_remote_fills_only_missing_fields():
    """A stale or missing device reading is filled from the remote snapshot."""
    reader = FakeReader({"sensor.temperature": 22.0, "sensor.humidity": None, "sensor.wind": 1.0})
    provider = FakeProvider()
    obs = await WeatherAggregator(reader, provider, _settings(use_fallback=True)).async_observe()

    assert provider.calls == [(LAT, LON)]
    assert obs.temperature == 22.0
    assert obs.sources["temperature"] is ObservationSource.DEVICE
    assert obs.humidity == 70.0
    assert obs.sources["humidity"] is ObservationSource.REMOTE
    assert obs.wind_speed == 1.0
    assert obs.illuminance == 30000.0
    assert obs.sources["illuminance"] is ObservationSource.DERIVED
    # Remote dew point is used as is
    assert obs.dew_point == 12.5
    assert obs.sources["dew_point"] is ObservationSource.REMOTE


async def test_stale_device_reading_is_replaced_by_remote(
    caplog: pytest.LogCaptureFixture,
) -> None:
    reader = FakeReader(
        {"sensor.temperature": 22.0, "sensor.humidity": 40.0, "sensor.wind": 1.0},
        stale={"sensor.humidity"},
    )
    provider = FakeProvider()
    aggregator = WeatherAggregator(reader, provider, _settings(use_fallback=True))
    with caplog.at_level(
        logging.DEBUG, logger="custom_components.laundry_drying.core.weather"
    ):
        obs = await aggregator.async_observe()

    assert obs.humidity == 70.0
    assert obs.sources["humidity"] is ObservationSource.REMOTE
    assert obs.temperature == 22.0
    assert obs.sources["temperature"] is ObservationSource.DEVICE
    assert "Ignoring stale reading: sensor.humidity is stale" in caplog.text
    assert "No value from sensor.humidity" not in caplog.text


async def test_fallback_disabled_with_missing_device():
    reader = FakeReader({"sensor.temperature": 22.0, "sensor.wind": 1.0})
    provider = FakeProvider()
    aggregator = WeatherAggregator(reader, provider, _settings())
    with pytest.raises(ConfigurationError, match="humidity"):
        await aggregator.async_observe()
    assert provider.calls == []


async def test_fallback_without_location():
    reader = FakeReader({})
    aggregator = WeatherAggregator(
        reader,
        FakeProvider(),
        _settings(use_fallback=True, latitude=None, longitude=None),
    )
    with pytest.raises(ConfigurationError, match="Location not set"):
        await aggregator.async_observe()


async def test_fallback_error_propagates():
    provider = FakeProvider()
    provider.error = FetchError("Open-Meteo HTTP 500")
    aggregator = WeatherAggregator(FakeReader({}), provider, _settings(use_fallback=True))
    with pytest.raises(FetchError, match="HTTP 500"):
        await aggregator.async_observe()


async def test_fallback_missing_required_field():
    provider = FakeProvider()
    provider.conditions.wind_speed = None
    aggregator = WeatherAggregator(FakeReader({}), provider, _settings(use_fallback=True))
    with pytest.raises(FetchError, match="wind_speed"):
        await aggregator.async_observe()


async def test_all_devices_fresh_skips_remote():
    reader = FakeReader(
        {
            "sensor.temperature": 20.0,
            "sensor.humidity": 60.0,
            "sensor.wind": 1.0,
            "sensor.lux": 10000.0,
            "sensor.rain": 0.0,
        }
    )
    provider = FakeProvider()
    settings = _settings(
        use_fallback=True,
        illuminance=SourceBinding("sensor.lux"),
        rain=SourceBinding("sensor.rain"),
    )
    obs = await WeatherAggregator(reader, provider, settings).async_observe()
    assert provider.calls == []
    assert obs.illuminance == 10000.0
