"""Tests for the Open-Meteo client."""

import aiohttp
import pytest

from homeassistant.core import HomeAssistant
from homeassistant.helpers.aiohttp_client import async_get_clientsession

from custom_components.laundry_drying.const import OPEN_METEO_URL
from custom_components.laundry_drying.core.errors import FetchError
from custom_components.laundry_drying.core.open_meteo import OpenMeteoClient

CURRENT = {
    "time": "2024-06-01T14:00",
    "temperature_2m": 21.3,
    "relative_humidity_2m": 60,
    "dew_point_2m": 13.2,
    "wind_speed_10m": 7.2,
    "precipitation": 0.0,
    "cloud_cover": 25,
}


async def test_fetch_current(hass: HomeAssistant, aioclient_mock) -> None:
    aioclient_mock.get(OPEN_METEO_URL, json={"latitude": 52.37, "current": CURRENT})
    client = OpenMeteoClient(async_get_clientsession(hass))

    conditions = await client.async_fetch_current(52.37, 4.89)

    assert conditions.temperature == 21.3
    assert conditions.humidity == 60.0
    assert conditions.dew_point == 13.2
    assert conditions.wind_speed == pytest.approx(2.0)
    assert conditions.rain_rate == 0.0
    assert conditions.illuminance == 45000.0

    assert aioclient_mock.call_count == 1
    url = aioclient_mock.mock_calls[0][1]
    assert url.query["latitude"] == "52.37"
    assert url.query["longitude"] == "4.89"
    assert url.query["wind_speed_unit"] == "kmh"
    assert "cloud_cover" in url.query["current"]


async def test_missing_fields_are_none(hass: HomeAssistant, aioclient_mock) -> None:
    aioclient_mock.get(OPEN_METEO_URL, json={"current": {"temperature_2m": 18.0}})
    client = OpenMeteoClient(async_get_clientsession(hass))

    conditions = await client.async_fetch_current(0.0, 0.0)

    assert conditions.temperature == 18.0
    assert conditions.wind_speed is None
    assert conditions.illuminance is None


@pytest.mark.parametrize(
    ("mock_kwargs", "message"),
    [
        ({"status": 500}, "HTTP 500"),
        ({"json": {"hourly": {}}}, "no current conditions"),
        ({"json": {"current": {**CURRENT, "temperature_2m": "warm"}}}, "non-numeric"),
        ({"text": "<html>"}, "request failed"),
        ({"exc": TimeoutError()}, "timed out"),
        ({"exc": aiohttp.ClientError("connection reset")}, "request failed"),
    ],
)
async def test_fetch_errors(hass: HomeAssistant, aioclient_mock, mock_kwargs, message) -> None:
    aioclient_mock.get(OPEN_METEO_URL, **mock_kwargs)
    client = OpenMeteoClient(async_get_clientsession(hass))

    with pytest.raises(FetchError, match=message):
        await client.async_fetch_current(52.37, 4.89)
