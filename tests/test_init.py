"""Integration tests for Laundry Drying setup, services and entities."""

from datetime import timedelta

import pytest

from homeassistant.config_entries import ConfigEntryState
from homeassistant.const import CONF_NAME
from homeassistant.core import HomeAssistant
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers import entity_registry as er
from pytest_homeassistant_custom_component.common import MockConfigEntry

from custom_components.laundry_drying.const import (
    CONF_HUMIDITY_ENTITY,
    CONF_TEMPERATURE_ENTITY,
    CONF_USE_FALLBACK,
    CONF_WIND_ENTITY,
    CONF_WIND_UNITS,
    DOMAIN,
    OPEN_METEO_URL,
    SERVICE_MARK_DRY,
    SERVICE_PAUSE,
    SERVICE_RESET,
    SERVICE_START,
)

pytestmark = pytest.mark.usefixtures("enable_custom_integrations")

DEVICE_CONFIG = {
    CONF_NAME: "Backyard",
    CONF_TEMPERATURE_ENTITY: "sensor.outdoor_temperature",
    CONF_HUMIDITY_ENTITY: "sensor.outdoor_humidity",
    CONF_WIND_ENTITY: "sensor.wind_speed",
    CONF_WIND_UNITS: "m/s",
    CONF_USE_FALLBACK: False,
}

OPEN_METEO_CURRENT = {
    "temperature_2m": 21.3,
    "relative_humidity_2m": 60,
    "dew_point_2m": 13.2,
    "wind_speed_10m": 5.4,
    "precipitation": 0.0,
    "cloud_cover": 25,
}


def _set_device_states(hass: HomeAssistant) -> None:
    hass.states.async_set("sensor.outdoor_temperature", "25.0")
    hass.states.async_set("sensor.outdoor_humidity", "52")
    hass.states.async_set("sensor.wind_speed", "3.0")


async def _setup_entry(hass: HomeAssistant, entry: MockConfigEntry) -> None:
    entry.add_to_hass(hass)
    assert await hass.config_entries.async_setup(entry.entry_id)
    await hass.async_block_till_done()
    assert entry.state is ConfigEntryState.LOADED


def _entity_id(hass: HomeAssistant, platform: str, entry: MockConfigEntry, key: str) -> str:
    entity_id = er.async_get(hass).async_get_entity_id(
        platform, DOMAIN, f"{entry.entry_id}_{key}"
    )
    assert entity_id is not None
    return entity_id


def _state(hass: HomeAssistant, entry: MockConfigEntry, key: str, platform: str = "sensor"):
    return hass.states.get(_entity_id(hass, platform, entry, key))


async def _unload(hass: HomeAssistant, entry: MockConfigEntry) -> None:
    assert await hass.config_entries.async_unload(entry.entry_id)
    await hass.async_block_till_done()
    assert entry.state is ConfigEntryState.NOT_LOADED


async def test_setup_starts_ready(hass: HomeAssistant) -> None:
    _set_device_states(hass)
    entry = MockConfigEntry(domain=DOMAIN, title="Backyard", data=DEVICE_CONFIG)
    await _setup_entry(hass, entry)

    assert _state(hass, entry, "progress").state == "0"
    assert _state(hass, entry, "wetness").state == "100"
    assert _state(hass, entry, "status").state == "Ready"
    assert _state(hass, entry, "drying_location").state == "Direct sun"
    assert _state(hass, entry, "drying", "switch").state == "off"
    assert _state(hass, entry, "drying_speed_select", "select").state == "normal"
    for service in (SERVICE_START, SERVICE_PAUSE, SERVICE_MARK_DRY, SERVICE_RESET):
        assert hass.services.has_service(DOMAIN, service)

    await _unload(hass, entry)


async def test_drying_with_device_sensors(hass: HomeAssistant, aioclient_mock) -> None:
    _set_device_states(hass)
    entry = MockConfigEntry(domain=DOMAIN, title="Backyard", data=DEVICE_CONFIG)
    await _setup_entry(hass, entry)

    await hass.services.async_call(DOMAIN, SERVICE_START, {}, blocking=True)
    await hass.async_block_till_done()

    progress = _state(hass, entry, "progress")
    assert progress.state == "2"
    assert progress.attributes["drying_state"] == "drying"
    assert progress.attributes["progress"] == "2% dry"
    assert _state(hass, entry, "conditions").state == "25.0°C, 52% RH, moderate wind"
    assert _state(hass, entry, "dew_point_depression").state == "10.6"
    assert _state(hass, entry, "weather_status").state == "OK"
    # No illuminance sensor bound, so the sun counts as low
    status = _state(hass, entry, "status")
    assert status.state == "Moderate drying"
    assert status.attributes["reason"] == "Overcast / low sun"
    assert _state(hass, entry, "drying", "switch").state == "on"
    assert aioclient_mock.call_count == 0

    await _unload(hass, entry)


async def test_drying_with_open_meteo(hass: HomeAssistant, aioclient_mock) -> None:
    aioclient_mock.get(OPEN_METEO_URL, json={"current": OPEN_METEO_CURRENT})
    entry = MockConfigEntry(
        domain=DOMAIN, title="Balcony", data={CONF_NAME: "Balcony", CONF_USE_FALLBACK: True}
    )
    await _setup_entry(hass, entry)
    # Nothing is fetched while the session is idle
    assert aioclient_mock.call_count == 0

    await hass.services.async_call(
        DOMAIN, SERVICE_START, {"entry_id": entry.entry_id}, blocking=True
    )
    await hass.async_block_till_done()

    assert aioclient_mock.call_count == 1
    assert _state(hass, entry, "progress").state == "1"
    assert _state(hass, entry, "conditions").state == "21.3°C, 60% RH, light breeze"
    assert _state(hass, entry, "status").state == "Fast drying"
    assert _state(hass, entry, "weather_status").state == "OK"

    await _unload(hass, entry)


async def test_fetch_failure_keeps_progress(hass: HomeAssistant, aioclient_mock) -> None:
    aioclient_mock.get(OPEN_METEO_URL, status=500)
    entry = MockConfigEntry(
        domain=DOMAIN, title="Balcony", data={CONF_NAME: "Balcony", CONF_USE_FALLBACK: True}
    )
    await _setup_entry(hass, entry)

    await hass.services.async_call(DOMAIN, SERVICE_START, {}, blocking=True)
    await hass.async_block_till_done()

    assert _state(hass, entry, "progress").state == "0"
    status = _state(hass, entry, "status")
    assert status.state == "Error"
    assert status.attributes["reason"] == "Open-Meteo HTTP 500"
    assert _state(hass, entry, "weather_status").state == "ERROR"
    assert _state(hass, entry, "conditions").state == "Error fetching data"

    await _unload(hass, entry)


async def test_switch_and_buttons(hass: HomeAssistant) -> None:
    _set_device_states(hass)
    entry = MockConfigEntry(domain=DOMAIN, title="Backyard", data=DEVICE_CONFIG)
    await _setup_entry(hass, entry)
    switch_id = _entity_id(hass, "switch", entry, "drying")

    await hass.services.async_call("switch", "turn_on", {"entity_id": switch_id}, blocking=True)
    assert hass.states.get(switch_id).state == "on"

    await hass.services.async_call("switch", "turn_off", {"entity_id": switch_id}, blocking=True)
    assert hass.states.get(switch_id).state == "off"
    assert _state(hass, entry, "status").state == "Paused"
    assert _state(hass, entry, "progress").state == "2"

    await hass.services.async_call(
        "button", "press", {"entity_id": _entity_id(hass, "button", entry, "start")}, blocking=True
    )
    await hass.services.async_call(
        "button", "press", {"entity_id": _entity_id(hass, "button", entry, "mark_dry")}, blocking=True
    )
    assert _state(hass, entry, "progress").state == "100"
    assert _state(hass, entry, "status").state == "Done"
    assert _state(hass, entry, "eta").attributes["eta_display"] == "Done!"

    await hass.services.async_call(
        "button", "press", {"entity_id": _entity_id(hass, "button", entry, "reset")}, blocking=True
    )
    assert _state(hass, entry, "progress").state == "0"
    assert _state(hass, entry, "status").state == "Ready"

    await _unload(hass, entry)


async def test_service_unknown_entry(hass: HomeAssistant) -> None:
    _set_device_states(hass)
    entry = MockConfigEntry(domain=DOMAIN, title="Backyard", data=DEVICE_CONFIG)
    await _setup_entry(hass, entry)

    with pytest.raises(HomeAssistantError, match="not found"):
        await hass.services.async_call(
            DOMAIN, SERVICE_START, {"entry_id": "does_not_exist"}, blocking=True
        )
    assert _state(hass, entry, "status").state == "Ready"

    await _unload(hass, entry)


async def test_health_check_flags_stale_data(hass: HomeAssistant) -> None:
    _set_device_states(hass)
    entry = MockConfigEntry(domain=DOMAIN, title="Backyard", data=DEVICE_CONFIG)
    await _setup_entry(hass, entry)
    await hass.services.async_call(DOMAIN, SERVICE_START, {}, blocking=True)

    coordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    coordinator.session.last_success -= timedelta(minutes=30)
    await coordinator._async_health_check()
    await hass.async_block_till_done()

    status = _state(hass, entry, "status")
    assert status.state == "Warning: Stale data"
    assert status.attributes["reason"] == "No successful update for ~30 min"
    assert _state(hass, entry, "weather_status").state == "STALE"
    assert _state(hass, entry, "progress").state == "2"

    await _unload(hass, entry)


async def test_restore_from_storage(hass: HomeAssistant, hass_storage) -> None:
    _set_device_states(hass)
    entry = MockConfigEntry(
        domain=DOMAIN, title="Backyard", data=DEVICE_CONFIG, entry_id="restored_entry"
    )
    hass_storage["laundry_drying_restored_entry"] = {
        "version": 1,
        "minor_version": 1,
        "key": "laundry_drying_restored_entry",
        "data": {
            "session": {
                "state": "paused",
                "percent_dry": 40,
                "smoothed_rate": 0.2,
                "started_at": "2024-06-01T10:00:00+00:00",
                "initial_eta_minutes": 270,
                "eta_display": "Paused",
                "status": "Paused",
                "weather_status": "OK",
            },
            "calibration": {"factor": 5.0, "session_count": 3},
        },
    }
    await _setup_entry(hass, entry)

    progress = _state(hass, entry, "progress")
    assert progress.state == "40"
    assert progress.attributes["drying_state"] == "paused"
    calibration = _state(hass, entry, "calibration_factor")
    assert calibration.state == "3.0"
    assert calibration.attributes["learning_status"] == "Learning (3 sessions)"

    await _unload(hass, entry)
    saved = hass_storage["laundry_drying_restored_entry"]["data"]
    assert saved["session"]["percent_dry"] == 40
    assert saved["calibration"]["factor"] == 3.0


async def test_select_changes_location(hass: HomeAssistant) -> None:
    _set_device_states(hass)
    entry = MockConfigEntry(domain=DOMAIN, title="Backyard", data=DEVICE_CONFIG)
    await _setup_entry(hass, entry)

    await hass.services.async_call(
        "select",
        "select_option",
        {
            "entity_id": _entity_id(hass, "select", entry, "drying_location_select"),
            "option": "indoor",
        },
        blocking=True,
    )
    await hass.async_block_till_done()

    assert entry.options["drying_location"] == "indoor"
    assert _state(hass, entry, "drying_location").state == "Indoor"

    await _unload(hass, entry)


async def test_restored_drying_session_does_not_jump(hass: HomeAssistant, hass_storage) -> None:
    _set_device_states(hass)
    entry = MockConfigEntry(
        domain=DOMAIN, title="Backyard", data=DEVICE_CONFIG, entry_id="drying_entry"
    )
    hass_storage["laundry_drying_drying_entry"] = {
        "version": 1,
        "minor_version": 1,
        "key": "laundry_drying_drying_entry",
        "data": {
            "session": {
                "state": "drying",
                "percent_dry": 40,
                "smoothed_rate": 0.19,
                "started_at": "2024-06-01T10:00:00+00:00",
                "initial_eta_minutes": 270,
                "status": "Moderate drying",
                "weather_status": "OK",
            },
            "calibration": {"factor": 1.0, "session_count": 0},
        },
    }
    await _setup_entry(hass, entry)
    assert _state(hass, entry, "progress").state == "40"

    # Reloading, as a location or speed change does, keeps the progress too
    assert await hass.config_entries.async_reload(entry.entry_id)
    await hass.async_block_till_done()
    assert _state(hass, entry, "progress").state == "40"

    # The next scheduled interval advances as usual
    coordinator = hass.data[DOMAIN][entry.entry_id]["coordinator"]
    await coordinator.async_refresh()
    await hass.async_block_till_done()
    assert _state(hass, entry, "progress").state == "42"

    await _unload(hass, entry)
