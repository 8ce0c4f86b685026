"""Constants for the Laundry Drying integration."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Final

DOMAIN: Final = "laundry_drying"


# Version from manifest.json
def _get_version() -> str:
    """Get version from manifest.json."""
    try:
        manifest_path = Path(__file__).parent / "manifest.json"
        with open(manifest_path, encoding="utf-8") as f:
            manifest = json.load(f)
            return manifest.get("version", "unknown")
    except (OSError, ValueError):
        return "unknown"


VERSION: Final = _get_version()

# Configuration
CONF_UPDATE_MINUTES: Final = "update_minutes"
CONF_DRYING_LOCATION: Final = "drying_location"
CONF_DRYING_SPEED: Final = "drying_speed"
CONF_TEMPERATURE_ENTITY: Final = "temperature_entity"
CONF_HUMIDITY_ENTITY: Final = "humidity_entity"
CONF_DEW_POINT_ENTITY: Final = "dew_point_entity"
CONF_ILLUMINANCE_ENTITY: Final = "illuminance_entity"
CONF_WIND_ENTITY: Final = "wind_entity"
CONF_RAIN_ENTITY: Final = "rain_entity"

# Advanced (options flow)
CONF_DEW_POINT_ATTRIBUTE: Final = "dew_point_attribute"
CONF_WIND_ATTRIBUTE: Final = "wind_attribute"
CONF_WIND_UNITS: Final = "wind_units"
CONF_RAIN_ATTRIBUTE: Final = "rain_attribute"
CONF_RAIN_UNITS: Final = "rain_units"
CONF_RAIN_NOMINAL_RATE: Final = "rain_nominal_rate"
CONF_USE_FALLBACK: Final = "use_open_meteo_fallback"
CONF_MAX_AGE_MINUTES: Final = "max_age_minutes"
CONF_CUSTOM_LATITUDE: Final = "custom_latitude"
CONF_CUSTOM_LONGITUDE: Final = "custom_longitude"
CONF_ENABLE_DEBUG: Final = "enable_debug"

# Attribute name "state" means: read the entity state itself
ATTRIBUTE_STATE: Final = "state"

# Attribute names accepted for device bindings
DEW_POINT_ATTRIBUTES: Final = [ATTRIBUTE_STATE, "dew_point", "dewPoint", "dewpoint"]
WIND_ATTRIBUTES: Final = [
    ATTRIBUTE_STATE,
    "wind_speed",
    "windSpeed",
    "wind",
    "wind_kmh",
    "windspeed",
    "wind_mps",
    "wind_ms",
]
RAIN_ATTRIBUTES: Final = [
    ATTRIBUTE_STATE,
    "rain_rate",
    "rainRate",
    "precipitation",
    "precip_rate",
    "rain",
    "rainfall_daily",
]

# Units
WIND_UNITS_KMH: Final = "km/h"
WIND_UNITS_MS: Final = "m/s"
WIND_UNIT_OPTIONS: Final = [WIND_UNITS_KMH, WIND_UNITS_MS]
RAIN_UNITS_RATE: Final = "mm/hr"
RAIN_UNITS_MM: Final = "mm"  # no rate, any positive reading counts as rain
RAIN_UNIT_OPTIONS: Final = [RAIN_UNITS_RATE, RAIN_UNITS_MM]

# Drying locations
LOCATION_DIRECT_SUN: Final = "direct_sun"
LOCATION_PARTIAL_SHADE: Final = "partial_shade"
LOCATION_FULL_SHADE: Final = "full_shade"
LOCATION_INDOOR: Final = "indoor"
DRYING_LOCATIONS: Final = [
    LOCATION_DIRECT_SUN,
    LOCATION_PARTIAL_SHADE,
    LOCATION_FULL_SHADE,
    LOCATION_INDOOR,
]

# Drying speeds
SPEED_FAST: Final = "fast"
SPEED_NORMAL: Final = "normal"
SPEED_SLOW: Final = "slow"
DRYING_SPEEDS: Final = [SPEED_FAST, SPEED_NORMAL, SPEED_SLOW]

# Default values
DEFAULT_NAME: Final = "Laundry Drying Progress"
DEFAULT_UPDATE_MINUTES: Final = 5
DEFAULT_DRYING_LOCATION: Final = LOCATION_DIRECT_SUN
DEFAULT_DRYING_SPEED: Final = SPEED_NORMAL
DEFAULT_DEW_POINT_ATTRIBUTE: Final = ATTRIBUTE_STATE
DEFAULT_WIND_ATTRIBUTE: Final = ATTRIBUTE_STATE
DEFAULT_WIND_UNITS: Final = WIND_UNITS_KMH
DEFAULT_RAIN_ATTRIBUTE: Final = ATTRIBUTE_STATE
DEFAULT_RAIN_UNITS: Final = RAIN_UNITS_RATE
DEFAULT_RAIN_NOMINAL_RATE: Final = 0.2  # mm/hr
DEFAULT_USE_FALLBACK: Final = True
DEFAULT_MAX_AGE_MINUTES: Final = 20
DEFAULT_ENABLE_DEBUG: Final = False

# Validation boundaries
MIN_UPDATE_MINUTES: Final = 1
MAX_UPDATE_MINUTES: Final = 60
MIN_MAX_AGE_MINUTES: Final = 2
MAX_MAX_AGE_MINUTES: Final = 240
MIN_RAIN_NOMINAL_RATE: Final = 0.01
MAX_RAIN_NOMINAL_RATE: Final = 50.0

# Health check
HEALTH_CHECK_INTERVAL: Final = 300  # seconds

# Remote weather
OPEN_METEO_URL: Final = "https://api.open-meteo.com/v1/forecast"
OPEN_METEO_TIMEOUT: Final = 10  # seconds

# Device info
MANUFACTURER: Final = "Laundry Drying"
MODEL_NAME: Final = "Drying Progress Tracker"

# Icons
ICON_PROGRESS: Final = "mdi:tshirt-crew"
ICON_ETA: Final = "mdi:timer-sand"
ICON_STATUS: Final = "mdi:weather-windy"
ICON_WEATHER: Final = "mdi:weather-partly-cloudy"
ICON_LEARNING: Final = "mdi:brain"
ICON_START: Final = "mdi:play"
ICON_PAUSE: Final = "mdi:pause"
ICON_MARK_DRY: Final = "mdi:check-circle-outline"
ICON_RESET: Final = "mdi:restore"
ICON_REFRESH: Final = "mdi:refresh"
ICON_LOCATION: Final = "mdi:map-marker"
ICON_SPEED: Final = "mdi:speedometer"

# Services
SERVICE_START: Final = "start"
SERVICE_PAUSE: Final = "pause"
SERVICE_MARK_DRY: Final = "mark_dry"
SERVICE_RESET: Final = "reset"
SERVICE_RESET_CALIBRATION: Final = "reset_calibration"
SERVICE_REFRESH: Final = "refresh"
SERVICES: Final = [
    SERVICE_START,
    SERVICE_PAUSE,
    SERVICE_MARK_DRY,
    SERVICE_RESET,
    SERVICE_RESET_CALIBRATION,
    SERVICE_REFRESH,
]

# Service attributes
ATTR_ENTRY_ID: Final = "entry_id"

# Storage
STORAGE_VERSION: Final = 1
STORAGE_KEY: Final = DOMAIN
