"""Evaporation model: how favourable current conditions are for drying.

Scores an observation in [0, 1] from four normalized terms:
  temperature    → 30%
  dryness of air → 40% (dew point depression, else relative humidity)
  wind           → 20% (scaled by the location's wind exposure)
  sunlight       → 10% (scaled by the location's sun exposure)
followed by multiplicative penalties for humid, cold or near-dew conditions.
"""

from __future__ import annotations

from dataclasses import dataclass
import math

from ..const import (
    LOCATION_DIRECT_SUN,
    LOCATION_FULL_SHADE,
    LOCATION_INDOOR,
    LOCATION_PARTIAL_SHADE,
    SPEED_FAST,
    SPEED_NORMAL,
    SPEED_SLOW,
)
from .helpers import clamp
from .weather import FULL_SUN_LUX, Observation

# Term weights
WEIGHT_TEMPERATURE = 0.30
WEIGHT_DEPRESSION = 0.40
WEIGHT_WIND = 0.20
WEIGHT_SUN = 0.10

# Normalization ranges
TEMP_FLOOR = 5.0  # °C, no temperature contribution below
TEMP_SPAN = 25.0  # °C above the floor for full contribution
DEPRESSION_SPAN = 20.0  # °C of depression for full contribution
HUMIDITY_DRY = 85.0  # % RH at which the humidity term reaches zero
HUMIDITY_SPAN = 55.0
WIND_SCALE = 2.5  # m/s

# Penalties
HUMIDITY_VERY_HIGH = 92.0
HUMIDITY_VERY_HIGH_PENALTY = 0.25
HUMIDITY_HIGH = 85.0
HUMIDITY_HIGH_PENALTY = 0.55
TEMP_COLD = 2.0
TEMP_COLD_PENALTY = 0.4
DEPRESSION_DEW_RISK = 2.0
DEPRESSION_DEW_RISK_PENALTY = 0.2

# Hours a typical load takes in ideal conditions
SPEED_HOURS: dict[str, float] = {
    SPEED_FAST: 3.0,
    SPEED_NORMAL: 4.5,
    SPEED_SLOW: 6.5,
}


@dataclass(frozen=True)
class LocationProfile:
    """Sun and wind exposure of a drying location."""

    key: str
    sun_factor: float
    wind_factor: float
    label: str


LOCATION_PROFILES: dict[str, LocationProfile] = {
    LOCATION_DIRECT_SUN: LocationProfile(LOCATION_DIRECT_SUN, 1.0, 1.0, "Direct sun"),
    LOCATION_PARTIAL_SHADE: LocationProfile(
        LOCATION_PARTIAL_SHADE, 0.5, 0.9, "Partial shade"
    ),
    LOCATION_FULL_SHADE: LocationProfile(LOCATION_FULL_SHADE, 0.15, 0.7, "Full shade"),
    LOCATION_INDOOR: LocationProfile(LOCATION_INDOOR, 0.0, 0.3, "Indoor"),
}


def get_location_profile(key: str | None) -> LocationProfile:
    """Return the profile for a location key, direct sun if unknown."""
    return LOCATION_PROFILES.get(key or "", LOCATION_PROFILES[LOCATION_DIRECT_SUN])


def get_speed_hours(speed: str | None) -> float:
    """Return baseline drying hours for a speed preset, normal if unknown."""
    return SPEED_HOURS.get(speed or "", SPEED_HOURS[SPEED_NORMAL])


def evaporation_power(obs: Observation, profile: LocationProfile) -> float:
    """Score drying conditions in [0, 1]; 0 while it rains."""
    if obs.rain_rate > 0:
        return 0.0

    temp_n = clamp((obs.temperature - TEMP_FLOOR) / TEMP_SPAN, 0.0, 1.0)

    depression = obs.dew_point_depression
    if depression is not None:
        dry_n = clamp(depression / DEPRESSION_SPAN, 0.0, 1.0)
    else:
        dry_n = clamp((HUMIDITY_DRY - obs.humidity) / HUMIDITY_SPAN, 0.0, 1.0)

    wind_n = (
        clamp(1.0 - math.exp(-obs.wind_speed / WIND_SCALE), 0.0, 1.0)
        * profile.wind_factor
    )
    sun_n = clamp(obs.illuminance / FULL_SUN_LUX, 0.0, 1.0) * profile.sun_factor

    power = (
        WEIGHT_TEMPERATURE * temp_n
        + WEIGHT_DEPRESSION * dry_n
        + WEIGHT_WIND * wind_n
        + WEIGHT_SUN * sun_n
    )

    if obs.humidity >= HUMIDITY_VERY_HIGH:
        power *= HUMIDITY_VERY_HIGH_PENALTY
    elif obs.humidity >= HUMIDITY_HIGH:
        power *= HUMIDITY_HIGH_PENALTY
    if obs.temperature <= TEMP_COLD:
        power *= TEMP_COLD_PENALTY
    if depression is not None and depression < DEPRESSION_DEW_RISK:
        power *= DEPRESSION_DEW_RISK_PENALTY

    return clamp(power, 0.0, 1.0)
