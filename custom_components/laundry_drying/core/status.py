"""Drying status classification."""

from __future__ import annotations

from typing import NamedTuple

from ..const import LOCATION_DIRECT_SUN, LOCATION_FULL_SHADE, LOCATION_INDOOR
from .helpers import round_half_up
from .weather import Observation

STATUS_STALLED = "Stalled"
STATUS_VERY_SLOW = "Very slow"
STATUS_SLOW = "Slow drying"
STATUS_MODERATE = "Moderate drying"
STATUS_GOOD = "Good drying"
STATUS_EXCELLENT = "Excellent drying"
STATUS_FAST = "Fast drying"

# Thresholds
DEW_RISK_DEPRESSION = 2.0
SATURATED_DEPRESSION = 5.0
VERY_DRY_DEPRESSION = 12.0
VERY_HIGH_HUMIDITY = 90.0
INDOOR_HIGH_HUMIDITY = 70.0
LOW_WIND = 0.8  # m/s
LOW_SUN_LUX = 2000.0
INDOOR_SLOW_RATE = 0.08  # fraction per hour
SLOW_RATE = 0.06


class StatusMessage(NamedTuple):
    """Status label and the reason behind it."""

    status: str
    reason: str


def classify_status(obs: Observation, location: str, rate: float) -> StatusMessage:
    """Classify drying conditions; the first matching rule wins."""
    depression = obs.dew_point_depression

    if obs.rain_rate > 0:
        return StatusMessage(STATUS_STALLED, "Rain detected (drying paused)")
    if depression is not None and depression < DEW_RISK_DEPRESSION:
        return StatusMessage(STATUS_STALLED, "Dew risk - temp near dew point")
    if depression is not None and depression < SATURATED_DEPRESSION:
        return StatusMessage(
            STATUS_VERY_SLOW, "Air nearly saturated (low dew point depression)"
        )
    if obs.humidity >= VERY_HIGH_HUMIDITY:
        return StatusMessage(
            STATUS_SLOW, f"Very high humidity ({round_half_up(obs.humidity):.0f}%)"
        )

    if location == LOCATION_INDOOR:
        if obs.humidity >= INDOOR_HIGH_HUMIDITY:
            return StatusMessage(STATUS_SLOW, "Indoor with high humidity")
        if rate < INDOOR_SLOW_RATE:
            return StatusMessage(STATUS_MODERATE, "Indoor drying (limited airflow)")
        return StatusMessage(STATUS_GOOD, "Indoor with good air circulation")

    if location == LOCATION_FULL_SHADE:
        if obs.wind_speed < LOW_WIND:
            return StatusMessage(STATUS_SLOW, "Shaded with low wind")
        if rate < SLOW_RATE:
            return StatusMessage(STATUS_MODERATE, "Shaded area")
        return StatusMessage(STATUS_GOOD, "Shaded but good airflow")

    if obs.wind_speed < LOW_WIND:
        return StatusMessage(STATUS_SLOW, "Low wind / airflow")
    if obs.illuminance < LOW_SUN_LUX and location == LOCATION_DIRECT_SUN:
        return StatusMessage(STATUS_MODERATE, "Overcast / low sun")
    if rate < SLOW_RATE:
        return StatusMessage(STATUS_MODERATE, "Conditions okay but not ideal")
    if depression is not None and depression > VERY_DRY_DEPRESSION:
        return StatusMessage(
            STATUS_EXCELLENT, "Very dry air (high dew point depression)"
        )
    return StatusMessage(STATUS_FAST, "Good conditions for drying")
