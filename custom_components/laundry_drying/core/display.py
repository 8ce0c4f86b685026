"""Human readable formatting for drying state."""

from __future__ import annotations

from .helpers import round_half_up
from .weather import Observation

NO_DURATION = "—"
UNKNOWN_DURATION = "Unknown"

# Wind words, upper bounds in m/s
WIND_WORDS: tuple[tuple[float, str], ...] = (
    (0.5, "calm"),
    (2.0, "light breeze"),
    (5.0, "moderate wind"),
    (10.0, "strong wind"),
)
WIND_WORD_MAX = "very windy"


def format_duration(minutes: float | None) -> str:
    """Format minutes as "Nh Mm"."""
    if minutes is None or minutes < 0:
        return NO_DURATION
    total = int(minutes)
    if total == 0:
        return "0m"
    hours, mins = divmod(total, 60)
    if hours == 0:
        return f"{mins}m"
    if mins == 0:
        return f"{hours}h"
    return f"{hours}h {mins}m"


def format_eta(minutes: int | None) -> str:
    """Format an ETA, "Unknown" while it cannot be projected."""
    if minutes is None:
        return UNKNOWN_DURATION
    return format_duration(minutes)


def describe_wind(wind_speed: float) -> str:
    """Describe a wind speed (m/s) in words."""
    for limit, word in WIND_WORDS:
        if wind_speed < limit:
            return word
    return WIND_WORD_MAX


def format_conditions(obs: Observation) -> str:
    """One-line summary such as "25.0°C, 52% RH, light breeze"."""
    text = (
        f"{obs.temperature:.1f}°C, {round_half_up(obs.humidity):.0f}% RH, "
        f"{describe_wind(obs.wind_speed)}"
    )
    if obs.is_raining:
        text += ", RAIN"
    return text


def format_debug_summary(obs: Observation) -> str:
    """List every observation value with its source."""
    parts = []
    for name, value in (
        ("temperature", obs.temperature),
        ("humidity", obs.humidity),
        ("dew_point", obs.dew_point),
        ("wind_speed", obs.wind_speed),
        ("illuminance", obs.illuminance),
        ("rain_rate", obs.rain_rate),
    ):
        source = obs.sources.get(name)
        shown = "n/a" if value is None else f"{value:g}"
        parts.append(f"{name}={shown} ({source or 'n/a'})")
    return "; ".join(parts)
