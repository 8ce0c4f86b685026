"""Core functionality for the Laundry Drying integration."""

from __future__ import annotations

from .calibration import CalibrationLearner, CalibrationState
from .errors import ConfigurationError, FetchError, StaleDataError, WeatherDataError
from .evaporation import LocationProfile, evaporation_power, get_location_profile
from .logger import DryingLogger
from .open_meteo import OpenMeteoClient
from .session import (
    DryingSession,
    DryingSnapshot,
    DryingState,
    SessionSettings,
    WeatherStatus,
)
from .smoothing import RateSmoother
from .status import StatusMessage, classify_status
from .weather import (
    AggregatorSettings,
    Observation,
    ObservationSource,
    SensorValue,
    SourceBinding,
    WeatherAggregator,
    calculate_dew_point,
)

__all__ = [
    "AggregatorSettings",
    "CalibrationLearner",
    "CalibrationState",
    "ConfigurationError",
    "DryingLogger",
    "DryingSession",
    "DryingSnapshot",
    "DryingState",
    "FetchError",
    "LocationProfile",
    "Observation",
    "ObservationSource",
    "OpenMeteoClient",
    "RateSmoother",
    "SensorValue",
    "SessionSettings",
    "SourceBinding",
    "StaleDataError",
    "StatusMessage",
    "WeatherAggregator",
    "WeatherDataError",
    "WeatherStatus",
    "calculate_dew_point",
    "classify_status",
    "evaporation_power",
    "get_location_profile",
]
