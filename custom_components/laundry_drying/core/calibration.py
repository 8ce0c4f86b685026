"""ETA calibration learned from actual drying times."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
import logging
import math
from typing import Any

from homeassistant.util import dt as dt_util

from .helpers import clamp

_LOGGER = logging.getLogger(__name__)

# Calibration limits
DEFAULT_CALIBRATION_FACTOR = 1.0
MIN_CALIBRATION_FACTOR = 0.33
MAX_CALIBRATION_FACTOR = 3.0

# Smoothing: 30% weight to the newest outcome
DAMPENING = 0.3

# Outcomes shorter than this are treated as accidental
MIN_ACTUAL_MINUTES = 5

# Sessions after which the model counts as calibrated
CALIBRATED_SESSIONS = 5


@dataclass
class CalibrationState:
    """Persisted calibration data."""

    factor: float = DEFAULT_CALIBRATION_FACTOR
    session_count: int = 0
    last_calibrated: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        return {
            "factor": self.factor,
            "session_count": self.session_count,
            "last_calibrated": (
                self.last_calibrated.isoformat() if self.last_calibrated else None
            ),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CalibrationState:
        """Create from dictionary, clamping an out-of-range factor."""
        try:
            factor = float(data.get("factor", DEFAULT_CALIBRATION_FACTOR))
        except (TypeError, ValueError):
            factor = DEFAULT_CALIBRATION_FACTOR
        return cls(
            factor=clamp(factor, MIN_CALIBRATION_FACTOR, MAX_CALIBRATION_FACTOR),
            session_count=max(0, int(data.get("session_count", 0) or 0)),
            last_calibrated=(
                dt_util.parse_datetime(data["last_calibrated"])
                if data.get("last_calibrated")
                else None
            ),
        )


class CalibrationLearner:
    """Learn a multiplicative ETA correction from user feedback."""

    def __init__(
        self,
        state: CalibrationState | None = None,
        debug_callback: Callable[..., None] | None = None,
        now: Callable[[], datetime] = dt_util.utcnow,
    ) -> None:
        """Initialize the learner."""
        self.state = state or CalibrationState()
        self._debug_fn = debug_callback
        self._now = now

    def _debug(self, message: str, *args: Any) -> None:
        """Log via the drying debug logger if available, else fallback to _LOGGER."""
        if self._debug_fn:
            self._debug_fn("calibration", message, *args)
        else:
            _LOGGER.debug(message, *args)

    @property
    def factor(self) -> float:
        """Current calibration factor."""
        return self.state.factor

    @property
    def session_count(self) -> int:
        """Number of sessions learned from."""
        return self.state.session_count

    @property
    def learning_status(self) -> str:
        """Human readable learning progress."""
        count = self.state.session_count
        if count <= 0:
            return "Not calibrated"
        if count < CALIBRATED_SESSIONS:
            return f"Learning ({count} session{'s' if count != 1 else ''})"
        return f"Calibrated ({count} sessions)"

    def record_outcome(self, predicted_minutes: float, actual_minutes: float) -> float:
        """
        Blend one actual-vs-predicted outcome into the factor.

        Args:
            predicted_minutes: ETA predicted at the start of the session
            actual_minutes: Minutes the laundry actually took

        Returns:
            The (possibly unchanged) calibration factor
        """
        if predicted_minutes <= 0 or actual_minutes <= MIN_ACTUAL_MINUTES:
            self._debug(
                "Ignoring outcome: predicted=%s actual=%s",
                predicted_minutes,
                actual_minutes,
            )
            return self.state.factor

        ratio = clamp(
            actual_minutes / predicted_minutes,
            MIN_CALIBRATION_FACTOR,
            MAX_CALIBRATION_FACTOR,
        )
        old = self.state.factor
        new = clamp(
            old * (1 - DAMPENING) + ratio * DAMPENING,
            MIN_CALIBRATION_FACTOR,
            MAX_CALIBRATION_FACTOR,
        )
        self.state.factor = new
        self.state.session_count += 1
        self.state.last_calibrated = self._now()

        _LOGGER.info(
            "Calibration updated: predicted=%d min, actual=%d min, factor %.3f -> %.3f "
            "(%d sessions)",
            predicted_minutes,
            actual_minutes,
            old,
            new,
            self.state.session_count,
        )
        return new

    def apply_to(self, raw_eta_minutes: float | None) -> int | None:
        """Apply the factor to a raw ETA; unknown stays unknown."""
        if raw_eta_minutes is None:
            return None
        return math.ceil(raw_eta_minutes * self.state.factor)

    def reset(self) -> None:
        """Forget everything learned."""
        self.state = CalibrationState()
        _LOGGER.info("Calibration reset")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for storage."""
        return self.state.to_dict()

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any] | None,
        debug_callback: Callable[..., None] | None = None,
        now: Callable[[], datetime] = dt_util.utcnow,
    ) -> CalibrationLearner:
        """Create from dictionary."""
        state = CalibrationState.from_dict(data) if data else CalibrationState()
        return cls(state, debug_callback=debug_callback, now=now)
