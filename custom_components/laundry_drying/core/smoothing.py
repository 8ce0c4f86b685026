"""Exponential smoothing of the drying rate."""

from __future__ import annotations

# Evaporation power that corresponds to the preset's nominal drying time
REFERENCE_POWER = 0.70

EMA_KEEP = 0.75
EMA_NEW = 0.25

# Below this share of the new rate the filter restarts from the new rate
SNAP_RATIO = 0.5


class RateSmoother:
    """EMA filter turning evaporation power into drying fraction per hour."""

    @staticmethod
    def instant_rate(power: float, preset_hours: float) -> float:
        """Drying fraction per hour implied by a single power reading."""
        return (power / REFERENCE_POWER) * (1.0 / preset_hours)

    def update(self, previous_ema: float, power: float, preset_hours: float) -> float:
        """Return the new smoothed rate."""
        rate = self.instant_rate(power, preset_hours)
        if previous_ema < rate * SNAP_RATIO:
            return rate
        return previous_ema * EMA_KEEP + rate * EMA_NEW
