"""Numeric helpers shared by the drying model."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value into [low, high]."""
    return max(low, min(high, value))


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a person would (2.5 -> 3), not like round() does (2.5 -> 2)."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))
