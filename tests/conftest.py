"""Fixtures for Laundry Drying tests."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from .helpers import FakeAggregator, FakeClock, sunny_observation

pytest_plugins = "pytest_homeassistant_custom_component"


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at a fixed instant."""
    return FakeClock(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def aggregator() -> FakeAggregator:
    """Aggregator returning a sunny afternoon."""
    return FakeAggregator(sunny_observation())
