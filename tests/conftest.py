"""Shared test fixtures for all tests."""

from datetime import datetime, timezone

import pytest


@pytest.fixture
def now() -> datetime:
    """Fixed resolution time: 13:00 local time in Tallinn (UTC+3 in May)."""
    return datetime(2024, 5, 14, 10, 0, tzinfo=timezone.utc)


@pytest.fixture
def sample_station_name() -> str:
    """Station name containing a space, as EMHI reports it."""
    return "Pirita RJ"
