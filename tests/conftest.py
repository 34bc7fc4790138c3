"""Shared fixtures for route safety tests."""

from datetime import datetime, timedelta, timezone

import pytest

from route_safety.core.config import SafetyConfig
from route_safety.safety.models import Review, Waypoint

# Pinned "now" so recency weights are reproducible
NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def build_review(lat, lon, rating=5, days_ago=1.0, time_of_day=None, **factors):
    return Review(
        latitude=lat,
        longitude=lon,
        safety_rating=rating,
        submitted_at=NOW - timedelta(days=days_ago),
        review_time_of_day=time_of_day,
        **factors,
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_review():
    """Factory for reviews submitted relative to NOW."""
    return build_review


@pytest.fixture
def config():
    return SafetyConfig()


@pytest.fixture
def flat_config():
    """Config without recency weighting, so scores are plain means."""
    return SafetyConfig(recency_weight=False)


@pytest.fixture
def straight_route():
    """Three points 0.01 degrees apart along the equator."""
    return [
        Waypoint(0.0, 0.0),
        Waypoint(0.0, 0.01),
        Waypoint(0.0, 0.02),
    ]
