"""Route Safety - Rank walking routes by community safety reviews."""

__version__ = "0.1.0"

# Expose main classes for programmatic use
from .core import SafetyConfig, RouteSafetyError, InvalidRouteInput, ReviewStoreError
from .safety import (
    Waypoint,
    Review,
    SpatialIndex,
    RouteRanker,
    RouteSafetyAnalyzer,
)
from .stores import InMemoryReviewStore, CsvReviewStore, HttpReviewStore

__all__ = [
    "__version__",
    "SafetyConfig",
    "RouteSafetyError",
    "InvalidRouteInput",
    "ReviewStoreError",
    "Waypoint",
    "Review",
    "SpatialIndex",
    "RouteRanker",
    "RouteSafetyAnalyzer",
    "InMemoryReviewStore",
    "CsvReviewStore",
    "HttpReviewStore",
]
