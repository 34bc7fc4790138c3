"""Core utilities for route safety analysis."""

from .utils import (
    haversine_distance,
    haversine_km,
    get_bounding_box,
    load_gpx_route,
    load_routes_json,
    BoundingBox,
)
from .config import SafetyConfig
from .errors import (
    RouteSafetyError,
    InvalidRouteInput,
    InvalidReviewRecord,
    ConfigError,
    ReviewStoreError,
)

__all__ = [
    "haversine_distance",
    "haversine_km",
    "get_bounding_box",
    "load_gpx_route",
    "load_routes_json",
    "BoundingBox",
    "SafetyConfig",
    "RouteSafetyError",
    "InvalidRouteInput",
    "InvalidReviewRecord",
    "ConfigError",
    "ReviewStoreError",
]
