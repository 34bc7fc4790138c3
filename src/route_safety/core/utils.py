"""Shared geographic and file utility functions."""

import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from math import radians, sin, cos, sqrt, atan2
from pathlib import Path
from typing import Any, Dict, Iterable, List, Tuple

import gpxpy
from shapely.geometry import box, Point, Polygon

EARTH_RADIUS_M = 6371000

# Rough approximation used for degree buffers: 1 degree of latitude ≈ 111 km
METERS_PER_DEGREE = 111000.0


def haversine_distance(lat1, lon1, lat2, lon2):
    """
    Calculate distance between two points in meters using Haversine formula.

    Args:
        lat1, lon1: Coordinates of first point
        lat2, lon2: Coordinates of second point

    Returns:
        Distance in meters
    """
    lat1, lon1, lat2, lon2 = map(radians, [lat1, lon1, lat2, lon2])
    dlat = lat2 - lat1
    dlon = lon2 - lon1

    a = sin(dlat/2)**2 + cos(lat1) * cos(lat2) * sin(dlon/2)**2
    c = 2 * atan2(sqrt(a), sqrt(1-a))

    return EARTH_RADIUS_M * c


def haversine_km(lat1, lon1, lat2, lon2):
    """Great-circle distance between two points in kilometers."""
    return haversine_distance(lat1, lon1, lat2, lon2) / 1000.0


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned latitude/longitude box."""

    south: float
    north: float
    west: float
    east: float

    def to_polygon(self) -> Polygon:
        """Shapely polygon in (lon, lat) order."""
        return box(self.west, self.south, self.east, self.north)

    def contains(self, lat: float, lon: float) -> bool:
        """True if the point lies inside or on the edge of the box."""
        return self.to_polygon().covers(Point(lon, lat))

    def as_dict(self) -> Dict[str, float]:
        return {
            'south': self.south,
            'north': self.north,
            'west': self.west,
            'east': self.east,
        }


def get_bounding_box(points: Iterable[Tuple[float, float]], buffer_m: float = 0.0) -> BoundingBox:
    """
    Calculate bounding box around a set of points with buffer.

    Args:
        points: Iterable of (lat, lon) tuples
        buffer_m: Buffer distance in meters added on every side

    Returns:
        BoundingBox

    Raises:
        ValueError: If no points are given
    """
    points = list(points)
    if not points:
        raise ValueError("Cannot compute bounding box of an empty point set")

    lats = [p[0] for p in points]
    lons = [p[1] for p in points]

    buffer_deg = buffer_m / METERS_PER_DEGREE
    # Degrees of longitude shrink toward the poles
    widest_lat = max(abs(lat) for lat in lats)
    lon_buffer_deg = buffer_deg / max(cos(radians(widest_lat)), 1e-6)

    return BoundingBox(
        south=max(min(lats) - buffer_deg, -90.0),
        north=min(max(lats) + buffer_deg, 90.0),
        west=max(min(lons) - lon_buffer_deg, -180.0),
        east=min(max(lons) + lon_buffer_deg, 180.0),
    )


def time_window(center: datetime, hours: float) -> Tuple[datetime, datetime]:
    """Return the (start, end) window of ``hours`` on either side of ``center``."""
    delta = timedelta(hours=hours)
    return center - delta, center + delta


def load_gpx_route(gpx_file) -> List[Dict[str, Any]]:
    """
    Load a candidate route from a GPX file.

    Tracks are read first, then routes, then loose waypoints. Named points
    keep their names so segment explanations can refer to them.

    Args:
        gpx_file: Path to GPX file

    Returns:
        List of dicts with latitude, longitude and name keys

    Raises:
        ValueError: If no points found in GPX file
    """
    gpx_file = Path(gpx_file)

    with open(gpx_file) as f:
        gpx = gpxpy.parse(f)

    points = []

    for track in gpx.tracks:
        for segment in track.segments:
            for point in segment.points:
                points.append(_gpx_point(point))

    if not points:
        for route in gpx.routes:
            for point in route.points:
                points.append(_gpx_point(point))

    if not points:
        for waypoint in gpx.waypoints:
            points.append(_gpx_point(waypoint))

    if not points:
        raise ValueError(f"No points found in GPX file: {gpx_file}")

    return points


def _gpx_point(point) -> Dict[str, Any]:
    return {
        'latitude': point.latitude,
        'longitude': point.longitude,
        'name': point.name or None,
    }


def load_routes_json(json_file) -> List[List[Dict[str, Any]]]:
    """
    Load candidate routes from a JSON file.

    Accepts either a list of routes (each a list of point objects) or an
    object with a ``routes`` key, the shape used by route analysis requests.

    Raises:
        ValueError: If the document holds no route list
    """
    json_file = Path(json_file)

    with open(json_file, encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('routes')

    if not isinstance(data, list):
        raise ValueError(f"No route list found in JSON file: {json_file}")

    return data
