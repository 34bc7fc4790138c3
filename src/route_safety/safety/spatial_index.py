"""In-memory spatial lookup of reviews for one analysis request."""

from math import cos, radians
from typing import Iterable, List, Tuple

from .models import Review
from ..core.utils import haversine_distance, METERS_PER_DEGREE

# Keeps the longitude widening finite next to the poles
_MIN_COS_LAT = 1e-6


class SpatialIndex:
    """
    Immutable snapshot of reviews answering radius queries.

    Lookups run in two passes: a cheap bounding-box rejection followed by an
    exact haversine check on the remaining candidates. The snapshot is never
    mutated after construction, so one index can be shared by concurrent
    scoring workers.
    """

    def __init__(self, reviews: Iterable[Review] = ()):
        self._reviews: Tuple[Review, ...] = tuple(reviews)

    @classmethod
    def build(cls, reviews: Iterable[Review]) -> "SpatialIndex":
        return cls(reviews)

    @property
    def reviews(self) -> Tuple[Review, ...]:
        return self._reviews

    def __len__(self) -> int:
        return len(self._reviews)

    def bbox_candidates(self, lat: float, lon: float, radius_meters: float) -> List[Review]:
        """
        First pass: reviews inside the degree box around the point.

        The latitude delta is ``radius / 111000``; the longitude delta is
        widened by ``1 / cos(lat)`` since meridians converge, so the box always
        contains the full search circle.
        """
        lat_delta = radius_meters / METERS_PER_DEGREE
        lon_delta = lat_delta / max(abs(cos(radians(lat))), _MIN_COS_LAT)

        min_lat, max_lat = lat - lat_delta, lat + lat_delta
        min_lon, max_lon = lon - lon_delta, lon + lon_delta

        return [
            review for review in self._reviews
            if min_lat <= review.latitude <= max_lat
            and min_lon <= review.longitude <= max_lon
        ]

    def find_nearby(self, lat: float, lon: float, radius_meters: float) -> List[Review]:
        """
        Find reviews within ``radius_meters`` of a point.

        Args:
            lat, lon: Query point in degrees
            radius_meters: Search radius in meters

        Returns:
            Reviews in snapshot order whose haversine distance is at most the radius
        """
        return [
            review for review in self.bbox_candidates(lat, lon, radius_meters)
            if haversine_distance(lat, lon, review.latitude, review.longitude) <= radius_meters
        ]
