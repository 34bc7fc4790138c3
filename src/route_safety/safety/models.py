"""Data models for route safety analysis."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from ..core.errors import InvalidRouteInput, InvalidReviewRecord


class FactorLevel:
    """Levels reviewers can report for each categorical factor."""

    NONE = "none"
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    UNKNOWN = "unknown"

    KNOWN = (NONE, LOW, MODERATE, HIGH)
    ALL = KNOWN + (UNKNOWN,)


FACTOR_NAMES = ("police_presence", "street_lights", "people_density", "traffic")

NEUTRAL_SCORE = 5.0


def to_utc(value: datetime) -> datetime:
    """Normalize a datetime to an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a datetime or ISO-8601 string, returning None for empty values."""
    if value is None or _is_missing(value):
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        return to_utc(datetime.fromisoformat(text))
    raise ValueError(f"Unsupported timestamp value: {value!r}")


def _is_missing(value: Any) -> bool:
    # pandas hands back NaN for empty CSV cells
    return isinstance(value, float) and math.isnan(value)


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None and not _is_missing(data[key]):
            return data[key]
    return None


def _coordinate(value: Any, label: str, limit: float) -> float:
    if isinstance(value, bool):
        raise ValueError(f"{label} must be numeric, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValueError(f"{label} must be numeric, got {value!r}")
    if not math.isfinite(number):
        raise ValueError(f"{label} must be finite, got {value!r}")
    if abs(number) > limit:
        raise ValueError(f"{label} {number} is outside [-{limit:g}, {limit:g}]")
    return number


@dataclass(frozen=True)
class Waypoint:
    """A single coordinate of a candidate route."""

    latitude: float
    longitude: float
    name: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any, route_index: Optional[int] = None) -> "Waypoint":
        """
        Parse a raw point object.

        Args:
            data: Mapping with latitude/longitude (or lat/lon/lng) and optional name,
                or an existing Waypoint
            route_index: Index of the owning route, used in error messages

        Raises:
            InvalidRouteInput: If coordinates are missing, non-numeric or out of range
        """
        if isinstance(data, Waypoint):
            return data
        if not isinstance(data, Mapping):
            raise InvalidRouteInput(f"Waypoint must be an object, got {data!r}", route_index)

        try:
            latitude = _coordinate(_first(data, "latitude", "lat"), "latitude", 90.0)
            longitude = _coordinate(
                _first(data, "longitude", "lon", "lng"), "longitude", 180.0
            )
        except ValueError as e:
            raise InvalidRouteInput(str(e), route_index)

        name = data.get("name")
        return cls(latitude=latitude, longitude=longitude, name=str(name) if name else None)

    @property
    def coords(self) -> Tuple[float, float]:
        return (self.latitude, self.longitude)


def parse_route(points: Any, route_index: Optional[int] = None) -> List[Waypoint]:
    """
    Validate a raw route and return its waypoints.

    Raises:
        InvalidRouteInput: If the route is not a list of at least two valid points
    """
    if not isinstance(points, (list, tuple)):
        raise InvalidRouteInput("route must be a list of points", route_index)
    if len(points) < 2:
        raise InvalidRouteInput("route must have at least 2 points", route_index)
    return [Waypoint.from_dict(point, route_index) for point in points]


@dataclass(frozen=True)
class Review:
    """A community safety review attached to one location."""

    latitude: float
    longitude: float
    safety_rating: float
    police_presence: Optional[str] = None
    street_lights: Optional[str] = None
    people_density: Optional[str] = None
    traffic: Optional[str] = None
    submitted_at: Optional[datetime] = None
    review_time_of_day: Optional[datetime] = None
    author_id: Optional[str] = None

    def __post_init__(self):
        for name in ("submitted_at", "review_time_of_day"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, to_utc(value))

    def factor(self, name: str) -> Optional[str]:
        return getattr(self, name)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Review":
        """
        Parse a review record as stored by a review store.

        Both snake_case field names and the stored document names
        (``lat``, ``lon``, ``safetyRating``, ``dateTime``, ``userDateTime``,
        ``user_id``) are accepted.

        Raises:
            InvalidReviewRecord: If the record is malformed
        """
        try:
            latitude = _coordinate(_first(data, "latitude", "lat"), "latitude", 90.0)
            longitude = _coordinate(_first(data, "longitude", "lon"), "longitude", 180.0)

            rating = _first(data, "safety_rating", "safetyRating")
            if rating is None or isinstance(rating, bool):
                raise ValueError(f"safety rating is required, got {rating!r}")
            rating = float(rating)
            if not 1 <= rating <= 10:
                raise ValueError(f"safety rating {rating:g} is outside [1, 10]")

            factors = {}
            for name in FACTOR_NAMES:
                level = _first(data, name)
                if level is not None:
                    level = str(level).strip().lower()
                    if level not in FactorLevel.ALL:
                        raise ValueError(f"{name} has unknown level {level!r}")
                factors[name] = level

            submitted_at = parse_timestamp(_first(data, "submitted_at", "dateTime"))
            review_time = parse_timestamp(
                _first(data, "review_time_of_day", "userDateTime")
            )
        except ValueError as e:
            raise InvalidReviewRecord(f"Invalid review record: {e}")

        author = _first(data, "author_id", "user_id")
        return cls(
            latitude=latitude,
            longitude=longitude,
            safety_rating=rating,
            submitted_at=submitted_at,
            review_time_of_day=review_time,
            author_id=str(author) if author is not None else None,
            **factors,
        )

    def to_dict(self) -> Dict[str, Any]:
        record = {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "safety_rating": self.safety_rating,
        }
        for name in FACTOR_NAMES:
            record[name] = self.factor(name)
        record["submitted_at"] = (
            self.submitted_at.isoformat() if self.submitted_at else None
        )
        record["review_time_of_day"] = (
            self.review_time_of_day.isoformat() if self.review_time_of_day else None
        )
        record["author_id"] = self.author_id
        return record


@dataclass(frozen=True)
class PointSafety:
    """Safety estimate for one waypoint derived from nearby reviews."""

    safety_score: float
    confidence: float
    adjusted_safety_score: float
    review_count: int
    dominant_factors: Dict[str, str]

    @classmethod
    def neutral(cls) -> "PointSafety":
        """Result used when no reviews are near the point."""
        return cls(
            safety_score=NEUTRAL_SCORE,
            confidence=0.0,
            adjusted_safety_score=NEUTRAL_SCORE,
            review_count=0,
            dominant_factors={name: FactorLevel.UNKNOWN for name in FACTOR_NAMES},
        )


@dataclass(frozen=True)
class EdgeSafety:
    """Safety of the stretch between waypoint ``from_index`` and the next one."""

    from_index: int
    to_index: int
    distance_km: float
    safety_score: float

    @property
    def is_degenerate(self) -> bool:
        """Zero-length segment between identical coordinates."""
        return self.distance_km == 0.0

    @property
    def normalized_safety(self) -> float:
        return self.safety_score / 10.0

    @property
    def safety_category(self) -> str:
        """Breakdown category: high >= 7, moderate 4-7, low < 4."""
        if self.safety_score >= 7:
            return "high"
        elif self.safety_score >= 4:
            return "moderate"
        else:
            return "low"


@dataclass(frozen=True)
class ScoredPoint:
    """A waypoint together with its point safety and outgoing edge."""

    waypoint: Waypoint
    safety: PointSafety
    edge: Optional[EdgeSafety] = None

    @property
    def name(self) -> Optional[str]:
        return self.waypoint.name


@dataclass(frozen=True)
class SegmentSummary:
    """Compact description of one segment for dangerous/top/bottom lists."""

    from_name: Optional[str]
    to_name: Optional[str]
    value: float
    distance_km: float


@dataclass(frozen=True)
class SafetyBreakdown:
    """Number of segments per safety category."""

    high: int = 0
    moderate: int = 0
    low: int = 0

    @property
    def total(self) -> int:
        return self.high + self.moderate + self.low


@dataclass(frozen=True)
class RouteSafetyResult:
    """Scored route: points, edges and route-level aggregates."""

    route_index: int
    route_name: str
    points: Tuple[ScoredPoint, ...]
    overall_safety: float
    total_distance_km: float
    dangerous_segments: Tuple[SegmentSummary, ...]
    safest_segments: Tuple[SegmentSummary, ...]
    least_safe_segments: Tuple[SegmentSummary, ...]
    breakdown: SafetyBreakdown

    @property
    def edges(self) -> List[EdgeSafety]:
        return [p.edge for p in self.points if p.edge is not None]

    @property
    def normalized_safety(self) -> float:
        """Overall safety on the 0-1 scale."""
        return self.overall_safety / 10.0

    @property
    def total_reviews(self) -> int:
        return sum(p.safety.review_count for p in self.points)

    def __repr__(self) -> str:
        return (
            f"RouteSafetyResult(route={self.route_name!r}, "
            f"safety={self.overall_safety:.2f}, distance={self.total_distance_km:.2f}km)"
        )


@dataclass(frozen=True)
class SegmentAnalysis:
    """Explained view of one segment."""

    segment_id: str
    start_point: Waypoint
    end_point: Waypoint
    segment_safety: float
    safety_category: str
    distance_km: float
    review_count: int
    confidence: float
    safety_factors: Dict[str, Dict[str, str]]
    explanation: str
    caution_notes: Optional[str] = None
    safety_recommendations: Optional[List[str]] = None


@dataclass(frozen=True)
class RouteAnalysis:
    """A scored route together with its rendered explanations."""

    result: RouteSafetyResult
    segments: List[SegmentAnalysis]
    route_explanation: str
    summary: str
    key_factors: List[str]
    confidence_level: str
    time_factors: str

    @property
    def route_index(self) -> int:
        return self.result.route_index

    @property
    def route_name(self) -> str:
        return self.result.route_name


@dataclass
class AnalysisReport:
    """Ranked outcome of one analysis request."""

    routes: List[RouteAnalysis]
    routes_input: Sequence[Sequence[Waypoint]]
    time_of_day: Optional[datetime]
    analyzed_at: datetime
    parameters: Dict[str, Any] = field(default_factory=dict)

    @property
    def recommended(self) -> RouteAnalysis:
        """Safest route; the ranking puts it first."""
        return self.routes[0]
