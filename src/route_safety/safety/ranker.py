"""Route-level aggregation and ranking of candidate routes."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .models import (
    EdgeSafety,
    PointSafety,
    RouteSafetyResult,
    SafetyBreakdown,
    ScoredPoint,
    SegmentSummary,
    Waypoint,
    parse_route,
)
from .scorer import PointSafetyScorer
from .segments import SegmentAggregator
from .spatial_index import SpatialIndex
from ..core.config import SafetyConfig
from ..core.errors import InvalidRouteInput

logger = logging.getLogger(__name__)


def weighted_overall_safety(edges: Sequence[EdgeSafety]) -> float:
    """
    Distance-weighted mean of edge safety scores.

    Zero-length edges carry no weight. When every edge is zero-length the
    plain mean of their scores is returned instead.
    """
    if not edges:
        raise ValueError("A route needs at least one edge")

    weighted = [edge for edge in edges if not edge.is_degenerate]
    total_distance = sum(edge.distance_km for edge in weighted)
    if total_distance > 0:
        return sum(edge.safety_score * edge.distance_km for edge in weighted) / total_distance

    return sum(edge.safety_score for edge in edges) / len(edges)


def categorize_segments(edges: Sequence[EdgeSafety]) -> SafetyBreakdown:
    """Count edges per safety category (high >= 7, moderate 4-7, low < 4)."""
    counts = {"high": 0, "moderate": 0, "low": 0}
    for edge in edges:
        if not edge.is_degenerate:
            counts[edge.safety_category] += 1
    return SafetyBreakdown(**counts)


def _summary(points: Sequence[ScoredPoint], edge: EdgeSafety, value: float) -> SegmentSummary:
    return SegmentSummary(
        from_name=points[edge.from_index].name,
        to_name=points[edge.to_index].name,
        value=value,
        distance_km=edge.distance_km,
    )


def top_segments(
    points: Sequence[ScoredPoint],
    count: int,
    highest: bool = True,
    metric: str = "safety_score"
) -> List[SegmentSummary]:
    """
    Best or worst ``count`` segments by an edge metric.

    The sort is stable, so equal values keep route order.
    """
    edges = [p.edge for p in points if p.edge is not None and not p.edge.is_degenerate]
    ranked = sorted(edges, key=lambda edge: getattr(edge, metric), reverse=highest)
    return [_summary(points, edge, getattr(edge, metric)) for edge in ranked[:count]]


def dangerous_segments(
    points: Sequence[ScoredPoint],
    threshold: float
) -> List[SegmentSummary]:
    """Segments whose safety score is below ``threshold``, in route order."""
    return [
        _summary(points, p.edge, p.edge.safety_score)
        for p in points
        if p.edge is not None
        and not p.edge.is_degenerate
        and p.edge.safety_score < threshold
    ]


def default_point_names(waypoints: List[Waypoint], route_index: int) -> List[Waypoint]:
    """Name unnamed source and destination points after their route."""
    named = list(waypoints)
    first, last = named[0], named[-1]
    if not first.name:
        named[0] = Waypoint(first.latitude, first.longitude, f"Source (Route {route_index + 1})")
    if not last.name:
        named[-1] = Waypoint(
            last.latitude, last.longitude, f"Destination (Route {route_index + 1})"
        )
    return named


class RouteRanker:
    """Score every point of every candidate route and rank the routes."""

    def __init__(
        self,
        config: Optional[SafetyConfig] = None,
        now: Optional[datetime] = None,
        max_workers: Optional[int] = None
    ):
        """
        Initialize ranker.

        Args:
            config: SafetyConfig (uses defaults if None)
            now: Reference time for recency weighting (current time if None)
            max_workers: Size of the point scoring pool (config value if None)
        """
        self.config = config or SafetyConfig()
        self.scorer = PointSafetyScorer(self.config, now=now)
        self.aggregator = SegmentAggregator()
        self.max_workers = max_workers or self.config.max_workers

    @property
    def now(self) -> datetime:
        return self.scorer.now

    def score_point(self, waypoint: Waypoint, index: SpatialIndex) -> PointSafety:
        nearby = index.find_nearby(
            waypoint.latitude, waypoint.longitude, self.config.search_radius_m
        )
        return self.scorer.score(waypoint, nearby)

    def score_points(
        self,
        routes: Sequence[Sequence[Waypoint]],
        index: SpatialIndex
    ) -> List[List[PointSafety]]:
        """
        Score all points of all routes on a worker pool.

        Results are re-associated by (route index, point index), so the output
        mirrors the input layout whatever the completion order.
        """
        results: Dict[Tuple[int, int], PointSafety] = {}

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                pool.submit(self.score_point, waypoint, index): (r, p)
                for r, route in enumerate(routes)
                for p, waypoint in enumerate(route)
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()

        return [
            [results[(r, p)] for p in range(len(route))]
            for r, route in enumerate(routes)
        ]

    def build_result(
        self,
        route_index: int,
        waypoints: Sequence[Waypoint],
        safeties: Sequence[PointSafety]
    ) -> RouteSafetyResult:
        """Edge pass and route aggregates for one route whose points are scored."""
        edges = self.aggregator.aggregate(waypoints, safeties)

        points = tuple(
            ScoredPoint(
                waypoint=waypoint,
                safety=safety,
                edge=edges[i] if i < len(edges) else None,
            )
            for i, (waypoint, safety) in enumerate(zip(waypoints, safeties))
        )

        total_distance = sum(edge.distance_km for edge in edges)
        overall = weighted_overall_safety(edges)
        dangerous = dangerous_segments(points, self.config.dangerous_threshold)

        logger.debug(
            "Route %d: %d points, %.3f km, overall safety %.2f, %d dangerous segments",
            route_index + 1, len(points), total_distance, overall, len(dangerous)
        )

        return RouteSafetyResult(
            route_index=route_index,
            route_name=f"Route {route_index + 1}",
            points=points,
            overall_safety=overall,
            total_distance_km=total_distance,
            dangerous_segments=tuple(dangerous),
            safest_segments=tuple(top_segments(points, self.config.top_segments, highest=True)),
            least_safe_segments=tuple(
                top_segments(points, self.config.top_segments, highest=False)
            ),
            breakdown=categorize_segments(edges),
        )

    def prepare_routes(self, routes: Sequence[Any]) -> List[List[Waypoint]]:
        """
        Validate raw routes before any scoring happens.

        Raises:
            InvalidRouteInput: If there are no routes or any route is malformed;
                one bad route fails the whole batch
        """
        if not isinstance(routes, (list, tuple)) or not routes:
            raise InvalidRouteInput("At least one route is required")
        return [
            default_point_names(parse_route(route, route_index=i), i)
            for i, route in enumerate(routes)
        ]

    def analyze(self, routes: Sequence[Any], index: SpatialIndex) -> List[RouteSafetyResult]:
        """
        Score candidate routes against a review index.

        Args:
            routes: Candidate routes, each a list of points (Waypoint or mapping)
            index: SpatialIndex over the request's reviews

        Returns:
            One RouteSafetyResult per route, in input order
        """
        prepared = self.prepare_routes(routes)
        safeties = self.score_points(prepared, index)
        return [
            self.build_result(i, waypoints, route_safeties)
            for i, (waypoints, route_safeties) in enumerate(zip(prepared, safeties))
        ]

    def analyze_route(
        self,
        route_index: int,
        waypoints: Sequence[Any],
        index: SpatialIndex
    ) -> RouteSafetyResult:
        """Score a single route without the worker pool."""
        prepared = default_point_names(parse_route(waypoints, route_index), route_index)
        safeties = [self.score_point(waypoint, index) for waypoint in prepared]
        return self.build_result(route_index, prepared, safeties)

    @staticmethod
    def rank(results: Sequence[RouteSafetyResult]) -> List[RouteSafetyResult]:
        """Sort by overall safety, safest first; equal scores keep input order."""
        return sorted(results, key=lambda result: result.overall_safety, reverse=True)
