"""Segment (edge) aggregation between consecutive route points."""

from typing import List, Sequence

from .models import EdgeSafety, PointSafety, Waypoint
from ..core.utils import haversine_km


class SegmentAggregator:
    """Combine adjacent point safeties into edge safeties."""

    @staticmethod
    def edge_safety(current: PointSafety, following: PointSafety) -> float:
        """
        Confidence-weighted mean of the two endpoint adjusted scores.

        With no confidence at either end, the plain mean of the adjusted
        scores is used, which is neutral for two points without reviews.
        """
        total_confidence = current.confidence + following.confidence
        if total_confidence == 0:
            return (current.adjusted_safety_score + following.adjusted_safety_score) / 2

        return (
            current.adjusted_safety_score * current.confidence
            + following.adjusted_safety_score * following.confidence
        ) / total_confidence

    def aggregate(
        self,
        waypoints: Sequence[Waypoint],
        safeties: Sequence[PointSafety]
    ) -> List[EdgeSafety]:
        """
        Build one edge per adjacent pair of points.

        Args:
            waypoints: Ordered route points
            safeties: PointSafety for each waypoint, same order

        Returns:
            List of len(waypoints) - 1 edges

        Raises:
            ValueError: If the two sequences differ in length
        """
        if len(waypoints) != len(safeties):
            raise ValueError(
                f"Expected {len(waypoints)} point safeties, got {len(safeties)}"
            )

        edges = []
        for i in range(len(waypoints) - 1):
            start, end = waypoints[i], waypoints[i + 1]
            edges.append(EdgeSafety(
                from_index=i,
                to_index=i + 1,
                distance_km=haversine_km(
                    start.latitude, start.longitude,
                    end.latitude, end.longitude
                ),
                safety_score=self.edge_safety(safeties[i], safeties[i + 1]),
            ))
        return edges
