"""Tests for edge safety aggregation."""

import math

import pytest

from route_safety.safety.models import PointSafety, Waypoint
from route_safety.safety.segments import SegmentAggregator


def point_safety(adjusted, confidence):
    return PointSafety(
        safety_score=adjusted,
        confidence=confidence,
        adjusted_safety_score=adjusted,
        review_count=0,
        dominant_factors={},
    )


class TestEdgeSafety:

    def test_confidence_weighted_mean(self):
        score = SegmentAggregator.edge_safety(point_safety(7, 0.5), point_safety(3, 1.0))
        assert score == pytest.approx((7 * 0.5 + 3 * 1.0) / 1.5)

    def test_zero_confidence_end_is_ignored(self):
        assert SegmentAggregator.edge_safety(point_safety(8, 1.0), point_safety(5, 0)) == 8

    def test_no_confidence_at_either_end_is_neutral(self):
        neutral = PointSafety.neutral()
        assert SegmentAggregator.edge_safety(neutral, neutral) == 5


class TestAggregate:

    def test_one_edge_per_adjacent_pair(self, straight_route):
        safeties = [PointSafety.neutral()] * 3
        edges = SegmentAggregator().aggregate(straight_route, safeties)

        assert [(e.from_index, e.to_index) for e in edges] == [(0, 1), (1, 2)]
        expected_km = 6371 * math.radians(0.01)
        for edge in edges:
            assert edge.distance_km == pytest.approx(expected_km)
            assert edge.safety_score == 5

    def test_one_degree_of_longitude_on_equator(self):
        edges = SegmentAggregator().aggregate(
            [Waypoint(0, 0), Waypoint(0, 1)], [PointSafety.neutral()] * 2
        )
        assert edges[0].distance_km == pytest.approx(111.19492664455873)

    def test_identical_points_give_degenerate_edge(self):
        edges = SegmentAggregator().aggregate(
            [Waypoint(1.5, 2.5), Waypoint(1.5, 2.5)], [PointSafety.neutral()] * 2
        )
        assert edges[0].distance_km == 0.0
        assert edges[0].is_degenerate

    def test_length_mismatch_is_rejected(self, straight_route):
        with pytest.raises(ValueError):
            SegmentAggregator().aggregate(straight_route, [PointSafety.neutral()])

    @pytest.mark.parametrize("score,category", [
        (7.0, "high"), (9.9, "high"), (6.99, "moderate"), (4.0, "moderate"),
        (3.99, "low"), (1.0, "low"),
    ])
    def test_safety_category_bounds(self, score, category):
        edges = SegmentAggregator().aggregate(
            [Waypoint(0, 0), Waypoint(0, 0.001)],
            [point_safety(score, 1.0), point_safety(score, 1.0)],
        )
        assert edges[0].safety_category == category
