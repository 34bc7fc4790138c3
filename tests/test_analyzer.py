"""End-to-end tests for RouteSafetyAnalyzer."""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from route_safety.core.config import SafetyConfig
from route_safety.core.errors import InvalidRouteInput, ReviewStoreError
from route_safety.core.utils import BoundingBox
from route_safety.safety.analyzer import RouteSafetyAnalyzer, parse_time_of_day
from route_safety.stores import InMemoryReviewStore
from route_safety.stores.base import ReviewStore

SAFE_ROUTE = [
    {"latitude": 12.9716, "longitude": 77.5946, "name": "MG Road"},
    {"latitude": 12.9716, "longitude": 77.5996},
    {"latitude": 12.9716, "longitude": 77.6046, "name": "Indiranagar"},
]
UNSAFE_ROUTE = [
    {"latitude": 12.9816, "longitude": 77.5946},
    {"latitude": 12.9816, "longitude": 77.5996},
    {"latitude": 12.9816, "longitude": 77.6046},
]


def reviews_along(make_review, route, rating, **kwargs):
    return [
        make_review(p["latitude"], p["longitude"], rating=rating, **kwargs)
        for p in route
        for _ in range(2)
    ]


def mock_store(reviews=()):
    store = MagicMock(spec=ReviewStore)
    store.fetch.return_value = list(reviews)
    return store


class TestAnalyzeRoutes:

    def test_safest_route_is_recommended(self, now, make_review):
        store = InMemoryReviewStore(
            reviews_along(make_review, SAFE_ROUTE, rating=9)
            + reviews_along(make_review, UNSAFE_ROUTE, rating=2)
        )
        analyzer = RouteSafetyAnalyzer(store, SafetyConfig(recency_weight=False))

        report = analyzer.analyze_routes([UNSAFE_ROUTE, SAFE_ROUTE], now=now)

        assert report.recommended.route_index == 1
        assert report.recommended.route_name == "Route 2"
        assert report.recommended.result.overall_safety == pytest.approx(9)
        assert [r.route_index for r in report.routes] == [1, 0]
        assert report.analyzed_at == now
        assert report.time_of_day is None
        assert report.parameters["search_radius_m"] == 100
        assert len(report.routes_input) == 2

    def test_no_reviews_anywhere(self, now):
        report = RouteSafetyAnalyzer(InMemoryReviewStore()).analyze_routes(
            [SAFE_ROUTE], now=now
        )

        [analysis] = report.routes
        assert analysis.result.overall_safety == 5
        assert analysis.confidence_level == "Low (no recent reviews available)"
        assert analysis.result.dangerous_segments == ()

    def test_time_window_filters_reviews(self, now, make_review):
        evening = datetime(2026, 10, 18, 19, 30, tzinfo=timezone.utc)
        morning = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)
        store = InMemoryReviewStore(
            reviews_along(make_review, SAFE_ROUTE, rating=9, time_of_day=evening)
            + reviews_along(make_review, SAFE_ROUTE, rating=1, time_of_day=morning)
            + reviews_along(make_review, SAFE_ROUTE, rating=1)
        )
        analyzer = RouteSafetyAnalyzer(store, SafetyConfig(recency_weight=False))

        report = analyzer.analyze_routes(
            [SAFE_ROUTE], time_of_day="2026-10-18T20:00:00Z", now=now
        )

        result = report.recommended.result
        assert result.total_reviews == 6
        assert result.overall_safety == pytest.approx(9)
        assert report.time_of_day == datetime(2026, 10, 18, 20, 0, tzinfo=timezone.utc)
        assert "evening" in report.recommended.time_factors

    def test_repeat_requests_render_identically(self, now, make_review):
        store = InMemoryReviewStore(reviews_along(make_review, SAFE_ROUTE, rating=6))
        analyzer = RouteSafetyAnalyzer(store)

        first = analyzer.analyze_routes([SAFE_ROUTE, UNSAFE_ROUTE], now=now)
        second = analyzer.analyze_routes([SAFE_ROUTE, UNSAFE_ROUTE], now=now)

        assert first.routes == second.routes


class TestStoreUsage:

    def test_single_fetch_with_buffered_bbox(self, now, straight_route):
        store = mock_store()
        RouteSafetyAnalyzer(store).analyze_routes([straight_route, straight_route], now=now)

        store.fetch.assert_called_once()
        bbox, window = store.fetch.call_args[0]
        buffer = 100 / 111000.0
        assert isinstance(bbox, BoundingBox)
        assert bbox.south == pytest.approx(-buffer)
        assert bbox.north == pytest.approx(buffer)
        assert bbox.west == pytest.approx(-buffer)
        assert bbox.east == pytest.approx(0.02 + buffer)
        assert window is None

    def test_window_is_passed_in_utc(self, now, straight_route):
        store = mock_store()
        RouteSafetyAnalyzer(store, SafetyConfig(time_window_hours=1)).analyze_routes(
            [straight_route], time_of_day="2026-10-19T21:30:00+05:30", now=now
        )

        _, window = store.fetch.call_args[0]
        assert window == (
            datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc),
            datetime(2026, 10, 19, 17, 0, tzinfo=timezone.utc),
        )

    def test_invalid_route_skips_fetch(self, now, straight_route):
        store = mock_store()

        with pytest.raises(InvalidRouteInput, match="Route 2"):
            RouteSafetyAnalyzer(store).analyze_routes(
                [straight_route, [{"latitude": 1, "longitude": 1}]], now=now
            )

        store.fetch.assert_not_called()

    def test_store_error_propagates(self, now, straight_route):
        store = mock_store()
        store.fetch.side_effect = ReviewStoreError("review service unavailable")

        with pytest.raises(ReviewStoreError, match="unavailable"):
            RouteSafetyAnalyzer(store).analyze_routes([straight_route], now=now)


class TestParseTimeOfDay:

    def test_keeps_local_clock_time(self):
        parsed = parse_time_of_day("2026-10-19T21:30:00+05:30")
        assert parsed.hour == 21

    def test_zulu_suffix(self):
        assert parse_time_of_day("2026-10-19T08:00:00Z") == datetime(
            2026, 10, 19, 8, 0, tzinfo=timezone.utc
        )

    def test_none_and_datetime_pass_through(self, now):
        assert parse_time_of_day(None) is None
        assert parse_time_of_day(now) is now

    def test_garbage_is_rejected(self):
        with pytest.raises(InvalidRouteInput):
            parse_time_of_day("after lunch")
