"""Tests for data models and geo utilities."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from route_safety.core.errors import InvalidReviewRecord, InvalidRouteInput
from route_safety.core.utils import (
    get_bounding_box,
    haversine_distance,
    load_gpx_route,
    load_routes_json,
    time_window,
)
from route_safety.safety.models import Review, Waypoint, parse_route, parse_timestamp


class TestWaypoint:

    def test_aliases(self):
        assert Waypoint.from_dict({"lat": 1, "lng": 2}) == Waypoint(1.0, 2.0)
        assert Waypoint.from_dict({"latitude": "1.5", "lon": "-2"}) == Waypoint(1.5, -2.0)

    def test_passthrough(self):
        point = Waypoint(1, 2, "A")
        assert Waypoint.from_dict(point) is point

    @pytest.mark.parametrize("data", [
        {"latitude": True, "longitude": 1},
        {"latitude": 1, "longitude": float("inf")},
        {"latitude": -90.5, "longitude": 1},
        "12.0,77.0",
    ])
    def test_invalid_points(self, data):
        with pytest.raises(InvalidRouteInput, match="Route 3"):
            Waypoint.from_dict(data, route_index=2)

    def test_parse_route_requires_list(self):
        with pytest.raises(InvalidRouteInput, match="list"):
            parse_route({"latitude": 1, "longitude": 2}, route_index=0)

    def test_error_keeps_route_index(self):
        with pytest.raises(InvalidRouteInput) as excinfo:
            parse_route([], route_index=4)
        assert excinfo.value.route_index == 4
        assert str(excinfo.value) == "Route 5: route must have at least 2 points"


class TestReview:

    def test_from_dict_normalizes_fields(self):
        review = Review.from_dict({
            "latitude": "12.97",
            "longitude": "77.59",
            "safety_rating": "7.5",
            "traffic": " Moderate ",
            "submitted_at": "2026-10-01T10:00:00+02:00",
            "author_id": 17,
        })

        assert review.safety_rating == 7.5
        assert review.traffic == "moderate"
        assert review.police_presence is None
        assert review.submitted_at == datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)
        assert review.author_id == "17"

    @pytest.mark.parametrize("record", [
        {"latitude": 1, "longitude": 1},
        {"latitude": 1, "longitude": 1, "safety_rating": 0.5},
        {"latitude": 1, "longitude": 1, "safety_rating": True},
        {"latitude": 1, "longitude": 1, "safety_rating": 5, "traffic": "gridlock"},
        {"latitude": 1, "longitude": 1, "safety_rating": 5, "submitted_at": "yesterday"},
        {"latitude": 91, "longitude": 1, "safety_rating": 5},
    ])
    def test_invalid_records(self, record):
        with pytest.raises(InvalidReviewRecord):
            Review.from_dict(record)

    def test_naive_datetimes_are_utc(self):
        review = Review(0, 0, 5, submitted_at=datetime(2026, 1, 1, 12))
        assert review.submitted_at.tzinfo == timezone.utc

    def test_to_dict_roundtrip(self, make_review):
        review = make_review(1.0, 2.0, rating=4, police_presence="low",
                             time_of_day=datetime(2026, 10, 18, 20, 0))
        assert Review.from_dict(review.to_dict()) == review

    def test_parse_timestamp(self):
        assert parse_timestamp("") is None
        assert parse_timestamp(float("nan")) is None
        assert parse_timestamp("2026-10-19T12:00:00Z") == datetime(
            2026, 10, 19, 12, tzinfo=timezone.utc
        )


class TestGeoUtils:

    def test_haversine_symmetry_and_zero(self):
        assert haversine_distance(12.97, 77.59, 12.97, 77.59) == 0
        assert haversine_distance(0, 0, 1, 1) == pytest.approx(haversine_distance(1, 1, 0, 0))

    def test_bounding_box_buffer(self):
        bbox = get_bounding_box([(10, 20), (11, 21)], buffer_m=111000)

        assert bbox.south == pytest.approx(9)
        assert bbox.north == pytest.approx(12)
        assert bbox.west < 19
        assert bbox.east > 22
        assert bbox.contains(10.5, 20.5)
        assert not bbox.contains(12.5, 20.5)

    def test_bounding_box_covers_radius_at_high_latitude(self):
        bbox = get_bounding_box([(70.0, 20.0)], buffer_m=100)
        east_edge = haversine_distance(70.0, 20.0, 70.0, bbox.east)
        assert east_edge >= 100

    def test_bounding_box_is_clamped(self):
        bbox = get_bounding_box([(89.9995, 179.9995)], buffer_m=1000)
        assert bbox.north == 90
        assert bbox.east == 180

    def test_bounding_box_needs_points(self):
        with pytest.raises(ValueError):
            get_bounding_box([])

    def test_time_window(self):
        center = datetime(2026, 10, 19, 20, tzinfo=timezone.utc)
        start, end = time_window(center, 1.5)
        assert end - start == timedelta(hours=3)
        assert start == center - timedelta(minutes=90)


class TestRouteFiles:

    def test_load_routes_json(self, tmp_path):
        path = tmp_path / "routes.json"
        path.write_text(json.dumps({"routes": [[{"lat": 1, "lon": 2}, {"lat": 1, "lon": 3}]]}))

        assert load_routes_json(path) == [[{"lat": 1, "lon": 2}, {"lat": 1, "lon": 3}]]

    def test_load_routes_json_without_routes(self, tmp_path):
        path = tmp_path / "routes.json"
        path.write_text(json.dumps({"points": []}))

        with pytest.raises(ValueError):
            load_routes_json(path)

    def test_load_gpx_track(self, tmp_path):
        path = tmp_path / "route.gpx"
        path.write_text(
            '<?xml version="1.0" encoding="UTF-8"?>\n'
            '<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1">\n'
            '  <trk><trkseg>\n'
            '    <trkpt lat="12.97" lon="77.59"><name>Start</name></trkpt>\n'
            '    <trkpt lat="12.98" lon="77.60"></trkpt>\n'
            '  </trkseg></trk>\n'
            '</gpx>\n'
        )

        assert load_gpx_route(path) == [
            {"latitude": 12.97, "longitude": 77.59, "name": "Start"},
            {"latitude": 12.98, "longitude": 77.60, "name": None},
        ]

    def test_load_gpx_without_points(self, tmp_path):
        path = tmp_path / "empty.gpx"
        path.write_text(
            '<?xml version="1.0"?>\n'
            '<gpx version="1.1" creator="test" xmlns="http://www.topografix.com/GPX/1/1"></gpx>\n'
        )

        with pytest.raises(ValueError, match="No points"):
            load_gpx_route(path)
