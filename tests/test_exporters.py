"""Tests for JSON, GeoJSON and GPX exports."""

import json
from datetime import datetime, timezone

import gpxpy
import pytest

from route_safety.core.config import SafetyConfig
from route_safety.exporters import (
    export_geojson,
    export_gpx,
    export_json,
    report_to_dict,
    report_to_geojson,
    report_to_gpx,
)
from route_safety.safety.analyzer import RouteSafetyAnalyzer
from route_safety.safety.models import Waypoint
from route_safety.stores import InMemoryReviewStore

MORNING = datetime(2026, 10, 19, 10, 30, tzinfo=timezone.utc)


@pytest.fixture
def report(now, make_review):
    safe = [Waypoint(0, 0, "Start"), Waypoint(0, 0.01), Waypoint(0, 0.02, "End")]
    risky = [Waypoint(0.05, 0), Waypoint(0.05, 0.01)]
    reviews = [
        make_review(p.latitude, p.longitude, rating=8, street_lights="high", time_of_day=MORNING)
        for p in safe for _ in range(2)
    ] + [
        make_review(p.latitude, p.longitude, rating=2, street_lights="none", time_of_day=MORNING)
        for p in risky for _ in range(2)
    ]
    analyzer = RouteSafetyAnalyzer(
        InMemoryReviewStore(reviews), SafetyConfig(recency_weight=False)
    )
    return analyzer.analyze_routes([risky, safe], time_of_day="2026-10-19T10:00:00Z", now=now)


class TestJsonReport:

    def test_report_structure(self, report):
        data = report_to_dict(report)

        assert set(data) == {
            "recommended_route", "all_routes", "request_details", "methodology_explanation",
        }
        recommended = data["recommended_route"]
        assert recommended["route_index"] == 1
        assert recommended["overall_safety"] == pytest.approx(8)
        assert recommended["normalized_safety"] == pytest.approx(0.8)
        assert recommended["dangerous_segments_count"] == 0
        assert recommended["safety_breakdown"]["high_safety_segments"] == 2
        assert len(recommended["route"]) == 3
        assert recommended["route"][0]["name"] == "Start"
        assert len(recommended["segment_analysis"]) == 2
        assert "caution_notes" not in recommended["segment_analysis"][0]

        risky = data["all_routes"][1]
        assert "route" not in risky
        assert risky["dangerous_segments"] == [{
            "from_name": "Source (Route 1)",
            "to_name": "Destination (Route 1)",
            "value": pytest.approx(2),
            "distance_km": pytest.approx(1.1119492664),
        }]
        assert risky["segment_analysis"][0]["caution_notes"] == (
            "Exercise additional caution due to poor lighting conditions"
        )

        details = data["request_details"]
        assert details["time_of_day"] == "2026-10-19T10:00:00+00:00"
        assert details["analysis_parameters"]["analysis_timestamp"] == "2026-10-19T12:00:00+00:00"
        assert details["analysis_parameters"]["search_radius_m"] == 100

    def test_export_json_writes_file(self, report, tmp_path):
        path = export_json(report, tmp_path / "out" / "report.json")

        with open(path) as f:
            data = json.load(f)
        assert data["recommended_route"]["route_name"] == "Route 2"


class TestGeoJson:

    def test_one_feature_per_segment(self, report):
        collection = report_to_geojson(report)

        assert collection["type"] == "FeatureCollection"
        features = collection["features"]
        assert len(features) == 3
        recommended = [f for f in features if f["properties"]["recommended"]]
        assert len(recommended) == 2
        assert all(f["properties"]["color"] == "#00AA00" for f in recommended)
        assert features[0]["geometry"]["coordinates"] == [[0.0, 0.0], [0.01, 0.0]]
        assert features[-1]["properties"]["safety_category"] == "low"

    def test_export_geojson_writes_file(self, report, tmp_path):
        path = export_geojson(report, tmp_path / "routes.geojson")

        with open(path) as f:
            assert len(json.load(f)["features"]) == 3


class TestGpx:

    def test_tracks_in_ranking_order(self, report):
        xml = report_to_gpx(report)
        gpx = gpxpy.parse(xml)

        assert [len(t.segments) for t in gpx.tracks] == [2, 1]
        assert gpx.tracks[0].name == "Route 2 (Safety: 8.0/10) - recommended"
        assert gpx.tracks[1].name == "Route 1 (Safety: 2.0/10)"
        assert gpx.tracks[0].segments[0].points[0].name == "Start"

    def test_segment_colors(self, report):
        xml = report_to_gpx(report)

        assert xml.count("DisplayColor>Green<") == 2
        assert xml.count("DisplayColor>Red<") == 1

    def test_export_gpx_writes_file(self, report, tmp_path):
        path = export_gpx(report, tmp_path / "routes.gpx")

        with open(path) as f:
            assert len(gpxpy.parse(f).tracks) == 2
