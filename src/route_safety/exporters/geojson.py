"""GeoJSON export of analyzed routes."""

import json
from pathlib import Path
from typing import Any, Dict, List

from shapely.geometry import LineString

from ..safety.models import AnalysisReport, RouteAnalysis

CATEGORY_COLORS = {
    "high": "#00AA00",      # Green
    "moderate": "#FFCC00",  # Yellow
    "low": "#FF0000",       # Red
}


def route_features(analysis: RouteAnalysis, recommended: bool = False) -> List[Dict[str, Any]]:
    """One LineString feature per segment, coloured by safety category."""
    features = []
    for segment in analysis.segments:
        line = LineString([
            (segment.start_point.longitude, segment.start_point.latitude),
            (segment.end_point.longitude, segment.end_point.latitude),
        ])
        color = CATEGORY_COLORS.get(segment.safety_category, "#808080")

        features.append({
            "type": "Feature",
            "bbox": list(line.bounds),
            "geometry": {
                "type": "LineString",
                "coordinates": [list(coord) for coord in line.coords],
            },
            "properties": {
                "type": "route_segment",
                "route_name": analysis.route_name,
                "route_index": analysis.route_index,
                "recommended": recommended,
                "segment_id": segment.segment_id,
                "from": segment.start_point.name,
                "to": segment.end_point.name,
                "segment_safety": segment.segment_safety,
                "safety_category": segment.safety_category,
                "distance_km": segment.distance_km,
                "review_count": segment.review_count,
                "explanation": segment.explanation,
                "color": color,
                "stroke": color,
                "stroke-width": 5 if recommended else 3,
                "stroke-opacity": 1.0 if recommended else 0.6,
            },
        })
    return features


def report_to_geojson(report: AnalysisReport) -> Dict[str, Any]:
    features = []
    for rank, analysis in enumerate(report.routes):
        features.extend(route_features(analysis, recommended=rank == 0))
    return {
        "type": "FeatureCollection",
        "features": features,
    }


def export_geojson(report: AnalysisReport, output_path: str) -> str:
    """
    Export all analyzed routes to a GeoJSON file.

    Args:
        report: Ranked AnalysisReport
        output_path: Path to output GeoJSON file

    Returns:
        Path to output file
    """
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, 'w', encoding='utf-8') as f:
        json.dump(report_to_geojson(report), f, indent=2)

    return str(output_file)
