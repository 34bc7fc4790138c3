"""JSON report export of analysis results."""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict

from ..core.config import SafetyConfig
from ..safety.explanations import methodology
from ..safety.models import AnalysisReport, RouteAnalysis, SegmentAnalysis, Waypoint

CALCULATION_METHOD = (
    "Weighted average of segment safety scores, with higher weight given to "
    "longer segments and recent reviews"
)


def _waypoint(waypoint: Waypoint) -> Dict[str, Any]:
    return {
        "latitude": waypoint.latitude,
        "longitude": waypoint.longitude,
        "name": waypoint.name,
    }


def _segment(segment: SegmentAnalysis) -> Dict[str, Any]:
    data = {
        "segment_id": segment.segment_id,
        "start_point": _waypoint(segment.start_point),
        "end_point": _waypoint(segment.end_point),
        "segment_safety": segment.segment_safety,
        "safety_category": segment.safety_category,
        "segment_distance_km": segment.distance_km,
        "review_count": segment.review_count,
        "confidence": segment.confidence,
        "safety_factors": segment.safety_factors,
        "segment_explanation": segment.explanation,
    }
    if segment.caution_notes is not None:
        data["caution_notes"] = segment.caution_notes
        data["safety_recommendations"] = segment.safety_recommendations
    return data


def route_to_dict(analysis: RouteAnalysis, include_points: bool = True) -> Dict[str, Any]:
    """Serializable view of one explained route."""
    result = analysis.result
    data = {
        "route_index": result.route_index,
        "route_name": result.route_name,
        "overall_safety": result.overall_safety,
        "normalized_safety": result.normalized_safety,
        "total_distance_km": result.total_distance_km,
        "dangerous_segments_count": len(result.dangerous_segments),
        "dangerous_segments": [asdict(s) for s in result.dangerous_segments],
        "safety_breakdown": {
            "high_safety_segments": result.breakdown.high,
            "moderate_safety_segments": result.breakdown.moderate,
            "low_safety_segments": result.breakdown.low,
            "calculation_method": CALCULATION_METHOD,
        },
        "route_summary": {
            "safest_segments": [asdict(s) for s in result.safest_segments],
            "least_safe_segments": [asdict(s) for s in result.least_safe_segments],
        },
        "segment_analysis": [_segment(s) for s in analysis.segments],
        "route_explanation": analysis.route_explanation,
        "safety_analysis_explanation": {
            "summary": analysis.summary,
            "key_factors": analysis.key_factors,
            "confidence_level": analysis.confidence_level,
            "time_factors": analysis.time_factors,
        },
    }
    if include_points:
        data["route"] = [_waypoint(p.waypoint) for p in result.points]
    return data


def report_to_dict(report: AnalysisReport) -> Dict[str, Any]:
    """
    Serializable view of a full analysis report.

    Args:
        report: Ranked AnalysisReport

    Returns:
        Dict with recommended_route, all_routes, request_details and
        methodology_explanation keys
    """
    config = SafetyConfig.from_mapping(report.parameters)
    parameters = dict(report.parameters)
    parameters["analysis_timestamp"] = report.analyzed_at.isoformat()

    return {
        "recommended_route": route_to_dict(report.recommended),
        "all_routes": [route_to_dict(r, include_points=False) for r in report.routes],
        "request_details": {
            "time_of_day": report.time_of_day.isoformat() if report.time_of_day else None,
            "analysis_parameters": parameters,
        },
        "methodology_explanation": methodology(config),
    }


def export_json(report: AnalysisReport, output_path: str) -> str:
    """Write the report as indented JSON and return the path."""
    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, "w", encoding="utf-8") as f:
        json.dump(report_to_dict(report), f, indent=2)

    return str(output_file)
