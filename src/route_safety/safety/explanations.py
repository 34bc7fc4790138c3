"""Deterministic, templated explanations of route safety results.

Every function here is a pure function of its arguments: the same scored
route always renders to the same text.
"""

import math
from collections import OrderedDict
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .models import (
    FACTOR_NAMES,
    FactorLevel,
    RouteAnalysis,
    RouteSafetyResult,
    SafetyBreakdown,
    ScoredPoint,
    SegmentAnalysis,
    Waypoint,
)
from ..core.config import SafetyConfig

HIGH_SAFETY = 0.7
MODERATE_SAFETY = 0.4
CAUTION_SAFETY = 0.6

FACTOR_DESCRIPTIONS = {
    "police_presence": {
        "high": "frequent police patrols",
        "moderate": "regular police presence",
        "low": "occasional police presence",
        "none": "minimal to no visible police presence",
        "unknown": "unknown level of police presence",
    },
    "street_lights": {
        "high": "excellent street lighting",
        "moderate": "adequate street lighting",
        "low": "limited street lighting",
        "none": "minimal to no street lighting",
        "unknown": "unknown level of street lighting",
    },
    "people_density": {
        "high": "busy area with high foot traffic",
        "moderate": "moderate pedestrian activity",
        "low": "sparse pedestrian activity",
        "none": "very isolated area with minimal pedestrian presence",
        "unknown": "unknown level of pedestrian activity",
    },
    "traffic": {
        "high": "heavy vehicular traffic",
        "moderate": "moderate vehicular traffic",
        "low": "light vehicular traffic",
        "none": "minimal to no vehicular traffic",
        "unknown": "unknown traffic conditions",
    },
}

# More of a factor is better, except for traffic
_PROTECTIVE_IMPACT = {
    "high": "positive",
    "moderate": "positive",
    "low": "neutral",
    "none": "negative",
}
FACTOR_IMPACTS = {
    "police_presence": _PROTECTIVE_IMPACT,
    "street_lights": _PROTECTIVE_IMPACT,
    "people_density": _PROTECTIVE_IMPACT,
    "traffic": {
        "high": "negative",
        "moderate": "neutral",
        "low": "positive",
        "none": "positive",
    },
}

# Route-level tie-break: the better level wins
LEVEL_PRIORITY = {"high": 4, "moderate": 3, "low": 2, "none": 1}

# Factor conditions that warrant a caution note, with the matching advice
_CAUTIONS = (
    ("police_presence", ("low", "none"), "limited police presence",
     "Consider informing someone of your travel route and estimated arrival time"),
    ("street_lights", ("low", "none"), "poor lighting conditions",
     "Carry a flashlight or use your phone's flashlight feature if traveling after dark"),
    ("people_density", ("low", "none"), "isolated area with few people",
     "Stay alert and be aware of your surroundings in this less populated area"),
    ("traffic", ("high",), "heavy traffic conditions",
     "Use designated crosswalks and follow traffic signals carefully"),
)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _number(value: float) -> str:
    """Render 70.0 as '70' and 70.5 as '70.5'."""
    return f"{value:g}"


def safety_percentage(normalized: float) -> float:
    """Percentage with one decimal, e.g. 0.7234 -> 72.3."""
    return _round_half_up(normalized * 1000) / 10


def safety_tier(normalized: float) -> str:
    if normalized >= HIGH_SAFETY:
        return "high"
    elif normalized >= MODERATE_SAFETY:
        return "moderate"
    return "low"


def describe_factor(factor: str, level: Optional[str]) -> str:
    """Human readable description of a factor level."""
    descriptions = FACTOR_DESCRIPTIONS[factor]
    return descriptions.get(level or FactorLevel.UNKNOWN, descriptions["unknown"])


def factor_impact(factor: str, level: Optional[str]) -> str:
    """Impact of a factor level on safety: positive, neutral or negative."""
    return FACTOR_IMPACTS.get(factor, {}).get(level, "neutral")


def time_of_day_description(moment: datetime) -> str:
    hours = moment.hour
    if 5 <= hours < 12:
        return "morning"
    elif 12 <= hours < 17:
        return "afternoon"
    elif 17 <= hours < 21:
        return "evening"
    else:
        return "night"


def route_dominant_factors(points: Sequence[ScoredPoint]) -> Dict[str, str]:
    """
    Most frequent level of each factor across a route's points.

    Unknown levels are ignored. Ties resolve to the better level
    (high > moderate > low > none).
    """
    dominant = {}
    for name in FACTOR_NAMES:
        counts = {level: 0 for level in FactorLevel.KNOWN}
        for point in points:
            level = point.safety.dominant_factors.get(name)
            if level in counts:
                counts[level] += 1

        max_count = max(counts.values())
        if max_count > 0:
            tied = [level for level, count in counts.items() if count == max_count]
            dominant[name] = max(tied, key=LEVEL_PRIORITY.get)
        else:
            dominant[name] = FactorLevel.UNKNOWN
    return dominant


def most_common_factor(points: Sequence[ScoredPoint], factor: str) -> str:
    """Capitalized most common known level of a factor, 'Moderate' if none."""
    counts = OrderedDict((level, 0) for level in FactorLevel.KNOWN)
    for point in points:
        level = point.safety.dominant_factors.get(factor)
        if level in counts:
            counts[level] += 1

    max_count = 0
    most_common = "Moderate"
    for level, count in counts.items():
        if count > max_count:
            max_count = count
            most_common = level.capitalize()
    return most_common


def segment_factors(point: ScoredPoint) -> Dict[str, Dict[str, str]]:
    """Level, description and impact of each factor at a segment's start point."""
    factors = {}
    for name in FACTOR_NAMES:
        level = point.safety.dominant_factors.get(name) or FactorLevel.UNKNOWN
        factors[name] = {
            "level": level,
            "description": describe_factor(name, level),
            "impact": factor_impact(name, level),
        }
    return factors


def caution_notes(factors: Dict[str, Dict[str, str]]) -> str:
    """Single caution sentence listing the segment's risk factors."""
    items = [
        note for name, levels, note, _ in _CAUTIONS
        if factors[name]["level"] in levels
    ]
    if not items:
        return "Exercise normal caution in this area"
    if len(items) == 1:
        return f"Exercise additional caution due to {items[0]}"
    return f"Exercise additional caution due to {', '.join(items[:-1])} and {items[-1]}"


def safety_recommendations(factors: Dict[str, Dict[str, str]]) -> List[str]:
    recommendations = [
        advice for name, levels, _, advice in _CAUTIONS
        if factors[name]["level"] in levels
    ]
    if not recommendations:
        recommendations.append("Follow standard safety practices for urban travel")
    return recommendations


def _point_label(point: ScoredPoint, fallback_index: int) -> Waypoint:
    waypoint = point.waypoint
    if waypoint.name:
        return waypoint
    return Waypoint(waypoint.latitude, waypoint.longitude, f"Point {fallback_index}")


def segment_explanation(
    start: ScoredPoint,
    end: ScoredPoint,
    normalized: float,
    factors: Dict[str, Dict[str, str]]
) -> str:
    """Explain one segment: tier, evidence and key factors."""
    percentage = _round_half_up(normalized * 100)
    distance = f"{start.edge.distance_km:.2f}"
    review_count = start.safety.review_count
    confidence = _round_half_up(start.safety.confidence * 100)

    if start.name and end.name:
        location = f"from {start.name} to {end.name}"
    else:
        location = (
            f"at coordinates ({start.waypoint.latitude}, {start.waypoint.longitude}) "
            f"to ({end.waypoint.latitude}, {end.waypoint.longitude})"
        )

    description = (
        f"This {distance} km segment {location} has a {safety_tier(normalized)} "
        f"safety rating of {percentage}%"
    )

    if review_count > 0:
        evidence = (
            f" based on {review_count} reviews, with {confidence}% confidence "
            f"in this assessment."
        )
    else:
        evidence = (
            " based on interpolated safety data from nearby areas, with low "
            "confidence in this assessment."
        )

    characteristics = (
        f"Key safety characteristics include "
        f"{factors['police_presence']['description']}, "
        f"{factors['street_lights']['description']}, and "
        f"{factors['people_density']['description']}."
    )
    return f"{description}{evidence} {characteristics}"


def segment_analysis(result: RouteSafetyResult) -> List[SegmentAnalysis]:
    """Detailed analysis of every segment of a route."""
    segments = []
    points = result.points
    for idx, point in enumerate(p for p in points if p.edge is not None):
        end = points[point.edge.to_index]
        normalized = round(point.edge.safety_score / 10, 2)
        factors = segment_factors(point)

        needs_caution = normalized < CAUTION_SAFETY
        segments.append(SegmentAnalysis(
            segment_id=f"seg-{idx + 1}",
            start_point=_point_label(point, idx),
            end_point=_point_label(end, point.edge.to_index),
            segment_safety=normalized,
            safety_category=safety_tier(normalized),
            distance_km=round(point.edge.distance_km, 2),
            review_count=point.safety.review_count,
            confidence=round(point.safety.confidence, 2),
            safety_factors=factors,
            explanation=segment_explanation(point, end, normalized, factors),
            caution_notes=caution_notes(factors) if needs_caution else None,
            safety_recommendations=(
                safety_recommendations(factors) if needs_caution else None
            ),
        ))
    return segments


def _share(count: int, total: int) -> int:
    if total == 0:
        return 0
    return _round_half_up(count / total * 100)


def route_explanation(
    result: RouteSafetyResult,
    breakdown: SafetyBreakdown,
    time_of_day: Optional[datetime] = None
) -> str:
    """Route-level assessment, factor callout and recommendation."""
    rounded = safety_percentage(result.normalized_safety)
    percentage = _number(rounded)
    distance = f"{result.total_distance_km:.2f}"
    number = result.route_index + 1

    total = breakdown.total
    high = _share(breakdown.high, total)
    moderate = _share(breakdown.moderate, total)
    low = _share(breakdown.low, total)

    dominant = route_dominant_factors(result.points)

    if time_of_day is not None:
        context = f"when traveling during the {time_of_day_description(time_of_day)}"
    else:
        context = "based on available safety data"

    # Tier follows the printed (rounded) percentage
    tier = safety_tier(rounded / 100)
    if tier == "high":
        assessment = (
            f"Route {number} is considered highly safe overall with a safety rating "
            f"of {percentage}% {context}. {high}% of segments along this {distance} km "
            f"route have high safety ratings, with only {low}% categorized as having "
            f"potential safety concerns."
        )
        recommendation = (
            "This route is recommended for travel during both day and night hours, "
            "though standard safety precautions are always advisable."
        )
    elif tier == "moderate":
        assessment = (
            f"Route {number} has a moderate overall safety rating of {percentage}% "
            f"{context}. This {distance} km route contains a mix of safety profiles "
            f"with {high}% high-safety segments, {moderate}% moderate-safety segments, "
            f"and {low}% segments with safety concerns that may require additional "
            f"caution."
        )
        recommendation = (
            "This route is generally suitable for travel, with increased awareness "
            "recommended particularly in segments with lower safety ratings. Consider "
            "using this route during daylight hours if possible."
        )
    else:
        assessment = (
            f"Route {number} has safety challenges with an overall safety rating of "
            f"{percentage}% {context}. This {distance} km route has {low}% of segments "
            f"with safety concerns and only {high}% high-safety segments. Extra "
            f"vigilance is recommended when traveling this route."
        )
        recommendation = (
            "If possible, consider alternative routes with higher safety ratings. If "
            "using this route, travel during daylight hours is strongly recommended, "
            "and extra vigilance in the identified low-safety segments is advised."
        )

    factors = (
        f"Key safety characteristics of this route include "
        f"{dominant['police_presence']} police presence, "
        f"{dominant['street_lights']} street lighting, and "
        f"{dominant['people_density']} people density throughout most segments."
    )
    return f"{assessment} {factors} {recommendation}"


def safety_summary(result: RouteSafetyResult, config: SafetyConfig) -> str:
    rounded = safety_percentage(result.normalized_safety)
    percentage = _number(rounded)
    total_reviews = result.total_reviews
    dominant = route_dominant_factors(result.points)

    if total_reviews > 0:
        basis = f"{total_reviews} reviews along the route"
    else:
        basis = "available safety data"

    return (
        f"This route received a {safety_tier(rounded / 100)} safety score "
        f"of {percentage}% based on {basis}. The calculation weighted recent reviews "
        f"more heavily (within {config.recency_days} days) and considered factors "
        f"including {dominant['police_presence']} police presence, "
        f"{dominant['street_lights']} street lighting, and "
        f"{dominant['people_density']} population density throughout most segments."
    )


def key_factors(result: RouteSafetyResult) -> List[str]:
    """Bullet list of the main safety characteristics of a route."""
    points = result.points
    total = len(points)

    average = sum(p.safety.safety_score for p in points) / total
    average_rating = _round_half_up(average * 10) / 10

    police_covered = sum(
        1 for p in points
        if p.safety.dominant_factors.get("police_presence") in ("moderate", "high")
    )
    police_share = _share(police_covered, total)

    urban = sum(
        1 for p in points if p.safety.dominant_factors.get("people_density") == "high"
    )
    if urban > total * 0.6:
        lighting = "High in urban segments, moderate in connecting areas"
    elif urban < total * 0.3:
        lighting = "Moderate to low throughout most of the route"
    else:
        lighting = "Varies throughout the route"

    return [
        f"Average safety rating from user reviews: {_number(average_rating)}/10",
        f"Police presence: Moderate throughout {police_share}% of the route",
        f"Street lighting: {lighting}",
        f"People density: {most_common_factor(points, 'people_density')} "
        f"(providing natural surveillance)",
        f"Traffic conditions: {most_common_factor(points, 'traffic')}, "
        f"with well-regulated flow",
    ]


def confidence_level(result: RouteSafetyResult) -> str:
    total_reviews = result.total_reviews
    average_confidence = sum(p.safety.confidence for p in result.points) / len(result.points)

    if total_reviews == 0:
        return "Low (no recent reviews available)"
    elif total_reviews < 10 or average_confidence < 0.5:
        return f"Low to moderate (based on {total_reviews} reviews)"
    elif total_reviews < 20 or average_confidence < 0.8:
        return f"Moderate (based on {total_reviews} reviews)"
    else:
        return f"High (based on {total_reviews} recent reviews within search radius)"


def time_factors(time_of_day: Optional[datetime]) -> str:
    if time_of_day is None:
        return "Analysis based on time-independent factors"
    return (
        f"Analysis considered {time_of_day_description(time_of_day)} conditions "
        f"as specified in request"
    )


def methodology(config: SafetyConfig) -> Dict[str, object]:
    """Description of how scores are computed, for report output."""
    return {
        "safety_score_calculation": (
            f"Safety scores are calculated on a scale of 1-10 by analyzing user "
            f"reviews within {_number(config.search_radius_m)}m of each route point. "
            f"Recent reviews (within {config.recency_days} days) are given higher "
            f"weight in the calculation."
        ),
        "factors_considered": [
            "User safety ratings (1-10 scale)",
            "Police presence levels (none, low, moderate, high)",
            "Street lighting quality (none, low, moderate, high)",
            "People density for natural surveillance (none, low, moderate, high)",
            "Traffic conditions (none, low, moderate, high)",
        ],
        "confidence_model": (
            f"Points with fewer than {config.confidence_threshold} reviews have "
            f"lower confidence, and their scores are pulled toward the neutral "
            f"midpoint of 5."
        ),
        "alternative_routes_explanation": (
            "All routes are ranked by distance-weighted safety score, with detailed "
            "segment analysis provided for every option."
        ),
    }


class ExplanationFormatter:
    """Render every explanation for scored routes of one request."""

    def __init__(self, config: Optional[SafetyConfig] = None, time_of_day: Optional[datetime] = None):
        self.config = config or SafetyConfig()
        self.time_of_day = time_of_day

    def explain(self, result: RouteSafetyResult) -> RouteAnalysis:
        return RouteAnalysis(
            result=result,
            segments=segment_analysis(result),
            route_explanation=route_explanation(result, result.breakdown, self.time_of_day),
            summary=safety_summary(result, self.config),
            key_factors=key_factors(result),
            confidence_level=confidence_level(result),
            time_factors=time_factors(self.time_of_day),
        )

    def explain_all(self, results: Sequence[RouteSafetyResult]) -> List[RouteAnalysis]:
        return [self.explain(result) for result in results]
