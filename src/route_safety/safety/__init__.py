"""Safety scoring and ranking of candidate routes."""

from .models import (
    Waypoint,
    Review,
    PointSafety,
    EdgeSafety,
    RouteSafetyResult,
    AnalysisReport,
)
from .spatial_index import SpatialIndex
from .scorer import PointSafetyScorer
from .segments import SegmentAggregator
from .ranker import RouteRanker
from .explanations import ExplanationFormatter
from .analyzer import RouteSafetyAnalyzer

__all__ = [
    "Waypoint",
    "Review",
    "PointSafety",
    "EdgeSafety",
    "RouteSafetyResult",
    "AnalysisReport",
    "SpatialIndex",
    "PointSafetyScorer",
    "SegmentAggregator",
    "RouteRanker",
    "ExplanationFormatter",
    "RouteSafetyAnalyzer",
]
