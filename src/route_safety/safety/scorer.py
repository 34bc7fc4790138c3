"""Per-point safety scoring from nearby reviews."""

import math
from collections import Counter
from datetime import datetime, timezone
from typing import Dict, Optional, Sequence

from .models import (
    FACTOR_NAMES,
    NEUTRAL_SCORE,
    FactorLevel,
    PointSafety,
    Review,
    Waypoint,
    to_utc,
)
from ..core.config import SafetyConfig

# Weight given to reviews older than the recency window
STALE_REVIEW_WEIGHT = 0.1

SECONDS_PER_DAY = 86400.0


class PointSafetyScorer:
    """Compute safety score, confidence and dominant factors for one point."""

    def __init__(self, config: Optional[SafetyConfig] = None, now: Optional[datetime] = None):
        """
        Initialize scorer.

        Args:
            config: SafetyConfig (uses defaults if None)
            now: Reference time for review ages; pinned at construction so
                every point of a request is scored against the same instant
        """
        self.config = config or SafetyConfig()
        self.now = to_utc(now) if now is not None else datetime.now(timezone.utc)

    def recency_weight(self, review: Review) -> float:
        """Weight of a review in the rating average, based on its age."""
        if not self.config.recency_weight or review.submitted_at is None:
            return 1.0

        age_days = (self.now - review.submitted_at).total_seconds() / SECONDS_PER_DAY
        if age_days <= self.config.recency_days:
            return math.exp(-age_days / (self.config.recency_days / 2))
        return STALE_REVIEW_WEIGHT

    def confidence(self, review_count: int) -> float:
        return min(1.0, review_count / self.config.confidence_threshold)

    def score(self, point: Waypoint, nearby_reviews: Sequence[Review]) -> PointSafety:
        """
        Score a single point.

        Args:
            point: The waypoint being scored
            nearby_reviews: Reviews already selected for this point

        Returns:
            PointSafety; neutral defaults when there are no reviews
        """
        if not nearby_reviews:
            return PointSafety.neutral()

        total_weight = 0.0
        weighted_sum = 0.0
        for review in nearby_reviews:
            weight = self.recency_weight(review)
            weighted_sum += review.safety_rating * weight
            total_weight += weight

        safety_score = weighted_sum / total_weight
        confidence = self.confidence(len(nearby_reviews))

        # Shrink sparse evidence toward the neutral midpoint
        adjusted = safety_score * confidence + NEUTRAL_SCORE * (1 - confidence)

        return PointSafety(
            safety_score=safety_score,
            confidence=confidence,
            adjusted_safety_score=adjusted,
            review_count=len(nearby_reviews),
            dominant_factors=dominant_review_factors(nearby_reviews),
        )


def dominant_review_factors(reviews: Sequence[Review]) -> Dict[str, str]:
    """
    Modal level of each factor among reviews.

    Ties go to the level encountered first in review order. Missing and
    ``unknown`` votes are not counted; a factor with no votes is ``unknown``.
    """
    dominant = {}
    for name in FACTOR_NAMES:
        counts = Counter(
            level for level in (review.factor(name) for review in reviews)
            if level in FactorLevel.KNOWN
        )
        if counts:
            # most_common keeps insertion order among equal counts
            dominant[name] = counts.most_common(1)[0][0]
        else:
            dominant[name] = FactorLevel.UNKNOWN
    return dominant
