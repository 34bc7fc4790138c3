"""Review store interface and in-memory implementation."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from ..core.utils import BoundingBox
from ..safety.models import Review

TimeWindow = Tuple[datetime, datetime]


def in_time_window(review: Review, window: Optional[TimeWindow]) -> bool:
    """
    True if the review's time of day falls inside ``window``.

    Reviews without a recorded time of day never match a window.
    """
    if window is None:
        return True
    if review.review_time_of_day is None:
        return False
    start, end = window
    return start <= review.review_time_of_day <= end


class ReviewStore(ABC):
    """Source of reviews for an analysis request."""

    @abstractmethod
    def fetch(self, bbox: BoundingBox, window: Optional[TimeWindow] = None) -> List[Review]:
        """
        Fetch all reviews inside a bounding box.

        Args:
            bbox: Area to fetch, already buffered by the search radius
            window: Optional (start, end) bounds on the review time of day,
                as aware UTC datetimes

        Raises:
            ReviewStoreError: If the store cannot be read
        """


class InMemoryReviewStore(ReviewStore):
    """Review store backed by a list, used for embedding and tests."""

    def __init__(self, reviews: Iterable[Review] = ()):
        self.reviews = list(reviews)

    def add(self, review: Review) -> Review:
        self.reviews.append(review)
        return review

    def fetch(self, bbox: BoundingBox, window: Optional[TimeWindow] = None) -> List[Review]:
        return [
            review for review in self.reviews
            if bbox.contains(review.latitude, review.longitude)
            and in_time_window(review, window)
        ]
