"""Review store reading from a REST review service."""

import logging
from typing import List, Optional

import requests

from .base import ReviewStore, TimeWindow, in_time_window
from ..core.errors import ReviewStoreError
from ..core.utils import BoundingBox
from ..safety.models import Review

logger = logging.getLogger(__name__)


class HttpReviewStore(ReviewStore):
    """
    Fetch reviews from an HTTP service.

    The service is queried with ``GET {base_url}/reviews`` and the bounding box
    as ``south``, ``north``, ``west`` and ``east`` parameters (plus ``start`` and
    ``end`` ISO timestamps for a time window). It must answer with a JSON list
    of review records, or an object holding that list under ``reviews``.
    """

    def __init__(self, base_url: str, timeout: float = 10, session: Optional[requests.Session] = None):
        """
        Initialize store.

        Args:
            base_url: Service root URL, e.g. http://localhost:8000/api
            timeout: Request timeout in seconds
            session: Optional requests session to reuse connections
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def fetch(self, bbox: BoundingBox, window: Optional[TimeWindow] = None) -> List[Review]:
        params = bbox.as_dict()
        if window is not None:
            params["start"] = window[0].isoformat()
            params["end"] = window[1].isoformat()

        url = f"{self.base_url}/reviews"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise ReviewStoreError(f"Review service request failed: {e}")
        except ValueError as e:
            raise ReviewStoreError(f"Review service returned invalid JSON: {e}")

        if isinstance(data, dict):
            data = data.get("reviews")
        if not isinstance(data, list):
            raise ReviewStoreError("Review service response holds no review list")

        reviews = [Review.from_dict(record) for record in data]
        logger.debug("Fetched %d reviews from %s", len(reviews), url)

        # The service may ignore the window parameters
        return [review for review in reviews if in_time_window(review, window)]
