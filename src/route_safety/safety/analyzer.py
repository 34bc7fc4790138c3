"""Route safety analysis for candidate walking routes."""

import logging
from datetime import datetime
from typing import Any, Optional, Sequence, Union

from .explanations import ExplanationFormatter
from .models import AnalysisReport, to_utc
from .ranker import RouteRanker
from .spatial_index import SpatialIndex
from ..core.config import SafetyConfig
from ..core.errors import InvalidRouteInput
from ..core.utils import get_bounding_box, time_window
from ..stores.base import ReviewStore

logger = logging.getLogger(__name__)


def parse_time_of_day(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse a requested travel time, keeping its own clock time.

    Raises:
        InvalidRouteInput: If the value is not an ISO-8601 timestamp
    """
    if value is None or isinstance(value, datetime):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise InvalidRouteInput(f"Invalid time of day: {value!r}")


class RouteSafetyAnalyzer:
    """Analyze and rank candidate routes against community reviews."""

    def __init__(
        self,
        store: ReviewStore,
        config: Optional[SafetyConfig] = None,
        max_workers: Optional[int] = None
    ):
        """
        Initialize analyzer.

        Args:
            store: Review store queried once per analysis
            config: SafetyConfig (uses defaults if None)
            max_workers: Point scoring pool size (config value if None)
        """
        self.store = store
        self.config = config or SafetyConfig()
        self.max_workers = max_workers

    def analyze_routes(
        self,
        routes: Sequence[Any],
        time_of_day: Union[str, datetime, None] = None,
        now: Optional[datetime] = None
    ) -> AnalysisReport:
        """
        Score and rank candidate routes.

        Args:
            routes: Candidate routes, each an ordered list of points
            time_of_day: Optional travel time; only reviews written within
                ``time_window_hours`` of it are used
            now: Reference time for recency weighting (current time if None)

        Returns:
            AnalysisReport with routes ranked safest first

        Raises:
            InvalidRouteInput: If any route is malformed (nothing is fetched)
            ReviewStoreError: If reviews cannot be fetched
        """
        ranker = RouteRanker(self.config, now=now, max_workers=self.max_workers)
        travel_time = parse_time_of_day(time_of_day)

        # 1. Validate every route before touching the store
        prepared = ranker.prepare_routes(routes)

        # 2. One fetch covering all routes plus the search radius
        bbox = get_bounding_box(
            (waypoint.coords for route in prepared for waypoint in route),
            buffer_m=self.config.search_radius_m,
        )
        window = None
        if travel_time is not None:
            window = time_window(to_utc(travel_time), self.config.time_window_hours)

        reviews = self.store.fetch(bbox, window)
        logger.info(
            "Fetched %d reviews in a single query for %d routes", len(reviews), len(prepared)
        )

        # 3. Score, rank and explain
        index = SpatialIndex.build(reviews)
        ranked = ranker.rank(ranker.analyze(prepared, index))

        formatter = ExplanationFormatter(self.config, time_of_day=travel_time)
        analyses = formatter.explain_all(ranked)

        logger.info(
            "Recommended %s with overall safety %.2f",
            analyses[0].route_name, analyses[0].result.overall_safety
        )

        return AnalysisReport(
            routes=analyses,
            routes_input=prepared,
            time_of_day=travel_time,
            analyzed_at=ranker.now,
            parameters=self.config.to_dict(),
        )
