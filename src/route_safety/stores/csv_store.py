"""Review store backed by a CSV file."""

import logging
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .base import ReviewStore, TimeWindow, in_time_window
from ..core.errors import InvalidReviewRecord, ReviewStoreError
from ..core.utils import BoundingBox
from ..safety.models import Review

logger = logging.getLogger(__name__)

COLUMNS = [
    "latitude",
    "longitude",
    "safety_rating",
    "police_presence",
    "street_lights",
    "people_density",
    "traffic",
    "submitted_at",
    "review_time_of_day",
    "author_id",
]


class CsvReviewStore(ReviewStore):
    """Read and append reviews in a CSV file, one review per row."""

    def __init__(self, csv_file: str):
        """
        Initialize store.

        Args:
            csv_file: Path to CSV file; created on first ``add`` if missing
        """
        self.csv_file = Path(csv_file)

    def load(self) -> pd.DataFrame:
        """
        Load all rows as strings.

        Raises:
            ReviewStoreError: If the file is missing or unreadable
        """
        if not self.csv_file.exists():
            raise ReviewStoreError(f"Review file not found: {self.csv_file}")
        try:
            return pd.read_csv(self.csv_file, dtype=str)
        except (pd.errors.ParserError, pd.errors.EmptyDataError, OSError) as e:
            raise ReviewStoreError(f"Could not read review file {self.csv_file}: {e}")

    def fetch(self, bbox: BoundingBox, window: Optional[TimeWindow] = None) -> List[Review]:
        df = self.load()
        if df.empty:
            return []

        lat_col = "latitude" if "latitude" in df.columns else "lat"
        lon_col = "longitude" if "longitude" in df.columns else "lon"
        if lat_col not in df.columns or lon_col not in df.columns:
            raise ReviewStoreError(
                f"Review file {self.csv_file} has no latitude/longitude columns"
            )

        lats = pd.to_numeric(df[lat_col], errors="coerce")
        lons = pd.to_numeric(df[lon_col], errors="coerce")
        bad_rows = lats.isna() | lons.isna()
        if bad_rows.any():
            row = int(bad_rows.idxmax()) + 2  # header is line 1
            raise InvalidReviewRecord(
                f"Non-numeric coordinates in {self.csv_file} at line {row}"
            )

        inside = df[
            lats.between(bbox.south, bbox.north) & lons.between(bbox.west, bbox.east)
        ]

        reviews = [Review.from_dict(record) for record in inside.to_dict(orient="records")]
        reviews = [review for review in reviews if in_time_window(review, window)]

        logger.debug(
            "Loaded %d of %d reviews from %s", len(reviews), len(df), self.csv_file
        )
        return reviews

    def add(self, review: Review) -> Review:
        """Append a review, writing the header when the file is new."""
        write_header = not self.csv_file.exists() or self.csv_file.stat().st_size == 0
        self.csv_file.parent.mkdir(parents=True, exist_ok=True)

        row = pd.DataFrame([review.to_dict()], columns=COLUMNS)
        row.to_csv(self.csv_file, mode="a", header=write_header, index=False)
        return review
