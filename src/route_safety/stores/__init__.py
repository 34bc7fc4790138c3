"""Review stores the analysis fetches reviews from."""

from .base import ReviewStore, InMemoryReviewStore, in_time_window
from .csv_store import CsvReviewStore
from .http_store import HttpReviewStore

__all__ = [
    "ReviewStore",
    "InMemoryReviewStore",
    "CsvReviewStore",
    "HttpReviewStore",
    "in_time_window",
]
