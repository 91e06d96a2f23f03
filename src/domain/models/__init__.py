"""Data models for the ROI analyzer."""

from .assumptions import Assumptions, Metrics
from .listing import Listing, Location
from .query import MarketSummary, QueryParams, QueryResult

__all__ = [
    "Assumptions",
    "Listing",
    "Location",
    "MarketSummary",
    "Metrics",
    "QueryParams",
    "QueryResult",
]
