"""Application services."""

from .evaluator import AnalyzedListing, ListingEvaluator
from .exporter import ResultExporter
from .listing_store import ListingStore

__all__ = [
    "AnalyzedListing",
    "ListingEvaluator",
    "ListingStore",
    "ResultExporter",
]
