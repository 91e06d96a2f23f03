"""
Listing Evaluator - decorates a page of listings with investor metrics.

Listings stay untouched; each one is paired with the metrics computed under
the caller's assumptions and the location parsed from its address.
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.core.financial import compute_metrics
from src.core.location import DEFAULT_MARKET, MarketConfig, parse_location
from src.core.logging import get_logger
from src.domain.models.assumptions import Assumptions, Metrics
from src.domain.models.listing import Listing, Location

log = get_logger(__name__)


class AnalyzedListing(BaseModel):
    """A listing with its derived metrics, for display."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    listing: Listing
    metrics: Metrics
    location: Location

    def to_row(self) -> dict[str, Any]:
        """Flat record for tables and exports (raw row excluded)."""
        row = self.listing.model_dump(by_alias=True, exclude={"raw"})
        row.update(self.location.model_dump())
        row.update(self.metrics.model_dump(by_alias=True))
        return row


class ListingEvaluator:
    """
    Applies one set of assumptions to listings.
    """

    def __init__(self, assumptions: Assumptions | None = None, market: MarketConfig = DEFAULT_MARKET):
        """
        Args:
            assumptions: Financing and operating assumptions (defaults if None)
            market: Region table for address parsing
        """
        self.assumptions = assumptions or Assumptions()
        self.market = market

    def evaluate(self, listing: Listing) -> AnalyzedListing:
        metrics = compute_metrics(listing.price, listing.est_rent, listing.noi, self.assumptions)
        return AnalyzedListing(
            listing=listing,
            metrics=metrics,
            location=parse_location(listing.address, self.market),
        )

    def evaluate_many(self, listings: Iterable[Listing]) -> list[AnalyzedListing]:
        analyzed = [self.evaluate(listing) for listing in listings]
        log.debug("listings_evaluated", count=len(analyzed), assumptions=self.assumptions.model_dump())
        return analyzed
