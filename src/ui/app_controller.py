"""Application controller - orchestrates UI and business logic.

Each function is one phase of a page render: fetch a page of listings,
decorate it with metrics, summarize the market, look up a single URL.
The UI goes through the same handlers an HTTP layer would use.
"""

from __future__ import annotations

from typing import Any

import streamlit as st

from src.core.location import get_market
from src.core.logging import get_logger
from src.core.settings import get_settings
from src.domain.models.assumptions import Assumptions
from src.domain.models.listing import Listing
from src.services import endpoints
from src.services.evaluator import AnalyzedListing, ListingEvaluator
from src.services.exporter import ResultExporter
from src.services.listing_store import ListingStore
from src.services.query_engine import cap_rate_distribution

log = get_logger(__name__)


@st.cache_resource
def get_listing_store() -> ListingStore:
    """Process-wide store; it owns its own time-based cache."""
    store = ListingStore.from_settings()
    log.info("listing_store_created", path=str(store.path), ttl=store.ttl_seconds)
    return store


def build_request_params(filters: dict[str, Any], page: int, page_size: int) -> dict[str, str]:
    """Serialize UI filters the way a browser would send them."""
    params = {key: str(value) for key, value in filters.items()}
    params["page"] = str(page)
    params["pageSize"] = str(page_size)
    return params


def run_search(params: dict[str, str]) -> dict[str, Any]:
    """Fetch one page of listings.

    Raises:
        RuntimeError: If the backend reports a failure (distinct from an
            empty result)
    """
    response = endpoints.find_good_roi(get_listing_store(), params)
    if not response.ok:
        raise RuntimeError(response.body.get("detail") or response.body.get("error"))
    return response.body


def run_market_summary(params: dict[str, str]) -> dict[str, Any] | None:
    response = endpoints.market_summary(get_listing_store(), params)
    if not response.ok:
        log.warning("market_summary_unavailable", detail=response.body.get("detail"))
        return None
    return response.body


def analyze_page(items: list[dict[str, Any]], assumptions: Assumptions) -> list[AnalyzedListing]:
    """Decorate the listings of one result page with investor metrics."""
    listings = [Listing.model_validate(item) for item in items]
    settings = get_settings()
    evaluator = ListingEvaluator(assumptions, market=get_market(settings.market_country))
    return evaluator.evaluate_many(listings)


def page_cap_rate_distribution(analyzed: list[AnalyzedListing]) -> dict[str, int]:
    return cap_rate_distribution(item.listing for item in analyzed)


def lookup_property(url: str) -> dict[str, Any]:
    """Extract a single listing page; never raises for fetch problems."""
    response = endpoints.extract_property({"url": url})
    if not response.ok:
        st.error(f"Lookup failed: {response.body.get('detail')}")
    return response.body


def export_page(analyzed: list[AnalyzedListing], metadata: dict[str, Any]) -> str | None:
    """Save the current page to disk.

    Returns:
        Path of the saved file, or None when export is disabled or failed
    """
    if not get_settings().enable_export:
        return None
    try:
        return ResultExporter().save_results(analyzed, metadata=metadata)
    except OSError as e:
        log.warning("export_failed", error=str(e))
        return None
