"""Request handlers for the listing API.

Framework-agnostic: each handler takes already-decoded parameters and returns
a ``Response``. Bad parameters are clamped or defaulted; only structural
failures (unreadable store, unexpected faults) produce a labelled 500 so the
UI can tell "backend broken" from "no matches".
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import requests

from src.core.coercion import to_text
from src.core.exceptions import ExtractionError
from src.core.location import get_market
from src.core.logging import get_logger
from src.core.settings import get_settings
from src.domain.models.listing import Listing
from src.domain.models.query import QueryParams
from src.services import query_engine
from src.services.listing_store import ListingStore
from src.services.normalizer import EstimateConfig, normalize_row
from src.services.page_extractor import (
    ExtractionResult,
    extract_candidate_links,
    fetch_and_extract,
    fetch_html,
)

log = get_logger(__name__)


@dataclass(frozen=True)
class Response:
    status: int
    body: dict[str, Any]

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def _failure(label: str, error: Exception) -> Response:
    log.error("endpoint_failed", endpoint=label, error=str(error), error_type=type(error).__name__)
    return Response(500, {"error": f"{label} failed", "detail": str(error)})


def find_good_roi(store: ListingStore, params: Mapping[str, Any] | None = None) -> Response:
    """GET /api/find-good-roi: filtered, sorted page of listings."""
    settings = get_settings()
    try:
        query_params = QueryParams.from_request(params)
        result = query_engine.query(
            store.get_all_listings(),
            query_params,
            min_price=settings.hard_min_price,
            market=get_market(settings.market_country),
        )
    except Exception as e:
        return _failure("GET /api/find-good-roi", e)

    log.info("find_good_roi", total=result.total, page=result.page, sort_by=query_params.sort_by)
    return Response(200, result.model_dump(by_alias=True, mode="json"))


def market_summary(store: ListingStore, params: Mapping[str, Any] | None = None) -> Response:
    """GET /api/market-summary: count and averages for a location."""
    settings = get_settings()
    try:
        query_params = QueryParams.from_request(params)
        summary = query_engine.market_summary(
            store.get_all_listings(),
            query_params,
            min_price=settings.hard_min_price,
            market=get_market(settings.market_country),
        )
    except Exception as e:
        return _failure("GET /api/market-summary", e)

    return Response(200, summary.model_dump(by_alias=True, mode="json"))


def _listing_shape(result: ExtractionResult) -> dict[str, Any]:
    listing = None
    if not result.is_empty:
        listing = normalize_row(result.as_row(), 0, EstimateConfig.from_settings())
    if listing is None:
        # Zero-only pages (a studio with beds=0) are dropped by the junk-row rule
        listing = Listing(
            id=0,
            url=result.url,
            address=result.address or "",
            price=result.price,
            beds=result.beds,
            baths=result.baths,
            sqft=result.sqft,
        )
    return listing.model_dump(by_alias=True, mode="json", exclude={"raw"})


def extract_property(
    body: Mapping[str, Any] | None,
    session: requests.Session | None = None,
) -> Response:
    """POST /api/property: extract one listing page into the listing shape.

    Fetch failures still answer 200 with all-null fields and a note in
    ``debug.notes``; the caller falls back to manual input.
    """
    url = to_text((body or {}).get("url"))
    try:
        if not url:
            result = ExtractionResult(notes=["no url provided"])
        elif not url.startswith(("http://", "https://")):
            result = ExtractionResult(url=url, notes=["url must start with http:// or https://"])
        else:
            result = fetch_and_extract(url, session=session)
        payload = _listing_shape(result)
    except Exception as e:
        return _failure("POST /api/property", e)

    payload["debug"] = {"sources": result.sources, "notes": result.notes}
    return Response(200, payload)


def find_listing_links(
    body: Mapping[str, Any] | None,
    session: requests.Session | None = None,
) -> Response:
    """POST /api/listing-links: candidate listing URLs on a results page."""
    url = to_text((body or {}).get("url"))
    if not url.startswith(("http://", "https://")):
        return Response(200, {"ok": False, "searched": url, "listings": [], "error": "a results page url is required"})

    try:
        html = fetch_html(url, session=session)
    except ExtractionError as e:
        log.warning("listing_links_fetch_failed", url=url, error=str(e))
        return Response(200, {"ok": False, "searched": url, "listings": [], "error": str(e)})

    links = extract_candidate_links(html, base_url=url)
    log.info("listing_links_found", url=url, count=len(links))
    return Response(200, {
        "ok": True,
        "searched": url,
        "listings": [link.model_dump() for link in links],
    })
