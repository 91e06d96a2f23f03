"""Listing query engine.

Applies the hard validity rules, user filters, sort and pagination over the
canonical listing set. Pure functions: the input listings are never mutated.
"""

from __future__ import annotations

import locale
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from src.core.location import DEFAULT_MARKET, MarketConfig, parse_location
from src.core.logging import get_logger
from src.domain.models.listing import UNKNOWN, Listing, Location
from src.domain.models.query import (
    ANY,
    MAX_PAGE_SIZE,
    MIN_PAGE_SIZE,
    PRICE_BUCKETS,
    SORT_CAP,
    SORT_NOI_HIGH,
    SORT_PRICE_LOW,
    MarketSummary,
    QueryParams,
    QueryResult,
)

log = get_logger(__name__)

HARD_MIN_PRICE = 200_000.0

# Null placeholders: nulls always sort last
NULL_DESC = -999.0
NULL_ASC = 9e18

CAP_RATE_BUCKETS: tuple[tuple[str, float, float], ...] = (
    ("0-2%", 0.0, 2.0),
    ("2-4%", 2.0, 4.0),
    ("4-6%", 4.0, 6.0),
    ("6-8%", 6.0, 8.0),
    ("8-10%", 8.0, 10.0),
    ("10%+", 10.0, math.inf),
)


@dataclass(frozen=True)
class LocatedListing:
    """A listing paired with the location parsed from its address."""
    listing: Listing
    location: Location


def passes_hard_rules(listing: Listing, min_price: float = HARD_MIN_PRICE) -> bool:
    """Non-negotiable validity: price floor, positive beds and baths."""
    if listing.price is None or listing.price < min_price:
        return False
    if listing.beds is None or listing.beds <= 0:
        return False
    if listing.baths is None or listing.baths <= 0:
        return False
    return True


def valid_universe(
    listings: Iterable[Listing],
    min_price: float = HARD_MIN_PRICE,
    market: MarketConfig = DEFAULT_MARKET,
) -> list[LocatedListing]:
    """Hard-rule-passing listings with their parsed locations."""
    return [
        LocatedListing(listing, parse_location(listing.address, market))
        for listing in listings
        if passes_hard_rules(listing, min_price)
    ]


def matches_location(location: Location, params: QueryParams) -> bool:
    if params.country != ANY and location.country != params.country:
        return False
    if params.province != ANY and location.province != params.province:
        return False
    if params.city != ANY and location.city != params.city:
        return False
    return True


def in_price_bucket(price: float | None, bucket: str) -> bool:
    low, high = PRICE_BUCKETS.get(bucket, (None, None))
    if low is None and high is None:
        return True
    if price is None:
        return False
    if low is not None and price < low:
        return False
    if high is not None and price > high:
        return False
    return True


def matches_filters(item: LocatedListing, params: QueryParams) -> bool:
    """All user filters, conjunctive."""
    listing = item.listing

    if params.q and params.q.lower() not in listing.address.lower():
        return False
    if not matches_location(item.location, params):
        return False
    if not in_price_bucket(listing.price, params.price_bucket):
        return False
    if params.min_cap > 0 and (listing.cap_rate is None or listing.cap_rate < params.min_cap):
        return False
    if params.min_beds is not None and (listing.beds or 0) < params.min_beds:
        return False
    if params.min_baths is not None and (listing.baths or 0) < params.min_baths:
        return False
    return True


def _null_as(value: float | None, placeholder: float) -> float:
    return placeholder if value is None else value


SORTERS: dict[str, tuple[Callable[[Listing], float], bool]] = {
    SORT_CAP: (lambda x: _null_as(x.cap_rate, NULL_DESC), True),
    SORT_PRICE_LOW: (lambda x: _null_as(x.price, NULL_ASC), False),
    SORT_NOI_HIGH: (lambda x: _null_as(x.noi, NULL_DESC), True),
}


def sort_listings(listings: Sequence[Listing], sort_by: str) -> list[Listing]:
    """Stable sort by one of the known keys; unknown keys keep input order."""
    if sort_by not in SORTERS:
        return list(listings)
    key, descending = SORTERS[sort_by]
    # sorted() stays stable with reverse=True
    return sorted(listings, key=key, reverse=descending)


def paginate(
    listings: Sequence[Listing],
    page: int,
    page_size: int,
) -> tuple[list[Listing], int, int, int]:
    """Slice one page, clamping size and page into range.

    Returns:
        Tuple of (items, page, page_size, total_pages)
    """
    page_size = max(MIN_PAGE_SIZE, min(MAX_PAGE_SIZE, page_size))
    total_pages = max(1, math.ceil(len(listings) / page_size))
    page = max(1, min(total_pages, page))
    start = (page - 1) * page_size
    return list(listings[start:start + page_size]), page, page_size, total_pages


def _city_sort_key(city: str) -> str:
    try:
        return locale.strxfrm(city.casefold())
    except (ValueError, OSError):
        return city.casefold()


def option_lists(universe: Sequence[LocatedListing]) -> tuple[list[str], list[str]]:
    """Province and city choices from the full valid set.

    Built from the hard-rule universe, never the filtered result, so picking
    one filter does not shrink the choices offered by the others.
    """
    provinces = {x.location.province for x in universe if x.location.province != UNKNOWN}
    cities = {x.location.city for x in universe if x.location.city != UNKNOWN}
    return sorted(provinces), sorted(cities, key=_city_sort_key)


def query(
    listings: Sequence[Listing],
    params: QueryParams,
    min_price: float = HARD_MIN_PRICE,
    market: MarketConfig = DEFAULT_MARKET,
) -> QueryResult:
    """Filter, sort and paginate listings.

    Args:
        listings: Canonical listing set (read-only)
        params: Filters, sort key and pagination
        min_price: Hard-rule price floor
        market: Region table used to parse addresses

    Returns:
        One page of results with totals and full dropdown options
    """
    universe = valid_universe(listings, min_price, market)
    province_options, city_options = option_lists(universe)

    matched = [x.listing for x in universe if matches_filters(x, params)]
    ordered = sort_listings(matched, params.sort_by)
    items, page, page_size, total_pages = paginate(ordered, params.page, params.page_size)

    log.debug(
        "query_executed",
        universe=len(universe),
        matched=len(matched),
        page=page,
        sort_by=params.sort_by,
    )
    return QueryResult(
        items=items,
        total=len(matched),
        total_pages=total_pages,
        page=page,
        page_size=page_size,
        province_options=province_options,
        city_options=city_options,
    )


def _average(values: Iterable[float | None]) -> float | None:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)


def market_summary(
    listings: Sequence[Listing],
    params: QueryParams,
    min_price: float = HARD_MIN_PRICE,
    market: MarketConfig = DEFAULT_MARKET,
) -> MarketSummary:
    """Count and averages over the valid, location-filtered set."""
    located = [
        x.listing for x in valid_universe(listings, min_price, market)
        if matches_location(x.location, params)
    ]
    return MarketSummary(
        count=len(located),
        avg_cap_rate=_average(x.cap_rate for x in located),
        avg_price=_average(x.price for x in located),
        avg_rent=_average(x.est_rent for x in located),
    )


def cap_rate_distribution(listings: Iterable[Listing]) -> dict[str, int]:
    """Count listings per cap-rate band; null or negative rates are skipped."""
    counts = {label: 0 for label, _, _ in CAP_RATE_BUCKETS}
    for listing in listings:
        if listing.cap_rate is None:
            continue
        for label, low, high in CAP_RATE_BUCKETS:
            if low <= listing.cap_rate < high:
                counts[label] += 1
                break
    return counts
