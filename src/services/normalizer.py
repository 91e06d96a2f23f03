"""Listing normalization service.

Maps arbitrary source rows (spreadsheet rows, uploaded CSVs, scraped
extractions) onto the canonical ``Listing`` and fills in estimated rent, NOI
and cap rate when the source does not carry them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from src.core.coercion import pick_first, round_half_up, to_number, to_text
from src.core.logging import get_logger
from src.core.settings import get_settings
from src.domain.models.listing import FOR_SALE, RENTAL, Listing

log = get_logger(__name__)

# Canonical field -> accepted source column names, in priority order
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "address": ("Location", "Address", "address", "ADDRESS", "Full Address", "Property Address"),
    "price": ("Price_Listing", "Price", "price", "Purchase Price"),
    "beds": ("Bed", "Beds", "beds", "Bedrooms", "bedrooms"),
    "baths": ("Bath", "Baths", "baths", "Bathrooms", "bathrooms"),
    "sqft": ("Property_Sqft", "Sqft", "sqft", "Square Feet", "squareFeet"),
    "rent": ("Rent", "rent", "estimatedRent", "Estimated Rent", "Est Rent"),
    "noi": ("NOI", "noi", "NOI/yr", "NOI Yearly", "noiYear"),
    "cap_rate": ("Cap Rate", "capRate", "cap_rate", "CapRate"),
    "url": ("Listing_URL", "ListingURL", "URL", "Url", "url", "Link", "link"),
}

LEASE_COLUMNS: tuple[str, ...] = (
    "LeaseAmount", "leaseAmount", "MonthlyRent", "monthlyRent",
)
PROPERTY_TYPE_COLUMNS: tuple[str, ...] = ("Property_Type", "PropertyType", "type")


@dataclass(frozen=True)
class EstimateConfig:
    """Fallback estimates used when a row lacks rent / NOI."""
    rent_base: float = 1200.0
    rent_per_bed: float = 700.0
    fallback_beds: float = 2.0
    expense_ratio: float = 0.35

    @classmethod
    def from_settings(cls) -> EstimateConfig:
        settings = get_settings()
        return cls(
            rent_base=settings.rent_base,
            rent_per_bed=settings.rent_per_bed,
            fallback_beds=settings.rent_fallback_beds,
            expense_ratio=settings.expense_ratio,
        )


def resolve_field(row: Mapping[str, Any], field_name: str) -> Any:
    """First non-blank value among the aliases of ``field_name``."""
    return pick_first(row, FIELD_ALIASES[field_name])


def estimate_monthly_rent(beds: float | None, config: EstimateConfig) -> float:
    b = config.fallback_beds if beds is None else beds
    return round_half_up(max(0.0, config.rent_base + b * config.rent_per_bed))


def estimate_annual_noi(monthly_rent: float, config: EstimateConfig) -> float:
    return round_half_up(monthly_rent * 12.0 * (1.0 - config.expense_ratio))


def calc_cap_rate(noi_annual: float | None, price: float | None) -> float | None:
    """Cap rate in percent rounded to 2 decimals, None without NOI or price."""
    if not noi_annual or not price or price <= 0:
        return None
    return round_half_up((noi_annual / price) * 10000.0) / 100.0


def extract_url(row: Mapping[str, Any]) -> str | None:
    """First absolute http(s) link among the known URL columns."""
    for alias in FIELD_ALIASES["url"]:
        text = to_text(row.get(alias))
        if text.startswith(("http://", "https://")):
            return text
    return None


def classify_listing_type(row: Mapping[str, Any]) -> str:
    """Decide whether a row is a rental or a for-sale listing."""
    type_text = to_text(pick_first(row, PROPERTY_TYPE_COLUMNS)).lower()
    has_lease_amount = pick_first(row, LEASE_COLUMNS) is not None
    if (
        has_lease_amount
        or to_text(row.get("LeaseAmountFrequency"))
        or any(word in type_text for word in ("rent", "lease"))
    ):
        return RENTAL
    return FOR_SALE


def normalize_row(
    raw: Mapping[str, Any],
    index: int,
    config: EstimateConfig | None = None,
) -> Listing | None:
    """Build a canonical listing from one source row.

    Args:
        raw: Source row keyed by column name
        index: Row position, used as the listing id
        config: Fallback estimate parameters (defaults from settings)

    Returns:
        The listing, or None for a junk row with no address, price, beds,
        baths or sqft
    """
    config = config or EstimateConfig.from_settings()

    address = to_text(resolve_field(raw, "address"))
    price = to_number(resolve_field(raw, "price"))
    beds = to_number(resolve_field(raw, "beds"))
    baths = to_number(resolve_field(raw, "baths"))
    sqft = to_number(resolve_field(raw, "sqft"))

    file_rent = to_number(resolve_field(raw, "rent"))
    est_rent = file_rent if file_rent is not None else estimate_monthly_rent(beds, config)

    file_noi = to_number(resolve_field(raw, "noi"))
    noi = file_noi if file_noi is not None else estimate_annual_noi(est_rent, config)

    file_cap = to_number(resolve_field(raw, "cap_rate"))
    cap_rate = file_cap if file_cap is not None else calc_cap_rate(noi, price)

    listing = Listing(
        id=index,
        address=address,
        price=price,
        beds=beds,
        baths=baths,
        sqft=sqft,
        est_rent=est_rent,
        noi=noi,
        cap_rate=cap_rate,
        url=extract_url(raw),
        listing_type=classify_listing_type(raw),
        raw=dict(raw),
    )
    if listing.is_empty:
        return None
    return listing


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    config: EstimateConfig | None = None,
) -> list[Listing]:
    """Normalize rows in order, dropping junk rows.

    Ids are source row positions, so they stay stable within one load even
    when junk rows are skipped.
    """
    config = config or EstimateConfig.from_settings()
    listings = []
    dropped = 0
    for index, row in enumerate(rows):
        listing = normalize_row(row, index, config)
        if listing is None:
            dropped += 1
            continue
        listings.append(listing)

    if dropped:
        log.debug("junk_rows_dropped", count=dropped)
    return listings
