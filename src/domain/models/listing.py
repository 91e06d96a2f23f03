"""Listing data models.

A listing is the canonical, immutable record produced from one spreadsheet
row or one scraped page. Field names are snake_case in Python and camelCase
on the wire (``est_rent`` <-> ``estRent``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

UNKNOWN = "Unknown"

FOR_SALE = "FOR SALE"
RENTAL = "RENTAL"


class Listing(BaseModel):
    """Canonical listing with fallback-estimated rent, NOI and cap rate."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: int = Field(..., ge=0, description="Row position within the load cycle")
    address: str = Field(default="", description="Raw free-text address")
    price: float | None = Field(None, description="Purchase price")
    beds: float | None = Field(None, description="Bedrooms")
    baths: float | None = Field(None, description="Bathrooms")
    sqft: float | None = Field(None, description="Interior area in square feet")
    est_rent: float | None = Field(None, description="Monthly rent, file-provided or estimated")
    noi: float | None = Field(None, description="Annual net operating income")
    cap_rate: float | None = Field(None, description="Cap rate in percent, 2 decimals")
    url: str | None = Field(None, description="Source listing URL when known")
    listing_type: str = Field(default=FOR_SALE, description="FOR SALE or RENTAL")
    raw: dict[str, Any] = Field(default_factory=dict, description="Source row, diagnostics only")

    @property
    def is_empty(self) -> bool:
        """True when the row carries no identifying or physical data."""
        return not (
            self.address
            or self.price
            or self.beds
            or self.baths
            or self.sqft
        )


class Location(BaseModel):
    """Location inferred from a listing address."""

    model_config = ConfigDict(frozen=True)

    city: str = UNKNOWN
    province: str = UNKNOWN
    country: str = UNKNOWN
