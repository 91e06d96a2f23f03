"""Query request/response models.

``QueryParams`` parses raw request parameters (strings, possibly junk) into
typed filters. Bad values are defaulted, never rejected.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

from src.core.coercion import to_number, to_text
from src.domain.models.listing import Listing

ANY = "any"

# bucket -> inclusive (low, high); None means unbounded
PRICE_BUCKETS: dict[str, tuple[float | None, float | None]] = {
    "any": (None, None),
    "200-500": (200_000.0, 500_000.0),
    "500-1000": (500_000.0, 1_000_000.0),
    "1000+": (1_000_000.0, None),
}

SORT_CAP = "cap"
SORT_PRICE_LOW = "priceLow"
SORT_NOI_HIGH = "noiHigh"
SORT_KEYS: tuple[str, ...] = (SORT_CAP, SORT_PRICE_LOW, SORT_NOI_HIGH)

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 200
DEFAULT_PAGE_SIZE = 50


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class QueryParams(_CamelModel):
    """User filters, sort and pagination for a listing query."""

    q: str = ""
    country: str = ANY
    province: str = ANY
    city: str = ANY
    price_bucket: str = ANY
    min_cap: float = 0.0
    sort_by: str = SORT_CAP
    min_beds: float | None = None
    min_baths: float | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @field_validator("q", mode="before")
    @classmethod
    def parse_text(cls, v: Any) -> str:
        return to_text(v)

    @field_validator("country", "province", "city", mode="before")
    @classmethod
    def parse_location_choice(cls, v: Any) -> str:
        return to_text(v) or ANY

    @field_validator("price_bucket", mode="before")
    @classmethod
    def parse_price_bucket(cls, v: Any) -> str:
        text = to_text(v)
        return text if text in PRICE_BUCKETS else ANY

    @field_validator("sort_by", mode="before")
    @classmethod
    def parse_sort(cls, v: Any) -> str:
        # Unknown keys are kept; the engine leaves order untouched for them
        return to_text(v) or SORT_CAP

    @field_validator("min_cap", mode="before")
    @classmethod
    def parse_min_cap(cls, v: Any) -> float:
        number = to_number(v)
        return number if number is not None else 0.0

    @field_validator("min_beds", "min_baths", mode="before")
    @classmethod
    def parse_minimum(cls, v: Any) -> float | None:
        if to_text(v).lower() in ("", ANY):
            return None
        return to_number(v)

    @field_validator("page", "page_size", mode="before")
    @classmethod
    def parse_int(cls, v: Any, info: ValidationInfo) -> int:
        number = to_number(v)
        if number is None:
            return cls.model_fields[info.field_name].default
        return int(math.floor(number))

    @classmethod
    def from_request(cls, params: Mapping[str, Any] | None) -> QueryParams:
        """Build from raw request parameters, ignoring unknown keys."""
        known = {
            key: value
            for key, value in (params or {}).items()
            if key in _REQUEST_KEYS
        }
        return cls.model_validate(known)


_REQUEST_KEYS = frozenset(
    name for field_name, info in QueryParams.model_fields.items()
    for name in (field_name, info.alias)
    if name
)


class QueryResult(_CamelModel):
    """One page of a filtered, sorted listing query."""

    items: list[Listing] = Field(default_factory=list)
    total: int = 0
    total_pages: int = 1
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    province_options: list[str] = Field(default_factory=list)
    city_options: list[str] = Field(default_factory=list)


class MarketSummary(_CamelModel):
    """Averages over the hard-rule-passing, location-filtered set."""

    count: int = 0
    avg_cap_rate: float | None = None
    avg_price: float | None = None
    avg_rent: float | None = None
