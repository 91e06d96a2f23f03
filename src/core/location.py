"""Heuristic address decomposition.

Splits a free-text address into city / province / country. This is a
best-effort classifier, not a geocoder: it relies on comma-separated parts and
a table of region codes for a single market.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from src.core.exceptions import ConfigurationError
from src.domain.models.listing import UNKNOWN, Location

STREET_TOKENS: tuple[str, ...] = (
    "ave", "avenue", "st", "street", "rd", "road", "blvd", "boulevard",
    "dr", "drive", "way", "lane", "ln", "pl", "place", "cres", "court", "ct",
)

_STREET_RE = re.compile(r"\b(?:" + "|".join(STREET_TOKENS) + r")\b", re.IGNORECASE)
_DIGIT_RE = re.compile(r"\d")


@dataclass(frozen=True)
class MarketConfig:
    """Country name and the region codes recognized inside addresses."""
    country: str
    region_codes: tuple[str, ...]
    _region_re: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.region_codes:
            raise ConfigurationError(f"Market '{self.country}' has no region codes")
        pattern = re.compile(
            r"\b(" + "|".join(re.escape(c) for c in self.region_codes) + r")\b",
            re.IGNORECASE,
        )
        object.__setattr__(self, "_region_re", pattern)

    def find_region(self, text: str) -> str | None:
        match = self._region_re.search(text)
        return match.group(1).upper() if match else None


CANADA = MarketConfig(
    country="Canada",
    region_codes=("BC", "AB", "SK", "MB", "ON", "QC", "NB", "NS", "NL", "PE", "NT", "NU", "YT"),
)

MARKETS: dict[str, MarketConfig] = {CANADA.country: CANADA}

DEFAULT_MARKET = CANADA


def get_market(country: str) -> MarketConfig:
    """Look up a configured market by country name."""
    try:
        return MARKETS[country]
    except KeyError:
        raise ConfigurationError(
            f"Unknown market '{country}'. Known: {', '.join(sorted(MARKETS))}"
        ) from None


def looks_like_street(part: str) -> bool:
    return bool(_DIGIT_RE.search(part) or _STREET_RE.search(part))


def parse_location(address: str | None, market: MarketConfig = DEFAULT_MARKET) -> Location:
    """Decompose an address into city, province and country.

    The province is taken from the last comma-separated part, the city from
    the second part when the first one looks like a street line, otherwise
    from the first part.

    Examples:
        "60-8220 King George Blvd, Surrey, BC V3W 6E1" -> Surrey, BC, Canada
        "Vancouver, BC" -> Vancouver, BC, Canada
    """
    parts = [p.strip() for p in (address or "").split(",")]
    parts = [p for p in parts if p]
    if not parts:
        return Location()

    province = market.find_region(parts[-1]) or UNKNOWN

    first = parts[0]
    if looks_like_street(first) and len(parts) > 1:
        city = parts[1]
    else:
        city = first

    return Location(city=city, province=province, country=market.country)
