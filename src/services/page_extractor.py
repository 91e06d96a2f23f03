"""Single listing page extraction.

Pulls price / beds / baths / sqft / address out of one listing page. Sources
are tried in a fixed order and the first non-null value wins per field:

1. JSON-LD structured data (``<script type="application/ld+json">``)
2. Framework hydration JSON (``__NEXT_DATA__``, ``window.__INITIAL_STATE__``...)
3. Meta tags and ``<title>`` text (price and address only)

A miss on one field never fails the others, and a failed fetch yields an
all-null result with a note instead of an exception.
"""

from __future__ import annotations

import json
import re
from collections import deque
from collections.abc import Iterator
from typing import Any
from urllib.parse import urljoin

import requests
from bs4 import BeautifulSoup
from pydantic import BaseModel, Field

from src.core.coercion import to_number, to_text
from src.core.exceptions import ExtractionError
from src.core.location import looks_like_street
from src.core.logging import get_logger
from src.core.settings import get_settings

log = get_logger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

FIELDS: tuple[str, ...] = ("price", "beds", "baths", "sqft", "address")

SOURCE_JSONLD = "jsonld"
SOURCE_HYDRATION = "hydration"
SOURCE_META = "meta"

LISTING_LD_TYPES = frozenset({
    "singlefamilyresidence", "residence", "house", "apartment", "apartmentcomplex",
    "accommodation", "place", "product", "offer", "realestatelisting", "condominium",
})

# Hydration JSON keys, compared case-insensitively
HYDRATION_KEYS: dict[str, frozenset[str]] = {
    "price": frozenset({"price", "listprice", "listingprice", "askingprice", "purchaseprice"}),
    "beds": frozenset({"beds", "bedrooms", "numberofbedrooms", "bedroomcount", "bedroomstotal"}),
    "baths": frozenset({"baths", "bathrooms", "numberofbathrooms", "bathroomcount",
                        "bathroomstotal", "bathroomtotal"}),
    "sqft": frozenset({"sqft", "squarefeet", "livingarea", "floorsize", "sizeinterior",
                       "livingareavalue"}),
    "address": frozenset({"address", "fulladdress", "formattedaddress", "addresstext"}),
}

ADDRESS_PARTS: tuple[tuple[str, ...], ...] = (
    ("streetAddress", "streetLine", "street", "line1", "addressLine1"),
    ("addressLocality", "city", "locality"),
    ("addressRegion", "province", "state", "stateCode", "region"),
    ("postalCode", "zip", "zipCode"),
)

HYDRATION_SCRIPT_IDS: tuple[str, ...] = ("__NEXT_DATA__", "__NUXT_DATA__", "__APOLLO_STATE__")
_WINDOW_STATE_RE = re.compile(r"window\.(__[A-Z_]+__)\s*=\s*")

PRICE_TEXT_RE = re.compile(r"\$\s*([0-9]{1,3}(?:,[0-9]{3})+|[0-9]{4,})(?:\.[0-9]+)?")
_TITLE_SPLIT_RE = re.compile(r"\s+[|–—-]\s+")

LISTING_HREF_MARKERS: tuple[str, ...] = (
    "/listing", "/property", "/details", "/mls", "ListingId=", "listingId=",
)


class ExtractionResult(BaseModel):
    """Listing fields recovered from one page, with provenance."""

    url: str | None = None
    price: float | None = None
    beds: float | None = None
    baths: float | None = None
    sqft: float | None = None
    address: str | None = None
    sources: dict[str, str | None] = Field(default_factory=lambda: {f: None for f in FIELDS})
    notes: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return all(getattr(self, f) is None for f in FIELDS)

    def as_row(self) -> dict[str, Any]:
        """Row keyed by the normalizer's column aliases."""
        return {
            "address": self.address or "",
            "price": self.price,
            "beds": self.beds,
            "baths": self.baths,
            "sqft": self.sqft,
            "url": self.url,
        }


class CandidateLink(BaseModel):
    url: str
    text: str = ""


# -------------------------------------------------------------
# Value helpers
# -------------------------------------------------------------

def _numeric(value: Any) -> float | None:
    """Number from a scalar or a {"value": ...} / {"amount": ...} wrapper."""
    if isinstance(value, dict):
        for key in ("value", "amount", "price"):
            if key in value:
                return _numeric(value[key])
        return None
    if isinstance(value, (list, tuple)):
        return None
    return to_number(value)


def _compose_address(value: Any) -> str | None:
    if isinstance(value, str):
        return to_text(value) or None
    if not isinstance(value, dict):
        return None
    parts = []
    for aliases in ADDRESS_PARTS:
        for alias in aliases:
            text = to_text(value.get(alias))
            if text:
                parts.append(text)
                break
    return ", ".join(parts) or None


def _coerce_field(field_name: str, value: Any) -> float | str | None:
    if field_name == "address":
        return _compose_address(value)
    number = _numeric(value)
    if number is None or number < 0:
        return None
    if field_name in ("price", "sqft") and number == 0:
        return None
    return number


# -------------------------------------------------------------
# JSON-LD
# -------------------------------------------------------------

def _load_json(text: str | None) -> Any:
    if not text:
        return None
    try:
        return json.loads(text)
    except ValueError:
        return None


def _ld_types(obj: dict[str, Any]) -> set[str]:
    raw = obj.get("@type")
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        return set()
    return {str(t).lower() for t in raw}


def _ld_objects(data: Any) -> Iterator[dict[str, Any]]:
    """Flatten JSON-LD blocks: lists, @graph members and offered items."""
    queue = deque([data])
    seen: set[int] = set()
    while queue:
        node = queue.popleft()
        if id(node) in seen:
            continue
        seen.add(id(node))
        if isinstance(node, list):
            queue.extend(node)
        elif isinstance(node, dict):
            yield node
            for key in ("@graph", "itemOffered", "mainEntity", "about"):
                if key in node:
                    queue.append(node[key])


def _is_listing_like(obj: dict[str, Any]) -> bool:
    return bool(_ld_types(obj) & LISTING_LD_TYPES) or "offers" in obj or "address" in obj


def _from_ld_object(obj: dict[str, Any]) -> dict[str, Any]:
    found: dict[str, Any] = {}

    offers = obj.get("offers")
    if isinstance(offers, list):
        offers = next((o for o in offers if isinstance(o, dict)), None)
    if isinstance(offers, dict):
        for key in ("price", "lowPrice", "highPrice"):
            price = _coerce_field("price", offers.get(key))
            if price is not None:
                found["price"] = price
                break
    if "price" not in found:
        price = _coerce_field("price", obj.get("price"))
        if price is not None:
            found["price"] = price

    for field_name, keys in (
        ("beds", ("numberOfBedrooms", "numberOfRooms")),
        ("baths", ("numberOfBathroomsTotal", "numberOfBathrooms", "numberOfFullBathrooms")),
        ("sqft", ("floorSize",)),
        ("address", ("address",)),
    ):
        for key in keys:
            value = _coerce_field(field_name, obj.get(key))
            if value is not None:
                found[field_name] = value
                break
    return found


def extract_jsonld(soup: BeautifulSoup) -> dict[str, Any]:
    """Fields from listing-like JSON-LD objects, first object wins per field."""
    out: dict[str, Any] = {}
    for tag in soup.find_all("script", attrs={"type": "application/ld+json"}):
        data = _load_json(tag.string or tag.get_text())
        for obj in _ld_objects(data):
            if not _is_listing_like(obj):
                continue
            for field_name, value in _from_ld_object(obj).items():
                out.setdefault(field_name, value)
    return out


# -------------------------------------------------------------
# Hydration JSON
# -------------------------------------------------------------

def _hydration_blobs(soup: BeautifulSoup) -> Iterator[Any]:
    for script_id in HYDRATION_SCRIPT_IDS:
        tag = soup.find("script", id=script_id)
        if tag is not None:
            data = _load_json(tag.string or tag.get_text())
            if data is not None:
                yield data

    decoder = json.JSONDecoder()
    for tag in soup.find_all("script"):
        text = tag.string or ""
        for match in _WINDOW_STATE_RE.finditer(text):
            try:
                data, _ = decoder.raw_decode(text, match.end())
            except ValueError:
                continue
            yield data


def search_json(data: Any, keys: dict[str, frozenset[str]] = HYDRATION_KEYS) -> dict[str, Any]:
    """Breadth-first search of a JSON graph for the first usable value per field.

    Traversal uses an explicit queue and a visited set, so depth is bounded
    by memory rather than the call stack and cyclic graphs terminate.
    """
    found: dict[str, Any] = {}
    queue = deque([data])
    visited: set[int] = set()

    while queue and len(found) < len(keys):
        node = queue.popleft()
        if id(node) in visited:
            continue
        visited.add(id(node))

        if isinstance(node, dict):
            for key, value in node.items():
                lowered = str(key).lower()
                for field_name, aliases in keys.items():
                    if field_name in found or lowered not in aliases:
                        continue
                    coerced = _coerce_field(field_name, value)
                    if coerced is not None:
                        found[field_name] = coerced
                if isinstance(value, (dict, list)):
                    queue.append(value)
        elif isinstance(node, list):
            queue.extend(v for v in node if isinstance(v, (dict, list)))

    return found


def extract_hydration(soup: BeautifulSoup) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for blob in _hydration_blobs(soup):
        for field_name, value in search_json(blob).items():
            out.setdefault(field_name, value)
    return out


# -------------------------------------------------------------
# Meta tags
# -------------------------------------------------------------

def _meta_content(soup: BeautifulSoup, name: str) -> str:
    tag = soup.find("meta", attrs={"property": name}) or soup.find("meta", attrs={"name": name})
    return to_text(tag.get("content")) if tag else ""


def guess_price(text: str) -> float | None:
    match = PRICE_TEXT_RE.search(text or "")
    return to_number(match.group(0)) if match else None


def guess_address(text: str) -> str | None:
    """First title segment that reads like "123 Main St, City, PR"."""
    for segment in _TITLE_SPLIT_RE.split(text or ""):
        segment = segment.strip()
        if "," in segment and looks_like_street(segment.split(",")[0]):
            return segment
    return None


def extract_meta(soup: BeautifulSoup) -> dict[str, Any]:
    title_tag = soup.find("title")
    texts = [
        _meta_content(soup, "og:title"),
        _meta_content(soup, "og:description"),
        to_text(title_tag.get_text()) if title_tag else "",
    ]
    out: dict[str, Any] = {}
    for text in texts:
        if "price" not in out:
            price = guess_price(text)
            if price:
                out["price"] = price
        if "address" not in out:
            address = guess_address(text)
            if address:
                out["address"] = address
    return out


# -------------------------------------------------------------
# Public API
# -------------------------------------------------------------

def extract_from_html(html: str, url: str | None = None) -> ExtractionResult:
    """Extract listing fields from one page of HTML.

    Args:
        html: Page markup
        url: Page URL, carried into the result

    Returns:
        ExtractionResult with per-field sources; missing fields stay None
    """
    soup = BeautifulSoup(html or "", "html.parser")

    values: dict[str, Any] = {}
    sources: dict[str, str | None] = {f: None for f in FIELDS}
    for source, extractor in (
        (SOURCE_JSONLD, extract_jsonld),
        (SOURCE_HYDRATION, extract_hydration),
        (SOURCE_META, extract_meta),
    ):
        if all(sources.values()):
            break
        for field_name, value in extractor(soup).items():
            if sources[field_name] is None:
                values[field_name] = value
                sources[field_name] = source

    notes = []
    missing = [f for f in FIELDS if sources[f] is None]
    if missing:
        notes.append(f"not found: {', '.join(missing)}")

    return ExtractionResult(url=url, sources=sources, notes=notes, **values)


def fetch_html(
    url: str,
    session: requests.Session | None = None,
    timeout: float | None = None,
) -> str:
    """Single GET with a bounded timeout, no retry.

    Raises:
        ExtractionError: On network failure or a non-2xx status
    """
    timeout = timeout or get_settings().fetch_timeout_seconds
    get = session.get if session is not None else requests.get
    try:
        response = get(
            url,
            headers={"User-Agent": USER_AGENT, "Accept-Language": "en-CA,en;q=0.8"},
            timeout=timeout,
        )
    except requests.RequestException as e:
        raise ExtractionError(f"fetch failed: {e}") from e

    if not 200 <= response.status_code < 300:
        raise ExtractionError(f"fetch returned HTTP {response.status_code}")
    return response.text


def fetch_and_extract(
    url: str,
    session: requests.Session | None = None,
    timeout: float | None = None,
) -> ExtractionResult:
    """Fetch a listing page and extract its fields.

    Never raises for fetch problems: the caller gets an all-null result with
    a note and falls back to manual input.
    """
    try:
        html = fetch_html(url, session=session, timeout=timeout)
    except ExtractionError as e:
        log.warning("page_fetch_failed", url=url, error=str(e))
        return ExtractionResult(url=url, notes=[str(e)])

    log.info("page_fetched", url=url, html_length=len(html))
    result = extract_from_html(html, url=url)
    log.info("page_extracted", url=url, sources=result.sources)
    return result


def extract_candidate_links(html: str, base_url: str = "") -> list[CandidateLink]:
    """Listing-like links on a search results page, de-duplicated.

    Each link carries the text of its enclosing card (whitespace collapsed,
    at most 500 characters).
    """
    soup = BeautifulSoup(html or "", "html.parser")
    seen: set[str] = set()
    links: list[CandidateLink] = []

    for anchor in soup.find_all("a", href=True):
        href = anchor["href"]
        if not any(marker in href for marker in LISTING_HREF_MARKERS):
            continue
        absolute = urljoin(base_url, href)
        if absolute in seen:
            continue
        seen.add(absolute)

        card = anchor.find_parent(["article", "li", "div"]) or anchor.parent or anchor
        text = " ".join(card.get_text(" ").split()) or " ".join(anchor.get_text(" ").split())
        links.append(CandidateLink(url=absolute, text=text[:500]))

    return links
