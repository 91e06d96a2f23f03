"""Unit tests for src.services.page_extractor module."""

import pytest
import requests
from src.core.exceptions import ExtractionError
from src.services.page_extractor import (
    extract_candidate_links,
    extract_from_html,
    fetch_and_extract,
    fetch_html,
    guess_address,
    guess_price,
    search_json,
)

JSONLD_PAGE = """
<html><head>
<script type="application/ld+json">
{"@context": "https://schema.org", "@graph": [
  {"@type": "BreadcrumbList", "itemListElement": []},
  {"@type": "SingleFamilyResidence",
   "numberOfBedrooms": 3,
   "numberOfBathroomsTotal": "2",
   "floorSize": {"@type": "QuantitativeValue", "value": "1,480", "unitCode": "FTK"},
   "address": {"streetAddress": "4521 Fraser St", "addressLocality": "Vancouver",
               "addressRegion": "BC", "postalCode": "V5V 4G8"},
   "offers": {"@type": "Offer", "price": "1299000", "priceCurrency": "CAD"}}
]}
</script>
</head><body></body></html>
"""

NEXT_DATA_PAGE = """
<html><head><title>Listing</title></head><body>
<script id="__NEXT_DATA__" type="application/json">
{"props": {"pageProps": {"listing": {"details": {"listPrice": "$749,000",
  "bedroomsTotal": 2, "bathroomsTotal": 2, "livingArea": {"value": 910},
  "fullAddress": "1503-1238 Seymour St, Vancouver, BC"}}}}}
</script>
</body></html>
"""

WINDOW_STATE_PAGE = """
<html><body>
<script>window.__INITIAL_STATE__ = {"property": {"price": 550000, "beds": 1, "baths": 1}}; var x = 1;</script>
</body></html>
"""

META_PAGE = """
<html><head>
<meta property="og:title" content="3390 Kingsway, Vancouver, BC | For Sale $899,900">
<title>Home for sale - Example Realty</title>
</head><body></body></html>
"""


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code


class FakeSession:
    """Records requests and returns a canned response or raises."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


class TestExtractFromHtml:
    """Tests for per-source extraction."""

    def test_jsonld(self):
        result = extract_from_html(JSONLD_PAGE, url="https://example.com/a")
        assert result.price == 1_299_000
        assert result.beds == 3
        assert result.baths == 2
        assert result.sqft == 1480
        assert result.address == "4521 Fraser St, Vancouver, BC, V5V 4G8"
        assert set(result.sources.values()) == {"jsonld"}
        assert result.notes == []
        assert result.url == "https://example.com/a"

    def test_next_data(self):
        result = extract_from_html(NEXT_DATA_PAGE)
        assert result.price == 749_000
        assert result.beds == 2
        assert result.sqft == 910
        assert result.address == "1503-1238 Seymour St, Vancouver, BC"
        assert result.sources["price"] == "hydration"

    def test_window_state(self):
        result = extract_from_html(WINDOW_STATE_PAGE)
        assert result.price == 550_000
        assert result.beds == 1
        assert result.sources["baths"] == "hydration"
        assert result.address is None
        assert result.notes == ["not found: sqft, address"]

    def test_meta_fallback(self):
        result = extract_from_html(META_PAGE)
        assert result.price == 899_900
        assert result.address == "3390 Kingsway, Vancouver, BC"
        assert result.sources["address"] == "meta"
        assert result.beds is None

    def test_earlier_source_wins(self):
        """JSON-LD values are kept when hydration JSON disagrees."""
        html = JSONLD_PAGE.replace("</body>", NEXT_DATA_PAGE.split("<body>")[1])
        result = extract_from_html(html)
        assert result.price == 1_299_000
        assert result.sources["price"] == "jsonld"

    def test_empty_page(self):
        result = extract_from_html("<html></html>")
        assert result.is_empty
        assert result.notes == ["not found: price, beds, baths, sqft, address"]

    def test_malformed_jsonld_ignored(self):
        html = '<script type="application/ld+json">{not json</script>' + META_PAGE
        assert extract_from_html(html).price == 899_900


class TestSearchJson:
    """Tests for the breadth-first JSON search."""

    def test_shallowest_value_wins(self):
        data = {"a": {"b": {"price": 2}}, "price": 1}
        assert search_json(data)["price"] == 1

    def test_skips_unusable_values(self):
        data = {"price": None, "items": [{"price": "contact us"}, {"price": "$400,000"}]}
        assert search_json(data)["price"] == 400_000

    def test_deep_nesting(self):
        data = {"price": None}
        node = data
        for _ in range(5000):
            node["child"] = {}
            node = node["child"]
        node["beds"] = 4
        assert search_json(data)["beds"] == 4

    def test_cycles_terminate(self):
        data = {"listing": {}}
        data["listing"]["self"] = data
        data["listing"]["baths"] = 2
        assert search_json(data) == {"baths": 2}

    def test_zero_price_rejected(self):
        assert "price" not in search_json({"price": 0})


class TestTextHeuristics:
    """Tests for meta-tag text heuristics."""

    def test_guess_price(self):
        assert guess_price("Now only $1,150,000!") == 1_150_000
        assert guess_price("Listed at $ 489000") == 489_000
        assert guess_price("3 beds, $12") is None

    def test_guess_address(self):
        assert guess_address("Condo | 88 Pacific Blvd, Vancouver, BC") == "88 Pacific Blvd, Vancouver, BC"
        assert guess_address("Beautiful home in Surrey") is None


class TestFetch:
    """Tests for fetching with an injected session."""

    def test_fetch_html(self):
        session = FakeSession(FakeResponse("<html></html>"))
        assert fetch_html("https://example.com", session=session, timeout=3) == "<html></html>"
        assert session.calls[0]["timeout"] == 3
        assert "Mozilla" in session.calls[0]["headers"]["User-Agent"]

    def test_fetch_without_session_uses_requests_get(self, monkeypatch):
        """No Session object is created when none is passed in."""
        fake = FakeSession(FakeResponse("<html>ok</html>"))
        monkeypatch.setattr(requests, "get", fake.get)
        monkeypatch.setattr(requests, "Session", None)
        assert fetch_html("https://example.com/p", timeout=2) == "<html>ok</html>"
        assert fake.calls[0]["url"] == "https://example.com/p"
        assert fake.calls[0]["timeout"] == 2

    def test_fetch_http_error(self):
        session = FakeSession(FakeResponse("blocked", status_code=403))
        with pytest.raises(ExtractionError, match="403"):
            fetch_html("https://example.com", session=session)

    def test_fetch_network_error(self):
        session = FakeSession(error=requests.ConnectionError("refused"))
        with pytest.raises(ExtractionError, match="refused"):
            fetch_html("https://example.com", session=session)

    def test_fetch_and_extract_never_raises(self):
        session = FakeSession(error=requests.Timeout("timed out"))
        result = fetch_and_extract("https://example.com/x", session=session)
        assert result.is_empty
        assert result.url == "https://example.com/x"
        assert "timed out" in result.notes[0]

    def test_fetch_and_extract(self):
        session = FakeSession(FakeResponse(JSONLD_PAGE))
        result = fetch_and_extract("https://example.com/x", session=session)
        assert result.beds == 3


class TestCandidateLinks:
    """Tests for listing link discovery on result pages."""

    def test_finds_listing_links(self):
        html = """
        <ul>
          <li><a href="/listing/123">View</a> <span>$599,000 - 2 bd</span></li>
          <li><a href="/listing/123">Same</a></li>
          <li><a href="https://other.example/property/9?x=1">View</a></li>
          <li><a href="/about">About</a></li>
        </ul>
        """
        links = extract_candidate_links(html, base_url="https://example.com/search")
        assert [link.url for link in links] == [
            "https://example.com/listing/123",
            "https://other.example/property/9?x=1",
        ]
        assert "$599,000" in links[0].text

    def test_text_capped(self):
        html = '<div><a href="/details/1">x</a>' + "word " * 300 + "</div>"
        links = extract_candidate_links(html)
        assert len(links[0].text) == 500

