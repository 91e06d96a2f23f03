"""Unit tests for src.core.location module."""

import pytest
from src.core.exceptions import ConfigurationError
from src.core.location import CANADA, MarketConfig, get_market, looks_like_street, parse_location


class TestParseLocation:
    """Tests for parse_location."""

    def test_street_address(self):
        loc = parse_location("60-8220 King George Blvd, Surrey, BC V3W 6E1")
        assert (loc.city, loc.province, loc.country) == ("Surrey", "BC", "Canada")

    def test_city_first(self):
        loc = parse_location("Vancouver, BC")
        assert (loc.city, loc.province, loc.country) == ("Vancouver", "BC", "Canada")

    @pytest.mark.parametrize("address", ["", None, " , , "])
    def test_empty_address(self, address):
        loc = parse_location(address)
        assert (loc.city, loc.province, loc.country) == ("Unknown", "Unknown", "Unknown")

    def test_unrecognized_province(self):
        loc = parse_location("12 Main St, Seattle, WA 98101")
        assert loc.city == "Seattle"
        assert loc.province == "Unknown"

    def test_province_is_uppercased(self):
        assert parse_location("Calgary, ab").province == "AB"

    def test_single_street_part_is_city(self):
        """A lone street line has no second part to fall back to."""
        assert parse_location("123 Main St").city == "123 Main St"


class TestMarkets:
    """Tests for market configuration."""

    def test_street_heuristic(self):
        assert looks_like_street("8220 King George")
        assert looks_like_street("Kingsway Ave")
        assert not looks_like_street("Burnaby")

    def test_get_market(self):
        assert get_market("Canada") is CANADA

    def test_unknown_market(self):
        with pytest.raises(ConfigurationError):
            get_market("Atlantis")

    def test_empty_region_table(self):
        with pytest.raises(ConfigurationError):
            MarketConfig(country="Nowhere", region_codes=())

    def test_custom_market(self):
        usa = MarketConfig(country="USA", region_codes=("WA", "OR"))
        loc = parse_location("12 Main St, Seattle, WA 98101", usa)
        assert (loc.city, loc.province, loc.country) == ("Seattle", "WA", "USA")
