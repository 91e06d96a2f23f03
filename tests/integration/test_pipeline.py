"""Integration tests for the listing pipeline.

Tests the complete flow from spreadsheet -> store -> query -> metrics -> export.
"""

import os
import sys

import pandas as pd
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from src.domain.models.assumptions import Assumptions
from src.domain.models.listing import Listing
from src.services import endpoints
from src.services.evaluator import ListingEvaluator
from src.services.exporter import to_records
from src.services.listing_store import ListingStore


class TestListingPipeline:
    """Integration tests for the listing pipeline."""

    @pytest.fixture
    def big_market(self, tmp_path):
        """237 valid listings across two cities plus rows that fail the hard rules."""
        rows = []
        for i in range(237):
            city = "Surrey" if i % 2 else "Burnaby"
            rows.append({
                "Location": f"{100 + i} Main St, {city}, BC",
                "Price_Listing": f"${300_000 + i * 1_000:,}",
                "Bed": 1 + i % 4,
                "Bath": 1 + i % 2,
                "Property_Sqft": f"{600 + i} sqft",
            })
        rows.append({"Location": "1 Cheap Rd, Surrey, BC", "Price_Listing": "150000", "Bed": 2,
                     "Bath": 1, "Property_Sqft": ""})
        rows.append({"Location": "", "Price_Listing": "", "Bed": "", "Bath": "", "Property_Sqft": ""})
        path = tmp_path / "market.xlsx"
        pd.DataFrame(rows).to_excel(path, index=False, engine="openpyxl")
        return ListingStore(path)

    def test_paging_through_results(self, big_market):
        """Every valid listing shows up exactly once across pages."""
        seen = []
        for page in range(1, 6):
            body = endpoints.find_good_roi(big_market, {"page": str(page), "pageSize": "50"}).body
            assert body["total"] == 237
            assert body["totalPages"] == 5
            seen.extend(x["id"] for x in body["items"])
        assert len(seen) == 237
        assert len(set(seen)) == 237
        assert 237 not in seen

    def test_sorted_by_cap_rate(self, big_market):
        body = endpoints.find_good_roi(big_market, {"pageSize": "200"}).body
        caps = [x["capRate"] for x in body["items"]]
        assert caps == sorted(caps, reverse=True)

    def test_city_filter_keeps_options(self, big_market):
        body = endpoints.find_good_roi(big_market, {"city": "Surrey"}).body
        assert body["total"] == 118
        assert body["cityOptions"] == ["Burnaby", "Surrey"]
        assert all("Surrey" in x["address"] for x in body["items"])

    def test_metrics_for_a_page(self, big_market):
        body = endpoints.find_good_roi(big_market, {"sortBy": "priceLow", "pageSize": "10"}).body
        listings = [Listing.model_validate(x) for x in body["items"]]
        assert listings[0].price == 300_000

        analyzed = ListingEvaluator(Assumptions(down_payment_pct=25, amort_years=25)).evaluate_many(listings)
        first = analyzed[0].metrics
        assert first.loan_amount == pytest.approx(225_000)
        assert first.cash_on_cash_pct == pytest.approx(first.cash_flow_monthly * 12 / 75_000 * 100)

        records = to_records(analyzed)
        assert records[0]["city"] == "Burnaby"
        assert records[0]["loanAmount"] == pytest.approx(225_000)

    def test_store_listings_not_mutated_by_queries(self, big_market):
        before = [x.model_dump() for x in big_market.get_all_listings()]
        endpoints.find_good_roi(big_market, {"sortBy": "noiHigh", "minCap": "4"})
        endpoints.market_summary(big_market, {"city": "Surrey"})
        after = [x.model_dump() for x in big_market.get_all_listings()]
        assert before == after
        assert big_market.load_count == 1
