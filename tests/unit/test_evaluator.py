"""Unit tests for ListingEvaluator and result export."""

import json

import pandas as pd
import pytest
from src.domain.models.assumptions import Assumptions
from src.services.evaluator import ListingEvaluator
from src.services.exporter import ResultExporter, to_csv_bytes, to_records


class TestListingEvaluator:
    """Tests for ListingEvaluator."""

    def test_evaluate(self, make_listing):
        listing = make_listing(price=500_000, est_rent=3000, noi=None)
        analyzed = ListingEvaluator(Assumptions()).evaluate(listing)
        assert analyzed.listing is listing
        assert analyzed.location.city == "Vancouver"
        assert analyzed.metrics.effective_rent_monthly == pytest.approx(2850)

    def test_defaults_when_no_assumptions(self, make_listing):
        evaluator = ListingEvaluator()
        assert evaluator.assumptions == Assumptions()
        assert len(evaluator.evaluate_many([make_listing(0), make_listing(1)])) == 2

    def test_listing_untouched(self, make_listing):
        listing = make_listing()
        before = listing.model_dump()
        ListingEvaluator(Assumptions(down_payment_pct=50)).evaluate(listing)
        assert listing.model_dump() == before

    def test_to_row_is_flat(self, make_listing):
        row = ListingEvaluator().evaluate(make_listing()).to_row()
        assert "raw" not in row
        assert row["province"] == "BC"
        assert "monthlyMortgage" in row
        assert "capRate" in row


class TestResultExporter:
    """Tests for result export."""

    @pytest.fixture
    def analyzed(self, make_listing):
        return ListingEvaluator().evaluate_many([make_listing(0), make_listing(1, price=None)])

    def test_records(self, analyzed):
        records = to_records(analyzed)
        assert [r["id"] for r in records] == [0, 1]
        assert records[1]["monthlyMortgage"] is None

    def test_csv(self, analyzed):
        text = to_csv_bytes(analyzed).decode("utf-8")
        header = text.splitlines()[0].split(",")
        assert "estRent" in header
        assert "cashOnCashPct" in header
        assert len(text.strip().splitlines()) == 3

    def test_save_results(self, tmp_path, analyzed):
        exporter = ResultExporter(output_dir=str(tmp_path / "out"))
        path = exporter.save_results(analyzed, prefix="page", metadata={"query": {"city": "Surrey"}})
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
        assert payload["metadata"]["count"] == 2
        assert payload["metadata"]["query"] == {"city": "Surrey"}
        assert len(payload["listings"]) == 2
        assert pd.DataFrame(payload["listings"])["id"].tolist() == [0, 1]
