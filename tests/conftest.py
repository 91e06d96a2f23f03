"""Pytest fixtures for the ROI analyzer tests."""

import os
import sys

import pandas as pd
import pytest

# Add project root to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.domain.models.listing import Listing
from src.services.normalizer import EstimateConfig


@pytest.fixture
def estimates():
    """Default fallback estimates, independent of the environment."""
    return EstimateConfig()


@pytest.fixture
def sample_rows():
    """Spreadsheet rows in the scraper's column layout."""
    return [
        {
            "Location": "60-8220 King George Blvd, Surrey, BC V3W 6E1",
            "Price_Listing": "$649,900",
            "Bed": 3,
            "Bath": 2,
            "Property_Sqft": "1,250 sqft",
            "Listing_URL": "https://example.com/listing/1",
        },
        {
            "Location": "Vancouver, BC",
            "Price_Listing": 1_250_000,
            "Bed": 4,
            "Bath": 3,
            "Property_Sqft": "",
            "Listing_URL": "",
        },
        {
            "Location": "",
            "Price_Listing": "",
            "Bed": "",
            "Bath": "",
            "Property_Sqft": "",
            "Listing_URL": "",
        },
        {
            "Location": "12 Main St, Kelowna, BC",
            "Price_Listing": "150000",
            "Bed": 2,
            "Bath": 1,
            "Property_Sqft": "800",
            "Listing_URL": "",
        },
    ]


@pytest.fixture
def make_listing():
    """Factory for listings with sensible defaults."""
    def _make(id=0, **overrides):
        data = {
            "id": id,
            "address": "100 Main St, Vancouver, BC",
            "price": 500_000.0,
            "beds": 2.0,
            "baths": 1.0,
            "est_rent": 2600.0,
            "noi": 20280.0,
            "cap_rate": 4.06,
        }
        data.update(overrides)
        return Listing(**data)
    return _make


@pytest.fixture
def listings_xlsx(tmp_path, sample_rows):
    """The sample rows written as a one-sheet workbook."""
    path = tmp_path / "listings.xlsx"
    pd.DataFrame(sample_rows).to_excel(path, index=False, engine="openpyxl")
    return path
