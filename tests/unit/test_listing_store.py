"""Unit tests for src.services.listing_store module."""

import threading

import pandas as pd
import pytest
from src.core.exceptions import DataLoadError, InvalidParameterError, ListingFileNotFoundError
from src.services.listing_store import ListingStore, read_listing_rows


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


class TestReadListingRows:
    """Tests for spreadsheet reading."""

    def test_reads_first_sheet(self, listings_xlsx):
        rows = read_listing_rows(listings_xlsx)
        assert len(rows) == 4
        assert rows[0]["Location"].startswith("60-8220 King George Blvd")
        assert rows[2]["Location"] == ""

    def test_reads_csv(self, tmp_path, sample_rows):
        path = tmp_path / "listings.csv"
        pd.DataFrame(sample_rows).to_csv(path, index=False)
        rows = read_listing_rows(path)
        assert rows[1]["Location"] == "Vancouver, BC"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ListingFileNotFoundError) as exc_info:
            read_listing_rows(tmp_path / "nope.xlsx")
        assert isinstance(exc_info.value, FileNotFoundError)
        assert exc_info.value.path.endswith("nope.xlsx")

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "broken.xlsx"
        path.write_text("this is not a workbook")
        with pytest.raises(DataLoadError):
            read_listing_rows(path)


class TestListingStore:
    """Tests for the time-bounded listing cache."""

    def test_loads_normalized_listings(self, listings_xlsx):
        store = ListingStore(listings_xlsx)
        listings = store.get_all_listings()
        assert [x.id for x in listings] == [0, 1, 3]
        assert listings[0].price == 649_900

    def test_cached_within_window(self, listings_xlsx):
        clock = FakeClock()
        store = ListingStore(listings_xlsx, ttl_seconds=60, clock=clock)
        first = store.get_all_listings()
        clock.now += 59
        assert store.get_all_listings() is first
        assert store.load_count == 1

    def test_reloads_after_window(self, listings_xlsx):
        clock = FakeClock()
        store = ListingStore(listings_xlsx, ttl_seconds=60, clock=clock)
        first = store.get_all_listings()
        clock.now += 60
        second = store.get_all_listings()
        assert second is not first
        assert store.load_count == 2
        assert store.loaded_at == clock.now

    def test_invalidate(self, listings_xlsx):
        store = ListingStore(listings_xlsx)
        store.get_all_listings()
        store.invalidate()
        store.get_all_listings()
        assert store.load_count == 2

    def test_row_cap(self, listings_xlsx):
        store = ListingStore(listings_xlsx, max_rows=2)
        assert [x.id for x in store.get_all_listings()] == [0, 1]

    def test_missing_file_not_cached(self, tmp_path, sample_rows):
        path = tmp_path / "later.xlsx"
        store = ListingStore(path)
        with pytest.raises(ListingFileNotFoundError):
            store.get_all_listings()

        pd.DataFrame(sample_rows).to_excel(path, index=False, engine="openpyxl")
        assert len(store.get_all_listings()) == 3

    def test_concurrent_first_access_loads_once(self, listings_xlsx):
        store = ListingStore(listings_xlsx)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(store.get_all_listings())

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.load_count == 1
        assert all(r is results[0] for r in results)

    @pytest.mark.parametrize("kwargs", [{"ttl_seconds": 0}, {"max_rows": 0}])
    def test_invalid_settings(self, tmp_path, kwargs):
        with pytest.raises(InvalidParameterError):
            ListingStore(tmp_path / "x.xlsx", **kwargs)
