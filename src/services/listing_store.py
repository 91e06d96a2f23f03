"""Listing store.

Loads the backing spreadsheet once, keeps the normalized listings for a
fixed window and reloads on the first access after it expires. The store is
an explicit object so tests and alternative data sources each get their own.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pandas as pd

from src.core.exceptions import DataLoadError, InvalidParameterError, ListingFileNotFoundError
from src.core.logging import get_logger
from src.core.settings import get_settings
from src.domain.models.listing import Listing
from src.services.normalizer import EstimateConfig, normalize_rows

log = get_logger(__name__)

DEFAULT_CACHE_SECONDS = 60 * 60
DEFAULT_MAX_ROWS = 8000


def read_listing_rows(path: Path) -> list[dict[str, Any]]:
    """Read the first worksheet (or a CSV) as header-keyed rows.

    Empty cells come back as "" so every row carries every column.

    Raises:
        ListingFileNotFoundError: If the file does not exist
        DataLoadError: If the file cannot be parsed
    """
    if not path.is_file():
        raise ListingFileNotFoundError(str(path))

    try:
        if path.suffix.lower() == ".csv":
            df = pd.read_csv(path, dtype=object, keep_default_na=False)
        else:
            df = pd.read_excel(path, sheet_name=0, dtype=object, engine="openpyxl")
    except Exception as e:
        raise DataLoadError(f"Could not read listings file {path}: {e}") from e

    df = df.fillna("")
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict(orient="records")


class ListingStore:
    """Time-bounded cache of the canonical listing set."""

    def __init__(
        self,
        path: str | Path,
        ttl_seconds: float = DEFAULT_CACHE_SECONDS,
        max_rows: int = DEFAULT_MAX_ROWS,
        estimates: EstimateConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the store.

        Args:
            path: Spreadsheet (.xlsx) or CSV file with a header row
            ttl_seconds: Cache window measured from the last successful load
            max_rows: Rows beyond this are dropped before normalization
            estimates: Fallback rent/NOI estimate parameters
            clock: Monotonic time source, injectable for tests
        """
        if ttl_seconds <= 0:
            raise InvalidParameterError("ttl_seconds", ttl_seconds, "must be positive")
        if max_rows < 1:
            raise InvalidParameterError("max_rows", max_rows, "must be at least 1")

        self.path = Path(path)
        self.ttl_seconds = ttl_seconds
        self.max_rows = max_rows
        self.estimates = estimates
        self._clock = clock
        self._lock = threading.Lock()
        self._listings: list[Listing] | None = None
        self._loaded_at: float | None = None
        self.load_count = 0

    @classmethod
    def from_settings(cls) -> ListingStore:
        settings = get_settings()
        return cls(
            path=settings.data_path,
            ttl_seconds=settings.cache_ttl_seconds,
            max_rows=settings.max_rows,
            estimates=EstimateConfig.from_settings(),
        )

    @property
    def loaded_at(self) -> float | None:
        return self._loaded_at

    def _is_fresh(self) -> bool:
        return (
            self._listings is not None
            and self._loaded_at is not None
            and self._clock() - self._loaded_at < self.ttl_seconds
        )

    def get_all_listings(self) -> list[Listing]:
        """Return the canonical listing set, reloading when the cache expired.

        Callers must treat the returned list as read-only; it is shared
        between concurrent queries until the next reload.
        """
        if self._is_fresh():
            return self._listings

        with self._lock:
            # Another thread may have reloaded while we waited
            if self._is_fresh():
                log.debug("listing_cache_hit_after_wait", path=str(self.path))
                return self._listings
            self._listings = self._load()
            self._loaded_at = self._clock()
            self.load_count += 1
            return self._listings

    def invalidate(self) -> None:
        """Force a reload on the next access."""
        with self._lock:
            self._loaded_at = None

    def _load(self) -> list[Listing]:
        try:
            rows = read_listing_rows(self.path)
        except ListingFileNotFoundError:
            log.error("listings_file_not_found", path=str(self.path))
            raise

        limited = rows[: self.max_rows]
        if len(rows) > len(limited):
            log.warning("listing_rows_capped", total=len(rows), used=len(limited))

        listings = normalize_rows(limited, self.estimates)
        log.info(
            "listings_loaded",
            path=str(self.path),
            rows=len(rows),
            used=len(limited),
            listings=len(listings),
            columns=list(rows[0].keys()) if rows else [],
        )
        return listings
