"""Runtime configuration.

Every field can be overridden with an ``ROI_``-prefixed environment variable
or a line in ``.env`` (``ROI_DATA_PATH=...``, ``ROI_CACHE_TTL_SECONDS=600``).
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Settings for the listing store, estimates, scraping and UI."""

    # Logging
    log_level: str = Field(default="INFO", description="Root log level name")
    log_json: bool = Field(default=False, description="Render logs as JSON")

    # Feature flags
    debug_mode: bool = Field(default=False, description="Show raw extraction payloads in the UI")
    enable_export: bool = Field(default=True, description="Allow saving result pages as JSON")

    # Backing data
    data_path: str = Field(default="data/scraped-data-van.xlsx", description="Listings spreadsheet")
    cache_ttl_seconds: float = Field(default=3600.0, gt=0, description="Listing cache window")
    max_rows: int = Field(default=8000, ge=1, description="Max spreadsheet rows loaded")

    # Hard rules
    hard_min_price: float = Field(default=200_000.0, ge=0, description="Minimum listing price")

    # Fallback estimates
    rent_base: float = Field(default=1200.0, description="Base monthly rent estimate")
    rent_per_bed: float = Field(default=700.0, description="Monthly rent added per bedroom")
    rent_fallback_beds: float = Field(default=2.0, ge=0, description="Beds assumed when unknown")
    expense_ratio: float = Field(default=0.35, ge=0, le=1, description="Expense share of gross rent")

    # Market
    market_country: str = Field(default="Canada", description="Market used by the location parser")

    # Query
    default_page_size: int = Field(default=50, ge=1, le=200)

    # Scraping
    fetch_timeout_seconds: float = Field(default=15.0, gt=0, description="Listing page fetch timeout")

    model_config = SettingsConfigDict(
        env_prefix="ROI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> AppSettings:
    """Settings are read once per process."""
    return AppSettings()
