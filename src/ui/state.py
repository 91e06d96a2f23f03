"""Per-browser session state.

Filters, the current page and the investor assumptions live in
``st.session_state`` only; nothing is persisted server-side.
"""

from __future__ import annotations

from typing import Any, TypeVar

import streamlit as st

from src.core.settings import get_settings
from src.domain.models.assumptions import Assumptions
from src.domain.models.query import ANY, DEFAULT_PAGE_SIZE, SORT_CAP

T = TypeVar("T")

# Any change to these resets the result page to 1
FILTER_KEYS: tuple[str, ...] = (
    "q", "country", "province", "city", "priceBucket", "minCap", "sortBy", "minBeds", "minBaths",
)


def get_state(key: str, default: T) -> T:
    """Session value for ``key``, storing ``default`` on first read."""
    return st.session_state.setdefault(key, default)


def set_state(key: str, value: Any) -> None:
    st.session_state[key] = value


def init_state(defaults: dict[str, Any]) -> None:
    """Seed missing keys; existing values win."""
    for key, value in defaults.items():
        st.session_state.setdefault(key, value)


class SessionManager:
    """Typed accessors over the session keys used by the listing page."""

    DEFAULTS = {
        "filters": {
            "q": "",
            "country": ANY,
            "province": ANY,
            "city": ANY,
            "priceBucket": ANY,
            "minCap": 0.0,
            "sortBy": SORT_CAP,
            "minBeds": ANY,
            "minBaths": ANY,
        },
        "page": 1,
        "assumptions": Assumptions().model_dump(by_alias=True),
        "province_options": [],
        "city_options": [],
        "last_lookup": None,
    }

    @classmethod
    def initialize(cls) -> None:
        """Initialize all session state with defaults."""
        init_state({k: (v.copy() if isinstance(v, dict) else v) for k, v in cls.DEFAULTS.items()})
        init_state({"page_size": get_settings().default_page_size})

    @classmethod
    def get_filters(cls) -> dict[str, Any]:
        return get_state("filters", dict(cls.DEFAULTS["filters"]))

    @classmethod
    def set_filters(cls, filters: dict[str, Any]) -> None:
        """Store filters, going back to page 1 when any of them changed."""
        previous = cls.get_filters()
        if any(previous.get(k) != filters.get(k) for k in FILTER_KEYS):
            set_state("page", 1)
        set_state("filters", dict(filters))

    @classmethod
    def get_page(cls) -> int:
        return get_state("page", 1)

    @classmethod
    def set_page(cls, page: int) -> None:
        set_state("page", max(1, int(page)))

    @classmethod
    def get_page_size(cls) -> int:
        return get_state("page_size", DEFAULT_PAGE_SIZE)

    @classmethod
    def get_assumptions(cls) -> Assumptions:
        """Current investor assumptions (clamped on the way in)."""
        return Assumptions.model_validate(get_state("assumptions", cls.DEFAULTS["assumptions"]))

    @classmethod
    def set_assumptions(cls, assumptions: Assumptions) -> None:
        set_state("assumptions", assumptions.model_dump(by_alias=True))

    @classmethod
    def reset_assumptions(cls) -> None:
        set_state("assumptions", Assumptions().model_dump(by_alias=True))

    @classmethod
    def set_options(cls, provinces: list[str], cities: list[str]) -> None:
        """Remember the full dropdown lists returned by the last query."""
        set_state("province_options", list(provinces))
        set_state("city_options", list(cities))

    @classmethod
    def get_options(cls) -> tuple[list[str], list[str]]:
        return get_state("province_options", []), get_state("city_options", [])
