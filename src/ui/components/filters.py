"""Filter components for the listing search."""

from __future__ import annotations

from typing import Any

import streamlit as st

from src.domain.models.query import ANY, PRICE_BUCKETS, SORT_KEYS

PRICE_BUCKET_LABELS = {
    "any": "Any price",
    "200-500": "$200k – $500k",
    "500-1000": "$500k – $1M",
    "1000+": "$1M+",
}

SORT_LABELS = {
    "cap": "Cap rate (high → low)",
    "priceLow": "Price (low → high)",
    "noiHigh": "NOI (high → low)",
}

ROOM_CHOICES: list[Any] = [ANY, 1, 2, 3, 4, 5]


def with_any(options: list[str]) -> list[str]:
    """Prepend the "any" choice to a dropdown list."""
    return [ANY] + [o for o in options if o != ANY]


def _index_of(options: list[Any], value: Any) -> int:
    try:
        return options.index(value)
    except ValueError:
        return 0


def render_listing_filters(
    current: dict[str, Any],
    province_options: list[str],
    city_options: list[str],
) -> dict[str, Any]:
    """Render listing filter controls.

    Province and city choices always come from the full valid listing set,
    so picking one never empties the other.

    Args:
        current: Filters currently in session
        province_options: Full province list from the last query
        city_options: Full city list from the last query

    Returns:
        Request-style filter parameters
    """
    st.markdown("### 🔎 Find listings")

    q = st.text_input("Search address", value=current.get("q", ""), placeholder="e.g. Kingsway")

    c1, c2, c3 = st.columns(3)
    with c1:
        provinces = with_any(province_options)
        province = st.selectbox("Province", provinces, index=_index_of(provinces, current.get("province")))
    with c2:
        cities = with_any(city_options)
        city = st.selectbox("City", cities, index=_index_of(cities, current.get("city")))
    with c3:
        buckets = list(PRICE_BUCKETS)
        price_bucket = st.selectbox(
            "Price",
            buckets,
            index=_index_of(buckets, current.get("priceBucket")),
            format_func=lambda b: PRICE_BUCKET_LABELS.get(b, b),
        )

    c4, c5, c6, c7 = st.columns(4)
    with c4:
        min_cap = st.number_input("Min cap rate (%)", min_value=0.0, max_value=30.0,
                                  value=float(current.get("minCap") or 0.0), step=0.25)
    with c5:
        min_beds = st.selectbox("Min beds", ROOM_CHOICES, index=_index_of(ROOM_CHOICES, current.get("minBeds")))
    with c6:
        min_baths = st.selectbox("Min baths", ROOM_CHOICES, index=_index_of(ROOM_CHOICES, current.get("minBaths")))
    with c7:
        sort_by = st.selectbox(
            "Sort by",
            list(SORT_KEYS),
            index=_index_of(list(SORT_KEYS), current.get("sortBy")),
            format_func=lambda s: SORT_LABELS.get(s, s),
        )

    return {
        "q": q,
        "country": current.get("country", ANY),
        "province": province,
        "city": city,
        "priceBucket": price_bucket,
        "minCap": min_cap,
        "sortBy": sort_by,
        "minBeds": min_beds,
        "minBaths": min_baths,
    }
