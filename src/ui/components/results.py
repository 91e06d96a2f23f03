"""Result display components for the listing table."""

from __future__ import annotations

from typing import Any

import pandas as pd
import streamlit as st

from src.services.evaluator import AnalyzedListing


def format_money(value: float | None, decimals: int = 0) -> str:
    """Format a number as dollars."""
    if value is None:
        return "—"
    if decimals == 0:
        return f"${int(round(value)):,}"
    return f"${value:,.{decimals}f}"


def format_pct(value: float | None, decimals: int = 2) -> str:
    """Format a number as percentage."""
    if value is None:
        return "—"
    return f"{value:.{decimals}f}%"


def format_ratio(value: float | None) -> str:
    if value is None:
        return "—"
    return f"{value:.2f}x"


def get_dscr_color(dscr: float | None) -> str:
    """Below 1.0 the rent cannot carry the mortgage."""
    if dscr is None:
        return "inherit"
    if dscr >= 1.25:
        return "#28a745"
    if dscr >= 1.0:
        return "#ffc107"
    return "#dc3545"


def to_display_rows(analyzed: list[AnalyzedListing]) -> pd.DataFrame:
    """Format analyzed listings as a display table."""
    rows: list[dict[str, Any]] = []
    for item in analyzed:
        listing, metrics = item.listing, item.metrics
        rows.append({
            "Address": listing.address or "—",
            "City": item.location.city,
            "Prov.": item.location.province,
            "Price": format_money(listing.price),
            "Beds": listing.beds,
            "Baths": listing.baths,
            "Sqft": listing.sqft,
            "Rent / mo": format_money(listing.est_rent),
            "NOI / yr": format_money(listing.noi),
            "Cap rate": format_pct(listing.cap_rate),
            "Mortgage / mo": format_money(metrics.monthly_mortgage),
            "Cash flow / mo": format_money(metrics.cash_flow_monthly),
            "CoC": format_pct(metrics.cash_on_cash_pct),
            "DSCR": format_ratio(metrics.dscr),
            "Link": listing.url,
        })
    return pd.DataFrame(rows)


def render_market_summary(summary: dict[str, Any]) -> None:
    """Render the market KPI strip."""
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Valid listings", f"{summary.get('count', 0):,}")
    c2.metric("Avg cap rate", format_pct(summary.get("avgCapRate")))
    c3.metric("Avg price", format_money(summary.get("avgPrice")))
    c4.metric("Avg rent / mo", format_money(summary.get("avgRent")))


def render_listing_table(analyzed: list[AnalyzedListing], total: int) -> None:
    """Render one page of listings with their metrics."""
    if not analyzed:
        st.info("🔍 No listings match these filters. Try widening the price range or lowering the minimum cap rate.")
        return

    st.caption(f"{total:,} matching listings")
    st.dataframe(
        to_display_rows(analyzed),
        use_container_width=True,
        hide_index=True,
        column_config={"Link": st.column_config.LinkColumn("Link", display_text="open")},
    )


def render_pagination(page: int, total_pages: int) -> int:
    """Render prev/next controls.

    Returns:
        The page the user asked for (unchanged if no click)
    """
    prev_col, label_col, next_col = st.columns([1, 2, 1])
    requested = page
    with prev_col:
        if st.button("← Prev", disabled=page <= 1):
            requested = page - 1
    with label_col:
        st.markdown(f"<div style='text-align:center'>Page {page} of {total_pages}</div>", unsafe_allow_html=True)
    with next_col:
        if st.button("Next →", disabled=page >= total_pages):
            requested = page + 1
    return requested
