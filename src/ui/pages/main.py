"""Main page rendering.

Composes all UI components into the main application page.
"""

from __future__ import annotations

from typing import Any

import streamlit as st

from src.core.settings import get_settings
from src.domain.models.assumptions import Assumptions
from src.services.exporter import to_csv_bytes
from src.ui.app_controller import (
    analyze_page,
    build_request_params,
    export_page,
    lookup_property,
    page_cap_rate_distribution,
    run_market_summary,
    run_search,
)
from src.ui.components.charts import render_cap_rate_chart
from src.ui.components.filters import render_listing_filters
from src.ui.components.property_lookup import (
    render_lookup_metrics,
    render_manual_inputs,
    render_source_badges,
)
from src.ui.components.results import (
    render_listing_table,
    render_market_summary,
    render_pagination,
)
from src.ui.state import SessionManager, get_state, set_state


def render_header() -> None:
    """Render page header."""
    st.markdown(
        """
        <h1 style="text-align: center;">
            🏘️ Rental ROI Finder
        </h1>
        """,
        unsafe_allow_html=True,
    )
    st.caption("Screen listings by cap rate, cash flow and debt coverage")


def render_search_tab(assumptions: Assumptions) -> None:
    """Filters, market summary, result table and pagination."""
    provinces, cities = SessionManager.get_options()
    filters = render_listing_filters(SessionManager.get_filters(), provinces, cities)
    SessionManager.set_filters(filters)

    params = build_request_params(filters, SessionManager.get_page(), SessionManager.get_page_size())
    try:
        data = run_search(params)
    except RuntimeError as e:
        st.error(f"⚠️ The listing backend failed: {e}")
        return

    SessionManager.set_options(data["provinceOptions"], data["cityOptions"])
    if data["page"] != SessionManager.get_page():
        SessionManager.set_page(data["page"])

    summary = run_market_summary(params)
    if summary is not None:
        render_market_summary(summary)

    analyzed = analyze_page(data["items"], assumptions)
    with st.expander("📊 Cap-rate distribution (this page)", expanded=False):
        render_cap_rate_chart(page_cap_rate_distribution(analyzed))

    render_listing_table(analyzed, data["total"])

    requested = render_pagination(data["page"], data["totalPages"])
    if requested != data["page"]:
        SessionManager.set_page(requested)
        st.rerun()

    if analyzed:
        render_export_controls(analyzed, params, assumptions)


def render_export_controls(analyzed: list[Any], params: dict[str, str], assumptions: Assumptions) -> None:
    c1, c2 = st.columns(2)
    with c1:
        st.download_button(
            "⬇️ Download page (CSV)",
            data=to_csv_bytes(analyzed),
            file_name="listings_page.csv",
            mime="text/csv",
        )
    with c2:
        if st.button("💾 Save page (JSON)"):
            path = export_page(analyzed, {"query": params, "assumptions": assumptions.model_dump(by_alias=True)})
            if path:
                st.success(f"Saved to {path}")
            else:
                st.warning("Export is disabled or failed; see logs.")


def render_lookup_tab(assumptions: Assumptions) -> None:
    """Single URL extraction with manual fallback inputs."""
    st.markdown("### 🔗 Analyze a single listing")
    url = st.text_input("Listing URL", placeholder="https://...")
    if st.button("Extract", type="primary") and url:
        with st.spinner("Fetching listing..."):
            set_state("last_lookup", lookup_property(url))

    extracted: dict[str, Any] = get_state("last_lookup", None) or {}
    if extracted:
        st.write(extracted.get("address") or "Address not found")
        render_source_badges(extracted.get("debug") or {})
        if get_settings().debug_mode:
            st.json(extracted)

    inputs = render_manual_inputs(extracted)
    if inputs["price"] > 0:
        render_lookup_metrics(inputs, assumptions)


def render_main_page(assumptions: Assumptions) -> None:
    """Render the main page."""
    render_header()
    search_tab, lookup_tab = st.tabs(["Find listings", "Analyze a URL"])
    with search_tab:
        render_search_tab(assumptions)
    with lookup_tab:
        render_lookup_tab(assumptions)
