"""Single listing lookup component.

Paste a listing URL, get the extracted fields (editable) and the metrics
under the current assumptions. Extraction is best-effort: empty fields are
expected and must be filled in by hand.
"""

from __future__ import annotations

from typing import Any

import streamlit as st

from src.core.financial import compute_metrics, operating_noi, quick_roi
from src.domain.models.assumptions import Assumptions
from src.ui.components.results import format_money, format_pct, format_ratio


def render_source_badges(debug: dict[str, Any]) -> None:
    sources = debug.get("sources") or {}
    parts = [f"**{field}**: {source or 'not found'}" for field, source in sources.items()]
    if parts:
        st.caption(" · ".join(parts))
    for note in debug.get("notes") or []:
        st.caption(f"ℹ️ {note}")


def render_manual_inputs(extracted: dict[str, Any]) -> dict[str, float]:
    """Editable numbers, prefilled from the extraction."""
    c1, c2, c3 = st.columns(3)
    with c1:
        price = st.number_input("Purchase price", min_value=0.0, step=5000.0,
                                value=float(extracted.get("price") or 0.0))
    with c2:
        rent = st.number_input("Monthly rent", min_value=0.0, step=50.0,
                               value=float(extracted.get("estRent") or 0.0))
    with c3:
        annual_tax = st.number_input("Property tax / yr (0 = 1.2% of price)", min_value=0.0, step=100.0, value=0.0)
    return {"price": price, "rent": rent, "annual_tax": annual_tax}


def render_lookup_metrics(inputs: dict[str, float], assumptions: Assumptions) -> None:
    metrics = compute_metrics(inputs["price"], inputs["rent"], None, assumptions)
    noi, cap = operating_noi(
        inputs["price"],
        inputs["rent"],
        annual_tax=inputs["annual_tax"] or None,
        vacancy_pct=assumptions.vacancy_pct,
    )
    screen = quick_roi(inputs["price"], inputs["rent"])

    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Mortgage / mo", format_money(metrics.monthly_mortgage))
    c2.metric("Cash flow / mo", format_money(metrics.cash_flow_monthly))
    c3.metric("Cash-on-cash", format_pct(metrics.cash_on_cash_pct))
    c4.metric("DSCR", format_ratio(metrics.dscr))

    c5, c6, c7 = st.columns(3)
    c5.metric("Itemized NOI / yr", format_money(noi))
    c6.metric("Itemized cap rate", format_pct(cap))
    c7.metric("Gross yield", format_pct(screen["gross_yield_pct"]),
              help="Meets the 1% rule" if screen["meets_one_percent_rule"] else None)
