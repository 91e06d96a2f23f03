"""Sidebar components for the main app.

Investor assumption controls. Values feed the metrics shown for each listing.
"""

from __future__ import annotations

import streamlit as st

from src.domain.models.assumptions import AMORTIZATION_CHOICES, Assumptions
from src.ui.state import SessionManager

HELP = {
    "mortgage": "Used to compute the payment and cash flow per listing.",
    "vacancy": "Reduces rent to account for empty months.",
    "expense": "Operating expenses as % of effective rent (maintenance, management, utilities...).",
}


def render_investor_assumptions() -> Assumptions:
    """Render the investor assumptions section of the sidebar.

    Returns:
        Assumptions built from the widgets (clamped)
    """
    current = SessionManager.get_assumptions()

    st.sidebar.markdown("### 🧮 Investor Assumptions")
    st.sidebar.caption("These drive cash flow, cash-on-cash return and DSCR.")

    if st.sidebar.button("Reset to defaults"):
        SessionManager.reset_assumptions()
        current = Assumptions()

    with st.sidebar.expander("🏦 Mortgage", expanded=True):
        down = st.slider("Down payment (%)", 0.0, 100.0, float(current.down_payment_pct), 1.0,
                         help=HELP["mortgage"])
        rate = st.number_input("Interest rate (% / yr)", min_value=0.0, max_value=25.0,
                               value=float(current.interest_rate_pct), step=0.05)
        amort = st.selectbox("Amortization (years)", AMORTIZATION_CHOICES,
                             index=AMORTIZATION_CHOICES.index(current.amort_years))

    with st.sidebar.expander("📉 Operating", expanded=True):
        vacancy = st.slider("Vacancy (%)", 0.0, 100.0, float(current.vacancy_pct), 0.5,
                            help=HELP["vacancy"])
        expense = st.slider("Expenses (%)", 0.0, 100.0, float(current.expense_pct), 0.5,
                            help=HELP["expense"])

    assumptions = Assumptions(
        down_payment_pct=down,
        interest_rate_pct=rate,
        amort_years=amort,
        vacancy_pct=vacancy,
        expense_pct=expense,
    )
    SessionManager.set_assumptions(assumptions)
    return assumptions
