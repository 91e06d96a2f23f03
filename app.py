"""Rental ROI Finder - Streamlit entry point.

    streamlit run app.py

Wires the investor sidebar and the listing/lookup page together. All data
access goes through src.ui.app_controller.
"""

import os
import sys

import streamlit as st

# Make ``src`` importable when launched from the repository root
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from src.core.exceptions import ConfigurationError
from src.core.location import get_market
from src.core.logging import get_logger
from src.core.settings import get_settings
from src.ui.components.sidebar import render_investor_assumptions
from src.ui.pages.main import render_main_page
from src.ui.state import SessionManager


def check_configuration() -> None:
    """Stop the page early when the configured market is unknown."""
    try:
        get_market(get_settings().market_country)
    except ConfigurationError as e:
        st.error(f"⚙️ Configuration error: {e}")
        st.stop()


def main() -> None:
    # Must be the first Streamlit call of the run
    st.set_page_config(
        page_title="Rental ROI Finder",
        page_icon="🏘️",
        layout="wide",
        initial_sidebar_state="expanded",
    )
    log = get_logger("app")
    check_configuration()

    SessionManager.initialize()
    assumptions = render_investor_assumptions()
    log.debug("page_render", assumptions=assumptions.model_dump(by_alias=True))

    render_main_page(assumptions)


if __name__ == "__main__":
    main()
