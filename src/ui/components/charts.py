"""Chart components for visualization."""

from __future__ import annotations

import plotly.graph_objects as go
import streamlit as st


def build_cap_rate_figure(distribution: dict[str, int]) -> go.Figure:
    """Bar chart of listings per cap-rate band."""
    fig = go.Figure(go.Bar(
        x=list(distribution.keys()),
        y=list(distribution.values()),
        marker_color="#17a2b8",
    ))
    fig.update_layout(
        height=230,
        margin=dict(l=30, r=10, t=10, b=40),
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        xaxis_title="Cap rate",
        yaxis_title="Listings",
    )
    return fig


def render_cap_rate_chart(distribution: dict[str, int], key: str = "cap_dist") -> None:
    """Render the cap-rate distribution of the current page.

    Args:
        distribution: Band label -> listing count
        key: Unique key for the chart element
    """
    if not any(distribution.values()):
        st.caption("No cap rates to chart on this page.")
        return
    st.plotly_chart(build_cap_rate_figure(distribution), use_container_width=True, key=key)
