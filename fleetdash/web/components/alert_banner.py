from __future__ import annotations

import streamlit as st

from fleetdash.domain.rules import at_risk_banner
from fleetdash.infra.exceptions import FleetDashException
from fleetdash.infra.logging import get_logger
from fleetdash.web.framework.state import navigate
from fleetdash.web.services.api_bridge import run_api

logger = get_logger(__name__)

DISMISSED_KEY = "compliance_banner_dismissed"


def render_compliance_alert_banner() -> None:
    """Red banner summarising expired / at-risk vehicles; dismissible for the session."""
    if st.session_state.get(DISMISSED_KEY):
        return
    try:
        result = run_api(lambda s: s.compliance_dashboard.get_fleet_at_risk())
    except FleetDashException as e:
        # the banner is decoration; the dashboard itself still renders
        logger.error(f"Failed to load at-risk data: {e.message}")
        return

    banner = at_risk_banner(result.total if result.total is not None else result.pagination.total, result.items)
    if banner is None:
        return

    text_col, details_col, close_col = st.columns([8, 2, 1])
    with text_col:
        st.markdown(
            f'<div class="fd-banner">⚠️ <b>Compliance Alert</b> | {banner.text}</div>',
            unsafe_allow_html=True,
        )
    with details_col:
        if st.button("View Details", key="banner_details", use_container_width=True):
            navigate("compliance")
    with close_col:
        if st.button("✕", key="banner_dismiss", help="Dismiss"):
            st.session_state[DISMISSED_KEY] = True
            st.rerun()
