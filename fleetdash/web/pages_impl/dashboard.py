from __future__ import annotations

import asyncio

import pandas as pd
import streamlit as st

from fleetdash.domain.models import FleetStatistics
from fleetdash.domain.rules import (
    expiring_documents,
    fleet_vehicle_counts,
    recent_vehicles,
    vehicle_display_name,
)
from fleetdash.web.components.alert_banner import render_compliance_alert_banner
from fleetdash.web.components.breadcrumbs import render_breadcrumbs
from fleetdash.web.components.charts import render_fleet_compliance_chart, render_vehicle_status_chart
from fleetdash.web.config import PAGES
from fleetdash.web.framework.state import navigate
from fleetdash.web.framework.user_context import app_settings, get_user_context
from fleetdash.web.services.api_bridge import call_api


async def _load(s):
    vehicles, vehicle_types, documents, stats = await asyncio.gather(
        s.vehicles.get_all(),
        s.vehicle_types.get_all(),
        s.documents.get_all_documents(),
        s.compliance_dashboard.get_fleet_stats(),
    )
    return vehicles, vehicle_types, documents, stats


def _quick_actions() -> None:
    c1, c2, c3, c4 = st.columns(4)
    c1.page_link(PAGES["new_vehicle"], label="Add vehicle", icon="➕")
    c2.page_link(PAGES["import_vehicles"], label="Import vehicles", icon="📥")
    c3.page_link(PAGES["documents"], label="Upload document", icon="📄")
    c4.page_link(PAGES["compliance"], label="Compliance overview", icon="🛡️")


def render() -> None:
    render_breadcrumbs("/dashboard", header=True)
    ctx = get_user_context()
    st.title("📊 Dashboard")
    st.caption(f"Welcome back, {ctx.display_name}.")

    render_compliance_alert_banner()
    _quick_actions()

    with st.spinner("Loading fleet overview..."):
        loaded = call_api(_load, error="Failed to load dashboard")
    if loaded is None:
        return
    vehicles, vehicle_types, documents, stats = loaded
    stats = stats or FleetStatistics()

    counts = fleet_vehicle_counts(vehicles)
    expiring = expiring_documents(documents, days=app_settings().expiring_soon_days)

    st.subheader("Fleet")
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Total vehicles", counts.total)
    m2.metric("Active", counts.active)
    m3.metric("In maintenance", counts.maintenance)
    m4.metric("Vehicle types", len(vehicle_types))

    st.subheader("Documents & compliance")
    d1, d2, d3, d4 = st.columns(4)
    d1.metric("Documents", len(documents))
    d2.metric("Expiring soon", len(expiring))
    d3.metric("Compliance rate", f"{stats.compliance_rate:.1f}%")
    d4.metric("Non-operational", stats.non_operational)

    left, right = st.columns(2)
    with left:
        st.markdown("**Vehicle status**")
        render_vehicle_status_chart(counts.active, counts.maintenance, counts.inactive)
    with right:
        st.markdown("**Fleet compliance**")
        render_fleet_compliance_chart(stats.compliant, stats.at_risk, stats.expired, stats.pending)

    st.subheader("Recent vehicles")
    recent = recent_vehicles(vehicles)
    if not recent:
        st.info("No vehicles yet.")
        st.page_link(PAGES["new_vehicle"], label="Add your first vehicle", icon="➕")
        return

    df = pd.DataFrame(
        [
            {
                "Vehicle": vehicle_display_name(v),
                "Type": v.vehicle_type.name if v.vehicle_type else "",
                "Status": v.status,
                "Added": (v.created_at or "")[:10],
            }
            for v in recent
        ]
    )
    st.dataframe(df, use_container_width=True, hide_index=True)
    choice = st.selectbox(
        "Open vehicle",
        options=[None] + [v.id for v in recent],
        format_func=lambda vid: "Select..." if vid is None else vehicle_display_name(next(v for v in recent if v.id == vid)),
    )
    if choice is not None:
        navigate("vehicle_detail", id=choice)
