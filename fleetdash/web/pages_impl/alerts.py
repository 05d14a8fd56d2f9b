from __future__ import annotations

import asyncio

import pandas as pd
import streamlit as st

from fleetdash.domain.rules import priority_icon, priority_style
from fleetdash.web.components.breadcrumbs import render_breadcrumbs
from fleetdash.web.framework.state import flash, navigate
from fleetdash.web.services.api_bridge import call_api

SEVERITY_ICONS = {"critical": "🚨", "warning": "⚠️", "info": "ℹ️"}


async def _load(s):
    return await asyncio.gather(s.alerts.get_alerts(limit=50), s.alerts.get_notifications(unread_only=False))


def render() -> None:
    render_breadcrumbs("/dashboard/compliance/alerts")
    st.title("🔔 Alerts")

    unread, feed = call_api(_load, error="Failed to load alerts", default=([], None))
    if feed is not None and not feed.success:
        st.warning(feed.message)

    if feed is not None:
        summary = feed.summary
        m1, m2, m3, m4, m5 = st.columns(5)
        m1.metric("Total", summary.total)
        m2.metric("Unread", summary.unread)
        m3.metric("Overdue", summary.overdue)
        m4.metric("Expiring soon", summary.expiring_soon)
        m5.metric("Critical", summary.critical)

    b1, b2, _ = st.columns([1, 1, 3])
    if b1.button("Mark all as read", disabled=not unread, use_container_width=True):
        marked = call_api(lambda s: s.alerts.mark_all_as_read(), error="Failed to mark all as read")
        if marked is not None:
            flash(f"Marked {marked} notification(s) as read.")
            st.rerun()
    if b2.button("Clear read status", use_container_width=True):
        if call_api(lambda s: s.alerts.clear_read_status(), error="Failed to clear read status",
                    default=False) is not False:
            flash("Read status cleared.")
            st.rerun()

    unread_tab, all_tab = st.tabs([f"Unread ({len(unread)})", "All notifications"])
    with unread_tab:
        if not unread:
            st.success("No unread alerts.")
        for alert in unread:
            with st.container(border=True):
                c1, c2, c3 = st.columns([6, 1, 1])
                c1.markdown(f"{SEVERITY_ICONS.get(alert.severity, '📋')} **{alert.title}**  \n{alert.message}")
                if alert.vehicle_id and c2.button("View", key=f"alert_view_{alert.id}", use_container_width=True):
                    navigate("vehicle_compliance", id=alert.vehicle_id)
                if c3.button("Read", key=f"alert_read_{alert.id}", use_container_width=True):
                    if call_api(lambda s, nid=alert.id: s.alerts.mark_as_read(nid), error="Failed to mark as read",
                                default=False) is not False:
                        st.rerun()

    with all_tab:
        notifications = feed.notifications if feed is not None else []
        if not notifications:
            st.caption("No notifications.")
            return
        df = pd.DataFrame(
            [
                {
                    "": priority_icon(n.priority),
                    "Priority": n.priority,
                    "Requirement": n.compliance_type_name,
                    "Vehicle": n.vehicle_registration or f"{n.vehicle_type or 'Vehicle'} #{n.vehicle_id}",
                    "Expiry": (n.expiry_date or "")[:10],
                    "Message": n.message,
                    "Read": "✅" if n.is_read else "",
                }
                for n in notifications
            ]
        )
        st.dataframe(
            df.style.apply(
                lambda col: [f"color: {priority_style(p)}" for p in col], subset=["Priority"]
            ),
            hide_index=True,
            use_container_width=True,
        )
