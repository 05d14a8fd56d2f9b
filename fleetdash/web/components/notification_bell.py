from __future__ import annotations

import streamlit as st

from fleetdash.domain.rules import notification_to_alert, priority_icon
from fleetdash.web.framework.state import navigate
from fleetdash.web.services.api_bridge import call_api, run_api

SEVERITY_COLORS = {"critical": "#dc2626", "warning": "#ea580c"}


def render_notification_bell(limit: int = 5) -> None:
    """Sidebar bell: unread count plus the latest unread alerts."""
    feed = run_api(lambda s: s.alerts.get_notifications(unread_only=True))
    alerts = [notification_to_alert(n) for n in feed.notifications][:limit] if feed.success else []
    unread = feed.summary.unread or len(alerts)

    label = f"🔔 Notifications ({unread})" if unread else "🔔 Notifications"
    with st.sidebar.popover(label, use_container_width=True):
        if not alerts:
            st.caption("You're all caught up.")
        notifications = {n.id: n for n in feed.notifications}
        for alert in alerts:
            color = SEVERITY_COLORS.get(alert.severity, "inherit")
            icon = priority_icon(notifications[alert.id].priority) if alert.id in notifications else "📋"
            st.markdown(f"{icon} <b style='color:{color}'>{alert.title}</b>", unsafe_allow_html=True)
            st.caption(alert.message)
            view_col, read_col = st.columns(2)
            with view_col:
                if st.button("View", key=f"bell_view_{alert.id}", use_container_width=True):
                    navigate("vehicle_compliance", id=alert.vehicle_id)
            with read_col:
                if st.button("Mark read", key=f"bell_read_{alert.id}", use_container_width=True):
                    call_api(lambda s, nid=alert.id: s.alerts.mark_as_read(nid), error="Failed to mark as read", toast=True)
                    st.rerun()
            st.divider()
        if st.button("View all alerts", key="bell_all", use_container_width=True):
            navigate("alerts")
