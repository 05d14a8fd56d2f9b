"""Fleet compliance dashboard: statistics, categories, vehicles at risk, overdue and expiring items, alerts."""
from __future__ import annotations

import asyncio
from typing import Callable, List

import pandas as pd
import streamlit as st

from fleetdash.domain.models import FleetStatistics
from fleetdash.web.components.badges import compliance_status_html, operational_status_html, score_ring_html
from fleetdash.web.components.breadcrumbs import render_breadcrumbs
from fleetdash.web.components.charts import render_fleet_compliance_chart
from fleetdash.web.framework.state import ensure_defaults, flash, navigate
from fleetdash.web.framework.user_context import app_settings
from fleetdash.web.services.api_bridge import call_api

# page counters for the "load more" lists
STATE_DEFAULTS = {"cmp_at_risk_pages": 1, "cmp_overdue_pages": 1, "cmp_expiring_pages": 1}


def _load_pages(fetch: Callable, pages: int, limit: int):
    """Fetch pages 1..pages of a paginated endpoint; returns (items, has_more, total)."""

    async def run(s):
        results = await asyncio.gather(*(fetch(s, p, limit) for p in range(1, pages + 1)))
        items: List = [i for r in results for i in r.items]
        last = results[-1]
        total = last.total if last.total is not None else last.pagination.total
        return items, last.pagination.has_more, total

    return call_api(run, error="Failed to load list", default=([], False, 0))


def _load_more_button(state_key: str, has_more: bool) -> None:
    if has_more and st.button("Load more", key=f"{state_key}_more"):
        st.session_state[state_key] += 1
        st.rerun()


def _render_stats(stats: FleetStatistics) -> None:
    m1, m2, m3, m4, m5 = st.columns(5)
    m1.metric("Vehicles", stats.total_vehicles)
    m2.metric("Operational", stats.operational)
    m3.metric("Non-operational", stats.non_operational)
    m4.metric("Compliance rate", f"{stats.compliance_rate:.1f}%")
    m5.metric("Avg. score", f"{stats.average_compliance_score:.0f}%")

    left, right = st.columns([3, 2])
    with left:
        render_fleet_compliance_chart(stats.compliant, stats.at_risk, stats.expired, stats.pending)
    with right:
        st.markdown("**Requirements**")
        st.dataframe(
            pd.DataFrame(
                [
                    {"Status": "Compliant", "Count": stats.requirements_compliant},
                    {"Status": "At risk", "Count": stats.requirements_at_risk},
                    {"Status": "Expired", "Count": stats.requirements_expired},
                    {"Status": "Pending", "Count": stats.requirements_pending},
                    {"Status": "Total", "Count": stats.requirements_total},
                ]
            ),
            hide_index=True,
            use_container_width=True,
        )


def _render_categories() -> None:
    summary = call_api(lambda s: s.compliance_dashboard.get_summary_by_category(),
                       error="Failed to load category summary", default=[])
    if not summary:
        st.caption("No category data.")
        return
    st.dataframe(
        pd.DataFrame(
            [
                {
                    "Category": c.category.capitalize(),
                    "Total": c.total,
                    "Compliant": c.compliant,
                    "At risk": c.at_risk,
                    "Expired": c.expired,
                    "Pending": c.pending,
                    "Rate": c.compliance_rate,
                }
                for c in summary
            ]
        ),
        hide_index=True,
        use_container_width=True,
        column_config={"Rate": st.column_config.ProgressColumn("Rate", format="%.1f%%", min_value=0, max_value=100)},
    )


def _render_at_risk(limit: int) -> None:
    items, has_more, total = _load_pages(
        lambda s, p, n: s.compliance_dashboard.get_fleet_at_risk(page=p, limit=n),
        st.session_state["cmp_at_risk_pages"], limit,
    )
    st.caption(f"{total} vehicle(s) at risk")
    for v in items:
        with st.container(border=True):
            c1, c2, c3 = st.columns([1, 4, 1])
            c1.markdown(score_ring_html(v.compliance_score, size=48, show_label=False), unsafe_allow_html=True)
            with c2:
                st.markdown(
                    f"**{v.vehicle_type} #{v.vehicle_id}** "
                    + compliance_status_html(v.compliance_status) + " "
                    + operational_status_html(v.operational_status),
                    unsafe_allow_html=True,
                )
                problems = ", ".join(
                    f"{p.compliance_type} ({p.status.replace('_', ' ')})" for p in v.problematic_requirements
                )
                st.caption(f"{v.problem_count} problem(s): {problems}" if problems else f"{v.problem_count} problem(s)")
            if c3.button("Open", key=f"risk_{v.vehicle_id}"):
                navigate("vehicle_compliance", id=v.vehicle_id)
    _load_more_button("cmp_at_risk_pages", has_more)


def _render_overdue(limit: int) -> None:
    items, has_more, total = _load_pages(
        lambda s, p, n: s.compliance_dashboard.get_overdue_items(page=p, limit=n),
        st.session_state["cmp_overdue_pages"], limit,
    )
    st.caption(f"{total} overdue item(s)")
    if items:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Vehicle": f"{i.vehicle_type} #{i.vehicle_id}",
                        "Requirement": i.compliance_type_name,
                        "Category": i.category,
                        "Required": "✅" if i.is_required else "",
                        "Expired on": (i.expiry_date or "")[:10],
                        "Days overdue": i.days_overdue,
                    }
                    for i in items
                ]
            ),
            hide_index=True,
            use_container_width=True,
        )
    _load_more_button("cmp_overdue_pages", has_more)


def _render_expiring(limit: int, days: int) -> None:
    items, has_more, total = _load_pages(
        lambda s, p, n: s.compliance_dashboard.get_expiring_soon(days=days, page=p, limit=n),
        st.session_state["cmp_expiring_pages"], limit,
    )
    st.caption(f"{total} item(s) expiring within {days} days")
    if items:
        st.dataframe(
            pd.DataFrame(
                [
                    {
                        "Vehicle": f"{i.vehicle_type} #{i.vehicle_id}",
                        "Requirement": i.compliance_type_name,
                        "Category": i.category,
                        "Status": i.status.replace("_", " "),
                        "Expires": (i.expiry_date or "")[:10],
                        "Days left": i.days_until_expiry,
                    }
                    for i in items
                ]
            ),
            hide_index=True,
            use_container_width=True,
        )
    _load_more_button("cmp_expiring_pages", has_more)


def _render_alerts() -> None:
    f1, f2 = st.columns(2)
    status = f1.selectbox("Alert status", ["pending", "sent", "acknowledged", None],
                          format_func=lambda s: "All" if s is None else s.capitalize())
    alert_type = f2.selectbox("Alert type", [None, "expiring_soon", "expired", "overdue"],
                              format_func=lambda t: "All" if t is None else t.replace("_", " ").capitalize())
    alerts = call_api(lambda s: s.compliance_dashboard.get_alerts(status=status, alert_type=alert_type),
                      error="Failed to load alerts", default=[])
    if not alerts:
        st.caption("No alerts.")
        return
    for a in alerts:
        with st.container(border=True):
            c1, c2 = st.columns([5, 1])
            days = "" if a.days_until_expiry is None else (
                f" · {abs(a.days_until_expiry)} days overdue" if a.days_until_expiry < 0
                else f" · {a.days_until_expiry} days left"
            )
            c1.markdown(
                f"**{a.compliance_type}** · {a.vehicle_type} #{a.vehicle_id}"
                f"  \n:gray[{a.alert_type.replace('_', ' ')} · {a.category}{days}]"
            )
            if a.is_acknowledged:
                c2.caption("Acknowledged")
            elif c2.button("Acknowledge", key=f"ack_{a.alert_id}"):
                if call_api(lambda s: s.compliance_dashboard.acknowledge_alert(a.alert_id),
                            error="Failed to acknowledge alert", default=False) is not False:
                    flash("Alert acknowledged.")
                    st.rerun()


def render() -> None:
    render_breadcrumbs("/dashboard/compliance")
    st.title("🛡️ Compliance")
    ensure_defaults(STATE_DEFAULTS)
    settings = app_settings()

    stats = call_api(lambda s: s.compliance_dashboard.get_fleet_stats(), error="Failed to load statistics")
    if stats is not None:
        _render_stats(stats)

    overview, at_risk, overdue, expiring, alerts = st.tabs(
        ["By category", "Vehicles at risk", "Overdue", "Expiring soon", "Alerts"]
    )
    with overview:
        _render_categories()
    with at_risk:
        _render_at_risk(settings.page_size)
    with overdue:
        _render_overdue(settings.page_size)
    with expiring:
        _render_expiring(settings.page_size, settings.expiring_soon_days)
    with alerts:
        _render_alerts()
