from __future__ import annotations

import altair as alt
import pandas as pd
import streamlit as st

from fleetdash.domain.rules import compliance_chart_data, vehicle_status_chart_data


def render_vehicle_status_chart(active: int, maintenance: int, inactive: int) -> None:
    """Donut of vehicle statuses; empty segments are left out."""
    rows = vehicle_status_chart_data(active, maintenance, inactive)
    if not rows:
        st.info("No vehicles yet")
        return
    df = pd.DataFrame(rows)
    df["label"] = df["percentage"].map(lambda p: f"{p}%")
    base = alt.Chart(df).encode(
        theta=alt.Theta("count:Q", stack=True),
        color=alt.Color(
            "status:N",
            scale=alt.Scale(domain=df["status"].tolist(), range=df["color"].tolist()),
            legend=alt.Legend(title=None, orient="bottom"),
        ),
        tooltip=["status", "count", alt.Tooltip("percentage:Q", format=".1f", title="%")],
    )
    donut = base.mark_arc(innerRadius=60, outerRadius=100)
    labels = base.mark_text(radius=120, size=12).encode(text="label:N")
    st.altair_chart(donut + labels, use_container_width=True)


def render_fleet_compliance_chart(compliant: int, at_risk: int, expired: int, pending: int) -> None:
    rows = compliance_chart_data(compliant, at_risk, expired, pending)
    total = sum(r["count"] for r in rows)
    if total == 0:
        st.info("No compliance records yet")
        return
    df = pd.DataFrame(rows)
    chart = (
        alt.Chart(df)
        .mark_bar(cornerRadiusTopLeft=4, cornerRadiusTopRight=4)
        .encode(
            x=alt.X("status:N", sort=None, title=None),
            y=alt.Y("count:Q", title="Requirements"),
            color=alt.Color("status:N", scale=alt.Scale(domain=df["status"].tolist(), range=df["color"].tolist()), legend=None),
            tooltip=["status", "count"],
        )
    )
    st.altair_chart(chart, use_container_width=True)
    st.caption(f"{total} compliance requirements tracked")
