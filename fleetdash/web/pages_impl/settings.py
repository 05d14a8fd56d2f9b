from __future__ import annotations

import streamlit as st

from fleetdash.domain.rules import public_vehicle_url
from fleetdash.web.components.breadcrumbs import render_breadcrumbs
from fleetdash.web.components.sidebar import logout
from fleetdash.web.config import PAGES, page_url_path
from fleetdash.web.framework.state import flash
from fleetdash.web.framework.user_context import app_settings, get_session_store, get_user_context
from fleetdash.web.services.api_bridge import call_api


def _render_tenant_form() -> None:
    tenant = call_api(lambda s: s.tenant.get_current_tenant(), error="Failed to load business profile")
    if tenant is None:
        return
    with st.form("tenant_profile"):
        name = st.text_input("Business name", value=tenant.name)
        email = st.text_input("Business email", value=tenant.email)
        c1, c2 = st.columns(2)
        phone = c1.text_input("Phone", value=tenant.phone or "")
        address = c2.text_input("Address", value=tenant.address or "")
        submitted = st.form_submit_button("Save profile", type="primary")
    if tenant.subscription_plan:
        ends = f" (until {tenant.subscription_ends_at[:10]})" if tenant.subscription_ends_at else ""
        st.caption(f"Plan: {tenant.subscription_plan}{ends}")
    if tenant.public_token:
        grid_url = f"{app_settings().public_base_url.rstrip('/')}/{page_url_path('qr_grid')}?tenant={tenant.public_token}"
        st.markdown(f"Printable QR sheet: [{grid_url}]({grid_url})")

    if not submitted:
        return
    changes = {"name": name.strip(), "email": email.strip(), "phone": phone or None, "address": address or None}
    if call_api(lambda s: s.tenant.update_tenant(changes), error="Failed to update business profile") is not None:
        flash("Business profile updated.")
        st.rerun()


def render() -> None:
    render_breadcrumbs("/dashboard/settings")
    st.title("⚙️ Settings")
    settings = app_settings()
    ctx = get_user_context()

    profile, session = st.tabs(["Business profile", "Session"])
    with profile:
        _render_tenant_form()

    with session:
        if ctx.user:
            st.markdown(f"**{ctx.user.name}** · {ctx.user.email}")
            if ctx.user.role:
                st.caption(f"Role: {ctx.user.role}")
        store = get_session_store()
        st.json(
            {
                "api_url": settings.api_url,
                "public_base_url": settings.public_base_url,
                "session_file": str(store.path) if store.path else "(memory only)",
                "sample_public_url": public_vehicle_url(settings.public_base_url, "<token>"),
            },
            expanded=False,
        )
        if st.button("🚪 Sign out", type="primary"):
            logout()
        st.page_link(PAGES["dashboard"], label="Back to dashboard", icon="📊")
