from __future__ import annotations

import streamlit as st

from fleetdash.web.components.notification_bell import render_notification_bell
from fleetdash.web.config import PAGES
from fleetdash.web.framework.state import flash
from fleetdash.web.framework.user_context import get_user_context
from fleetdash.web.services.api_bridge import call_api


def logout() -> None:
    call_api(lambda s: s.auth.logout(), error="Sign-out failed", toast=True)
    flash("You have been signed out.", "info")
    st.switch_page(PAGES["home"])


def render_sidebar() -> None:
    """Signed-in user, tenant, notification bell and sign-out."""
    ctx = get_user_context()
    with st.sidebar:
        initial = ctx.user.initial if ctx.user else "U"
        st.markdown(f"**{initial} · {ctx.display_name}**")
        if ctx.user and ctx.user.email:
            st.caption(ctx.user.email)
        if ctx.tenant and ctx.tenant.name:
            st.caption(f"🏢 {ctx.tenant.name}")
    render_notification_bell()
    with st.sidebar:
        if st.button("🚪 Sign out", key="sidebar_logout", use_container_width=True):
            logout()
