from __future__ import annotations

import streamlit as st

from fleetdash.web.config import PAGES
from fleetdash.web.framework.state import flash
from fleetdash.web.framework.user_context import app_settings, get_user_context
from fleetdash.web.services.api_bridge import call_api, run_api


def _handle_oauth_callback() -> None:
    """``?token=`` / ``?error=`` from the Google redirect."""
    query = {k: st.query_params.get(k) for k in ("token", "error")}
    if not any(query.values()):
        return

    async def complete(s):
        return s.auth.complete_oauth_callback(query)

    result = run_api(complete)
    st.query_params.clear()
    if result.succeeded:
        flash("Signed in with Google.")
        st.switch_page(PAGES["dashboard"])
    st.error(f"Google sign-in failed: {result.error or 'no token returned'}")


def _render_login_form() -> None:
    with st.form("login_form"):
        email = st.text_input("Email", placeholder="you@company.com")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign in", type="primary", use_container_width=True)

    if not submitted:
        return
    if not email or not password:
        st.error("Email and password are required.")
        return
    result = call_api(lambda s: s.auth.login(email, password), error="Sign-in failed")
    if result is None:
        return
    if result.success and result.token:
        flash(f"Welcome back, {result.user.name if result.user else email}!")
        st.switch_page(PAGES["dashboard"])
    st.error(result.message or "Invalid credentials")


def render() -> None:
    settings = app_settings()
    _handle_oauth_callback()

    ctx = get_user_context()
    st.title(f"🚚 {settings.app_name}")
    st.caption("Fleet compliance, documents and QR lookups in one place.")

    if ctx.authenticated:
        st.success(f"Signed in as {ctx.display_name}.")
        st.page_link(PAGES["dashboard"], label="Open the dashboard", icon="📊")
        return

    left, right = st.columns([3, 2])
    with left:
        st.subheader("Sign in")
        _render_login_form()

        google_url = call_api(
            _google_url,
            error="Google sign-in unavailable",
            default=None,
        )
        if google_url:
            st.link_button("Continue with Google", google_url, use_container_width=True)

    with right:
        st.subheader("New here?")
        st.markdown(
            "Register your business to start tracking vehicles, "
            "compliance requirements and documents."
        )
        st.page_link(PAGES["register_business"], label="Register your business", icon="🏢")


async def _google_url(s) -> str:
    return s.auth.google_login_url()
