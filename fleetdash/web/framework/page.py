from __future__ import annotations

from dataclasses import dataclass

import streamlit as st

from fleetdash.web.config import PAGE_TITLE_PREFIX, PAGES
from fleetdash.web.framework.state import show_flash
from fleetdash.web.framework.user_context import app_settings, is_authenticated


@dataclass(frozen=True)
class PageSpec:
    title: str
    icon: str
    layout: str = "wide"
    sidebar_state: str = "expanded"
    # public pages (QR lookups, sign-in, registration) skip the sign-in gate
    public: bool = False


def init_page(spec: PageSpec, *, apply_style: bool = True, show_sidebar_header: bool = True) -> None:
    """Initialize a Streamlit page in a consistent way.

    NOTE: This must be called before any other Streamlit command on a page.
    Private pages stop here with a sign-in link when no session is stored.
    """
    st.set_page_config(
        page_title=PAGE_TITLE_PREFIX + spec.title,
        page_icon=spec.icon,
        layout=spec.layout,
        initial_sidebar_state=spec.sidebar_state,
    )
    app_settings()

    if apply_style:
        from fleetdash.web.styles import load_fleet_style

        load_fleet_style()

    if show_sidebar_header:
        from fleetdash.web.styles import render_sidebar_header

        render_sidebar_header()

    if not spec.public:
        require_login()
        from fleetdash.web.components.sidebar import render_sidebar

        render_sidebar()

    show_flash()


def require_login() -> None:
    if is_authenticated():
        return
    st.warning("Please sign in to continue.")
    st.page_link(PAGES["home"], label="Go to sign in", icon="🔐")
    st.stop()


__all__ = ["PageSpec", "init_page", "require_login"]
