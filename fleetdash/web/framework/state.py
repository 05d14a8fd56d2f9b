from __future__ import annotations

from typing import Any, Dict, Optional

import streamlit as st

from fleetdash.web.config import PAGES

NAV_PARAMS_KEY = "_nav_params"
FLASH_KEY = "_flash"


def ensure_defaults(defaults: Dict[str, Any]) -> None:
    """Ensure session_state has default values for keys."""
    for k, v in defaults.items():
        if k not in st.session_state:
            st.session_state[k] = v


def get_param(name: str) -> Optional[str]:
    """Route parameter: URL query first, then what ``navigate`` handed over."""
    value = st.query_params.get(name)
    if value:
        return str(value)
    passed = st.session_state.get(NAV_PARAMS_KEY) or {}
    value = passed.get(name)
    return None if value is None else str(value)


def get_int_param(name: str) -> Optional[int]:
    raw = get_param(name)
    try:
        return int(raw) if raw is not None else None
    except ValueError:
        return None


def navigate(page_key: str, **params: Any) -> None:
    """Switch page, carrying route parameters in the session (switch_page drops the query)."""
    st.session_state[NAV_PARAMS_KEY] = {k: v for k, v in params.items() if v is not None}
    st.switch_page(PAGES[page_key])


def flash(message: str, kind: str = "success") -> None:
    """Queue a message for the next page run (survives ``st.rerun`` and page switches)."""
    st.session_state[FLASH_KEY] = (kind, message)


def show_flash() -> None:
    queued = st.session_state.pop(FLASH_KEY, None)
    if not queued:
        return
    kind, message = queued
    {"success": st.success, "error": st.error, "warning": st.warning}.get(kind, st.info)(message)
