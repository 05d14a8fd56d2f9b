from __future__ import annotations

import streamlit as st


def confirm_button(label: str, key: str, prompt: str, *, button_type: str = "secondary") -> bool:
    """Two-click destructive action; returns True on the run where the user confirms."""
    pending_key = f"_confirm_{key}"
    if st.session_state.get(pending_key):
        st.warning(prompt)
        yes_col, no_col = st.columns(2)
        if yes_col.button("Confirm", key=f"{key}_yes", type="primary", use_container_width=True):
            st.session_state.pop(pending_key, None)
            return True
        if no_col.button("Cancel", key=f"{key}_no", use_container_width=True):
            st.session_state.pop(pending_key, None)
            st.rerun()
        return False
    if st.button(label, key=key, type=button_type, use_container_width=True):
        st.session_state[pending_key] = True
        st.rerun()
    return False
