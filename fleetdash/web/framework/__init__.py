"""Frontend framework layer for Streamlit UI.

This package centralizes:
- page initialization (set_page_config + CSS + sign-in gate)
- route parameters and cross-page messages
- the per-browser session store and settings
"""
