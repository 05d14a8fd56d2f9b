"""Streamlit-side service access."""
