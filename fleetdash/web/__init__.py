"""Streamlit UI: page framework, widgets and page implementations."""
