"""Streamlit dashboard for the finance tracker API."""
