"""Streamlit user interface for the photogallery application."""
