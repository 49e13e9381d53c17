"""
photogallery - Simple photo gallery web application with Streamlit

A single-page gallery for uploading and browsing photos:
- Photo upload and storage in Google Cloud Storage
- Metadata management with DuckDB
- Responsive card grid, newest first, with relative upload times
"""

__version__ = "0.1.0"
__author__ = "photogallery"
__description__ = "Simple photo gallery web application with Streamlit"
