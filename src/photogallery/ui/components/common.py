"""Reusable UI components for the photogallery application."""

import streamlit as st
import structlog

from photogallery import __version__

logger = structlog.get_logger()


def render_header() -> None:
    """Render the application header."""
    st.markdown("# 📸 Photo Gallery")
    st.divider()


def render_empty_state(title: str, description: str, icon: str = "📭") -> None:
    """
    Render an empty state message.

    Args:
        title: Main title for the empty state
        description: Description text
        icon: Emoji icon to display
    """
    col1, col2, col3 = st.columns([1, 2, 1])

    with col2:
        st.markdown(
            f"""
        <div style='text-align: center; padding: 2rem 0;'>
            <div style='font-size: 4rem; margin-bottom: 1rem;'>{icon}</div>
            <h3 style='color: #666; margin-bottom: 1rem;'>{title}</h3>
            <p style='color: #888; margin-bottom: 2rem;'>{description}</p>
        </div>
        """,
            unsafe_allow_html=True,
        )


def render_error_message(error_type: str, message: str, details: str | None = None) -> None:
    """
    Render a standardized error message.

    Only used for startup problems such as missing configuration; gallery
    operations fail silently.

    Args:
        error_type: Short error title
        message: Main error message
        details: Additional error details (optional)
    """
    st.error(f"**{error_type}:** {message}")

    if details:
        with st.expander("🔍 Details"):
            st.code(details)


def render_footer() -> None:
    """Render the application footer."""
    st.divider()
    st.markdown(
        f"""
    <div style='text-align: center; color: #666; font-size: 0.8em;'>
        <strong>photogallery v{__version__}</strong>
    </div>
    """,
        unsafe_allow_html=True,
    )
