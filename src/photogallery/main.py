"""
Main Streamlit application for photogallery.

Run with ``streamlit run src/photogallery/main.py``.
"""

import streamlit as st

from photogallery.config import get_debug_mode
from photogallery.logging_config import configure_structured_logging, get_logger
from photogallery.ui.components.common import render_footer, render_header
from photogallery.ui.pages.gallery import render_gallery_page

configure_structured_logging()
logger = get_logger(__name__)


def main() -> None:
    """Main application entry point."""
    st.set_page_config(
        page_title="Photo Gallery",
        page_icon="📸",
        layout="wide",
        menu_items={
            "Get Help": None,
            "Report a bug": None,
            "About": "photogallery - upload and browse photos",
        },
    )

    render_header()

    with st.container():
        render_gallery_page()

    render_footer()

    if get_debug_mode():
        with st.expander("Debug Info"):
            controller = st.session_state.get("gallery_controller")
            if controller is not None:
                st.write(
                    {
                        "images": len(controller.images),
                        "selected_file": controller.selected_file.name if controller.selected_file else None,
                        "uploading": controller.uploading,
                        "input_generation": controller.input_generation,
                    }
                )


if __name__ == "__main__":
    main()
