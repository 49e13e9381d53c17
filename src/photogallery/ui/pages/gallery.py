"""Gallery page for the photogallery application."""

import streamlit as st
import structlog

from photogallery.config import load_gallery_config
from photogallery.errors import GalleryError
from photogallery.ui.components.common import render_empty_state, render_error_message
from photogallery.ui.components.gallery import render_image_grid, render_upload_form
from photogallery.ui.handlers.gallery import get_gallery_controller

logger = structlog.get_logger(__name__)


def render_gallery_page() -> None:
    """Render the upload form and the image grid."""
    try:
        controller = get_gallery_controller()
        columns = load_gallery_config().grid_columns
    except GalleryError as e:
        logger.error("gallery_setup_error", error=str(e))
        render_error_message("Configuration error", "The gallery could not be started.", str(e))
        return

    render_upload_form(controller)

    st.write("")

    if not controller.images:
        render_empty_state(
            title="No photos yet",
            description="Pick an image above and press Upload to add the first one.",
            icon="📷",
        )
        return

    render_image_grid(controller, columns=columns)
