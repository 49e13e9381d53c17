"""Gallery components for the photogallery application."""

import streamlit as st
import structlog

from photogallery.controller import GalleryController
from photogallery.models.image import ImageRecord

from ..handlers.gallery import (
    format_card_caption,
    get_image_url,
    handle_delete,
    handle_file_selected,
    handle_upload,
)

logger = structlog.get_logger(__name__)

# the picker filters by extension; PendingFile.validate checks the image/* MIME type
ACCEPTED_EXTENSIONS = [
    "png", "jpg", "jpeg", "jfif", "gif", "apng", "webp", "bmp",
    "tiff", "tif", "heic", "heif", "avif", "svg", "ico",
]


def render_upload_form(controller: GalleryController) -> None:
    """
    Render the file picker and the upload button.

    Args:
        controller: Session controller
    """
    with st.container(border=True):
        col1, col2 = st.columns([4, 1], vertical_alignment="bottom")

        with col1:
            uploaded_file = st.file_uploader(
                "Choose an image",
                type=ACCEPTED_EXTENSIONS,
                accept_multiple_files=False,
                disabled=controller.uploading,
                key=f"gallery_file_input_{controller.input_generation}",
                label_visibility="collapsed",
            )
            handle_file_selected(controller, uploaded_file)

        with col2:
            clicked = st.button(
                "Uploading..." if controller.uploading else "Upload",
                disabled=not controller.can_upload,
                type="primary",
                width="stretch",
                key="gallery_upload_button",
            )

    if clicked:
        with st.spinner("Uploading..."):
            uploaded = handle_upload(controller)
        logger.info("upload_button_handled", uploaded=uploaded)
        # new widget key empties the picker
        st.rerun()


def render_image_grid(controller: GalleryController, columns: int = 4) -> None:
    """
    Render the images as a grid of cards, row by row.

    Args:
        controller: Session controller holding the images to show
        columns: Number of cards per row
    """
    images = controller.images

    for i in range(0, len(images), columns):
        cols = st.columns(columns)

        for j, col in enumerate(cols):
            index = i + j
            with col:
                if index < len(images):
                    render_image_card(controller, images[index])
                else:
                    st.empty()


def render_image_card(controller: GalleryController, image: ImageRecord) -> None:
    """
    Render one card: image, file name, size and age, delete button.

    Args:
        controller: Session controller
        image: Record to render
    """
    with st.container(border=True):
        url = get_image_url(controller, image)
        if url:
            st.image(url, width="stretch")
        else:
            st.caption("🖼️ Image unavailable")

        col1, col2 = st.columns([4, 1], vertical_alignment="center")

        with col1:
            st.markdown(f"**{image.file_name}**", help=image.file_name)
            st.caption(format_card_caption(image))

        with col2:
            if st.button("🗑️", key=f"delete_{image.id}", type="secondary", help="Delete"):
                deleted = handle_delete(controller, image.id, image.storage_path)
                logger.info("delete_button_handled", image_id=image.id, deleted=deleted)
                st.rerun()
