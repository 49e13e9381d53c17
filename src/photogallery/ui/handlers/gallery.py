"""Gallery handlers for the photogallery application."""

import math
from datetime import UTC, datetime
from typing import Any

import streamlit as st
import structlog

from photogallery.config import GalleryConfig, load_gallery_config
from photogallery.controller import GalleryController
from photogallery.errors import GalleryError
from photogallery.models.image import ImageRecord, PendingFile
from photogallery.services.metadata import MetadataService
from photogallery.services.storage import StorageService

logger = structlog.get_logger(__name__)

CONTROLLER_KEY = "gallery_controller"

MINUTES_IN_DAY = 1440
MINUTES_IN_ALMOST_TWO_DAYS = 2520
MINUTES_IN_MONTH = 43200
MINUTES_IN_TWO_MONTHS = 86400


def build_gallery_controller(config: GalleryConfig) -> GalleryController:
    """
    Construct the storage and metadata clients and the controller using them.

    Args:
        config: Settings snapshot read at session start

    Returns:
        GalleryController: Controller with an empty image list
    """
    storage_service = StorageService.from_config(config)
    metadata_service = MetadataService(
        config.database_path,
        storage_service=storage_service,
        sync_enabled=config.sync_enabled,
    )
    return GalleryController(storage_service, metadata_service, max_file_size=config.max_file_size)


def get_gallery_controller() -> GalleryController:
    """
    Get this session's controller, creating and loading it on first use.

    Returns:
        GalleryController: Controller stored in the Streamlit session state
    """
    if CONTROLLER_KEY not in st.session_state:
        controller = build_gallery_controller(load_gallery_config())
        controller.list_images()
        st.session_state[CONTROLLER_KEY] = controller
        logger.info("gallery_session_started", images_count=len(controller.images))

    return st.session_state[CONTROLLER_KEY]


def handle_file_selected(controller: GalleryController, uploaded_file: Any) -> None:
    """
    Sync the picker's current value into the controller.

    Args:
        controller: Session controller
        uploaded_file: Streamlit ``UploadedFile`` or None when the picker is empty
    """
    if uploaded_file is None:
        controller.select_file(None)
        return

    selected = controller.selected_file
    if selected is not None and selected.file_id is not None and selected.file_id == uploaded_file.file_id:
        return

    controller.select_file(PendingFile.from_uploaded_file(uploaded_file))
    logger.debug("file_selected", file_name=uploaded_file.name, size=uploaded_file.size, file_id=uploaded_file.file_id)


def handle_upload(controller: GalleryController) -> bool:
    """
    Run the upload for the selected file.

    Returns:
        bool: True if the upload went through
    """
    return controller.upload_image().ok


def handle_delete(controller: GalleryController, image_id: int, storage_path: str) -> bool:
    """
    Run the delete for one card.

    Returns:
        bool: True if both the object and the row were removed
    """
    return controller.delete_image(image_id, storage_path).ok


def get_image_url(controller: GalleryController, image: ImageRecord) -> str | None:
    """
    Resolve the URL an image card displays.

    Returns:
        str: URL, or None if it could not be resolved
    """
    try:
        return controller.resolve_public_url(image.storage_path)
    except GalleryError as e:
        logger.error("image_url_resolution_failed", image_id=image.id, storage_path=image.storage_path, error=str(e))
        return None


def _js_round(value: float) -> int:
    """Round half up, the way the relative-time thresholds are defined."""
    return math.floor(value + 0.5)


def _months_between(earlier: datetime, later: datetime) -> int:
    """Whole calendar months from ``earlier`` to ``later``."""
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    later_rest = (later.day, later.hour, later.minute, later.second, later.microsecond)
    earlier_rest = (earlier.day, earlier.hour, earlier.minute, earlier.second, earlier.microsecond)
    if months > 0 and later_rest < earlier_rest:
        months -= 1
    return months


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}" if count == 1 else f"{count} {unit}s"


def format_distance(earlier: datetime, later: datetime) -> str:
    """
    Describe the distance between two instants in words.

    Uses the same thresholds as date-fns ``formatDistance``: "less than a
    minute", "5 minutes", "about 3 hours", "2 days", "about 1 month",
    "over 1 year"...

    Args:
        earlier: Start instant
        later: End instant (must not be before ``earlier``)

    Returns:
        str: Distance without a suffix
    """
    seconds = int((later - earlier).total_seconds())
    minutes = _js_round(seconds / 60)

    if minutes < 2:
        return "less than a minute" if minutes == 0 else "1 minute"
    if minutes < 45:
        return _plural(minutes, "minute")
    if minutes < 90:
        return "about 1 hour"
    if minutes < MINUTES_IN_DAY:
        return f"about {_plural(_js_round(minutes / 60), 'hour')}"
    if minutes < MINUTES_IN_ALMOST_TWO_DAYS:
        return "1 day"
    if minutes < MINUTES_IN_MONTH:
        return _plural(_js_round(minutes / MINUTES_IN_DAY), "day")
    if minutes < MINUTES_IN_TWO_MONTHS:
        return f"about {_plural(_js_round(minutes / MINUTES_IN_MONTH), 'month')}"

    months = _months_between(earlier, later)
    if months < 12:
        return _plural(max(1, _js_round(minutes / MINUTES_IN_MONTH)), "month")

    years, months_into_year = divmod(months, 12)
    if months_into_year < 3:
        return f"about {_plural(years, 'year')}"
    if months_into_year < 9:
        return f"over {_plural(years, 'year')}"
    return f"almost {_plural(years + 1, 'year')}"


def format_relative_time(created_at: datetime, now: datetime | None = None) -> str:
    """
    Relative label for a card, e.g. "5 minutes ago" or "in about 1 hour".

    Args:
        created_at: Record creation time (naive values are taken as UTC)
        now: Reference instant, defaults to the current time

    Returns:
        str: Relative time with suffix
    """
    now = now or datetime.now(UTC)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=UTC)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    if created_at <= now:
        return f"{format_distance(created_at, now)} ago"
    return f"in {format_distance(now, created_at)}"


def format_card_caption(image: ImageRecord, now: datetime | None = None) -> str:
    """Caption under the file name: ``"<KB> KB • <relative time>"``."""
    return f"{image.size_kb} KB • {format_relative_time(image.created_at, now)}"
