"""
Gallery controller: the state behind the gallery page.

The controller owns the list of images shown on the page, the file currently
picked for upload and the ``uploading`` flag, and keeps them in step with the
object storage and the metadata store. Every mutation is followed by a full
reload of the list; nothing is inserted or removed locally.

Failures never reach the user. Each one is logged and the page stays as it
was. The one case that is not cleaned up is a metadata delete failing after
the object was removed: the row is left pointing at nothing and is reported
as ``dangling_reference``.
"""

import time
from collections.abc import Callable

from .config import DEFAULT_MAX_FILE_SIZE
from .errors import UploadError, ValidationError
from .logging_config import get_logger, log_user_action
from .models.image import ImageRecord, NewImage, PendingFile
from .models.result import Failure, Result, Success
from .services.metadata import MetadataService
from .services.storage import DEFAULT_CACHE_CONTROL, StorageService

logger = get_logger(__name__)


def build_storage_key(file_name: str, timestamp: float) -> str:
    """Storage key for an upload: ``<epoch-milliseconds>-<file name>``."""
    return f"{int(timestamp * 1000)}-{file_name}"


class GalleryController:
    """Keeps gallery state in sync with storage and the metadata store."""

    def __init__(
        self,
        storage_service: StorageService,
        metadata_service: MetadataService,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        clock: Callable[[], float] = time.time,
    ):
        self.storage = storage_service
        self.metadata = metadata_service
        self.max_file_size = max_file_size
        self.clock = clock

        self.images: list[ImageRecord] = []
        self.selected_file: PendingFile | None = None
        self.uploading = False
        # bumped to give the file picker a fresh widget key
        self.input_generation = 0

    @property
    def has_selected_file(self) -> bool:
        return self.selected_file is not None

    @property
    def can_upload(self) -> bool:
        return self.has_selected_file and not self.uploading

    def select_file(self, file: PendingFile | None) -> None:
        """Remember the file picked in the file input."""
        self.selected_file = file

    def clear_selection(self) -> None:
        """Forget the picked file and reset the file input."""
        self.selected_file = None
        self.input_generation += 1

    def list_images(self) -> Result[list[ImageRecord]]:
        """
        Reload the image list from the metadata store.

        On failure the previous list is kept as is.

        Returns:
            Result of the metadata store call
        """
        result = self.metadata.list_images()
        if result.ok:
            self.images = result.value
            logger.info("images_listed", count=len(self.images))
        else:
            logger.error("images_list_failed", error=str(result.error), kept_count=len(self.images))
        return result

    def upload_image(self, file: PendingFile | None = None) -> Result[ImageRecord]:
        """
        Upload a file, record its metadata and reload the list.

        Args:
            file: File to upload; defaults to the selected file

        Returns:
            Success with the new record, or Failure describing the first step that failed
        """
        if file is None:
            file = self.selected_file
        if file is None:
            return Failure(ValidationError("No file selected for upload", code="no_file_selected"))

        if self.uploading:
            logger.warning("upload_already_in_progress", file_name=file.name)
            return Failure(
                UploadError(
                    "An upload is already in progress",
                    code="upload_in_progress",
                    details={"file_name": file.name},
                )
            )

        self.uploading = True
        try:
            return self._upload(file)
        finally:
            self.uploading = False

    def _upload(self, file: PendingFile) -> Result[ImageRecord]:
        try:
            file.validate(self.max_file_size)
        except ValidationError as e:
            logger.error("image_upload_rejected", file_name=file.name, error=str(e))
            return Failure(e)

        key = build_storage_key(file.name, self.clock())

        put_result = self.storage.put(
            key,
            file.data,
            content_type=file.content_type,
            cache_control=DEFAULT_CACHE_CONTROL,
            overwrite=False,
            metadata={"size": str(file.size), "filename": file.name},
        )
        if not put_result.ok:
            logger.error("image_upload_failed", file_name=file.name, key=key, error=str(put_result.error))
            return put_result

        insert_result = self.metadata.insert_image(
            NewImage(
                file_name=file.name,
                file_size=file.size,
                url=self.storage.object_path(key),
                storage_path=key,
                content_type=file.content_type,
            )
        )
        if not insert_result.ok:
            logger.error("image_metadata_insert_failed", file_name=file.name, key=key, error=str(insert_result.error))
            self._discard_object(key)
            return insert_result

        log_user_action("image_uploaded", image_id=insert_result.value.id, key=key, file_size=file.size)

        self.list_images()
        if file is self.selected_file:
            self.clear_selection()
        return insert_result

    def _discard_object(self, key: str) -> None:
        """Remove an object whose metadata row could not be written."""
        remove_result = self.storage.remove(key)
        if remove_result.ok:
            logger.info("orphaned_object_removed", key=key)
        else:
            logger.error("orphaned_object_left", key=key, error=str(remove_result.error))

    def delete_image(self, image_id: int, storage_path: str) -> Result[int]:
        """
        Delete an image's object and metadata row, then reload the list.

        Args:
            image_id: Metadata row id
            storage_path: Storage key of the object

        Returns:
            Success with the deleted id, or Failure from the step that failed
        """
        remove_result = self.storage.remove(storage_path)
        if not remove_result.ok:
            logger.error(
                "image_delete_failed", image_id=image_id, storage_path=storage_path, error=str(remove_result.error)
            )
            return remove_result

        delete_result = self.metadata.delete_image(image_id)
        if not delete_result.ok:
            logger.error(
                "dangling_reference",
                image_id=image_id,
                storage_path=storage_path,
                error=str(delete_result.error),
            )
            return delete_result

        log_user_action("image_deleted", image_id=image_id, storage_path=storage_path)

        self.list_images()
        return Success(image_id)

    def resolve_public_url(self, storage_path: str) -> str:
        """Fetchable URL for a stored object."""
        return self.storage.public_url(storage_path)
