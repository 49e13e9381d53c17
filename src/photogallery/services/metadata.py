"""
Metadata service for the ``images`` table.

The metadata store is a DuckDB file. When a database bucket is configured the
file is mirrored to Google Cloud Storage: it is downloaded the first time a
session touches it and uploaded again after every write, so the store
survives restarts of the app container.

Read and write operations return tagged results (``Success``/``Failure``)
because the gallery controller decides what a failure means for the page.
Lookup helpers used by tests and maintenance code raise ``DatabaseError``.
"""

import time
from datetime import UTC, datetime
from pathlib import Path

from ..errors import DatabaseError, GalleryError
from ..logging_config import get_logger, log_performance, log_user_action
from ..models.database import DatabaseManager, create_database, get_database_manager
from ..models.image import IMAGE_COLUMNS, ImageRecord, NewImage
from ..models.result import Failure, Result, Success
from .storage import StorageService

logger = get_logger(__name__)

SELECT_COLUMNS = ", ".join(IMAGE_COLUMNS)


def _naive_utc(value: datetime) -> datetime:
    """DuckDB TIMESTAMP columns store naive UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


class MetadataService:
    """
    Service for reading and writing image metadata rows.

    Attributes:
        local_db_path: DuckDB file used for every query
        storage_service: Storage service used for mirroring (optional)
        sync_enabled: Whether writes are mirrored to the database bucket
    """

    def __init__(self, db_path: str, storage_service: StorageService | None = None, sync_enabled: bool = False):
        """
        Initialize the metadata service.

        Args:
            db_path: Path of the local DuckDB file
            storage_service: Storage service owning the database bucket
            sync_enabled: Mirror the database file to the database bucket

        Raises:
            DatabaseError: If syncing is requested without a storage service
        """
        if sync_enabled and storage_service is None:
            raise DatabaseError("Database sync requires a storage service", code="sync_misconfigured")

        self.local_db_path = Path(db_path)
        self.database_filename = self.local_db_path.name
        self.storage_service = storage_service
        self.sync_enabled = sync_enabled
        self._db_manager: DatabaseManager | None = None

        logger.info(
            "metadata_service_initialized",
            local_db_path=str(self.local_db_path),
            sync_enabled=sync_enabled,
        )

    @property
    def db_manager(self) -> DatabaseManager:
        """Get database manager, initializing if needed."""
        if self._db_manager is None:
            self._db_manager = get_database_manager(str(self.local_db_path), create_if_missing=True)
        return self._db_manager

    def ensure_local_database(self) -> bool:
        """
        Ensure the local database exists, downloading the mirror if there is one.

        Returns:
            bool: True if the database was downloaded, False if it already
            existed or was created empty

        Raises:
            DatabaseError: If database setup fails
        """
        if self.local_db_path.exists():
            return False

        try:
            if self.sync_enabled and self.storage_service.database_file_exists(self.database_filename):
                data = self.storage_service.download_database_file(self.database_filename)
                self.local_db_path.parent.mkdir(parents=True, exist_ok=True)
                self.local_db_path.write_bytes(data)
                self._db_manager = None
                logger.info("database_downloaded", path=str(self.local_db_path), size=len(data))
                return True

            self._db_manager = create_database(str(self.local_db_path))
            return False

        except GalleryError as e:
            raise DatabaseError(
                f"Failed to prepare local database: {e}", code="database_setup_failed", original_exception=e
            ) from e
        except Exception as e:
            raise DatabaseError(
                f"Failed to create local database: {e}", code="database_setup_failed", original_exception=e
            ) from e

    def sync_to_storage(self) -> bool:
        """
        Upload the local database file to the database bucket.

        Sync failures are logged and reported through the return value; the
        local write that triggered the sync already succeeded.

        Returns:
            bool: True if the file was uploaded
        """
        if not self.sync_enabled or not self.local_db_path.exists():
            return False

        try:
            self.storage_service.upload_database_file(self.database_filename, self.local_db_path.read_bytes())
            return True
        except GalleryError as e:
            logger.warning("database_sync_failed", path=str(self.local_db_path), error=str(e))
            return False
        except OSError as e:
            logger.warning("database_sync_read_failed", path=str(self.local_db_path), error=str(e))
            return False

    def list_images(self) -> Result[list[ImageRecord]]:
        """
        Fetch every image row, newest first.

        Returns:
            Success with the ordered records, or Failure with a DatabaseError
        """
        start = time.perf_counter()
        try:
            self.ensure_local_database()

            with self.db_manager as db:
                rows = db.execute_query(f"SELECT {SELECT_COLUMNS} FROM images ORDER BY created_at DESC, id DESC")

            images = [ImageRecord.from_row(row) for row in rows]
            log_performance("list_images", time.perf_counter() - start, images_count=len(images))
            return Success(images)

        except GalleryError as e:
            return Failure(e)
        except Exception as e:
            return Failure(DatabaseError(f"Failed to list images: {e}", code="list_failed", original_exception=e))

    def insert_image(self, new_image: NewImage) -> Result[ImageRecord]:
        """
        Insert a metadata row for an uploaded object.

        Args:
            new_image: Row payload; ``created_at`` defaults to now (UTC)

        Returns:
            Success with the stored record (id assigned), or Failure
        """
        created_at = _naive_utc(new_image.created_at or datetime.now(UTC))
        try:
            self.ensure_local_database()

            with self.db_manager as db:
                rows = db.execute_query(
                    f"""INSERT INTO images (created_at, file_name, file_size, url, storage_path, content_type)
                        VALUES (?, ?, ?, ?, ?, ?)
                        RETURNING {SELECT_COLUMNS}""",
                    (
                        created_at,
                        new_image.file_name,
                        new_image.file_size,
                        new_image.url,
                        new_image.storage_path,
                        new_image.content_type,
                    ),
                )

            record = ImageRecord.from_row(rows[0])
            log_user_action(
                "image_metadata_saved",
                image_id=record.id,
                file_name=record.file_name,
                file_size=record.file_size,
            )
            self.sync_to_storage()
            return Success(record)

        except GalleryError as e:
            return Failure(e)
        except Exception as e:
            return Failure(
                DatabaseError(
                    f"Failed to insert image metadata: {e}",
                    code="insert_failed",
                    details={"storage_path": new_image.storage_path},
                    original_exception=e,
                )
            )

    def delete_image(self, image_id: int) -> Result[bool]:
        """
        Delete the metadata row with the given id.

        Deleting an id that is not in the table succeeds with ``False``.

        Returns:
            Success with whether a row was removed, or Failure
        """
        try:
            self.ensure_local_database()

            with self.db_manager as db:
                rows = db.execute_query("DELETE FROM images WHERE id = ? RETURNING id", (image_id,))

            deleted = bool(rows)
            if deleted:
                log_user_action("image_metadata_deleted", image_id=image_id)
                self.sync_to_storage()
            else:
                logger.warning("image_not_found_for_deletion", image_id=image_id)
            return Success(deleted)

        except GalleryError as e:
            return Failure(e)
        except Exception as e:
            return Failure(
                DatabaseError(
                    f"Failed to delete image metadata: {e}",
                    code="delete_failed",
                    details={"image_id": image_id},
                    original_exception=e,
                )
            )

    def get_image(self, image_id: int) -> ImageRecord | None:
        """
        Get one image row by id.

        Raises:
            DatabaseError: If the lookup fails
        """
        try:
            self.ensure_local_database()
            with self.db_manager as db:
                rows = db.execute_query(f"SELECT {SELECT_COLUMNS} FROM images WHERE id = ?", (image_id,))
            return ImageRecord.from_row(rows[0]) if rows else None

        except GalleryError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to get image {image_id}: {e}", original_exception=e) from e

    def count_images(self) -> int:
        """
        Count image rows.

        Raises:
            DatabaseError: If the count fails
        """
        try:
            self.ensure_local_database()
            with self.db_manager as db:
                rows = db.execute_query("SELECT COUNT(*) FROM images")
            return int(rows[0][0]) if rows else 0

        except GalleryError:
            raise
        except Exception as e:
            raise DatabaseError(f"Failed to count images: {e}", original_exception=e) from e
