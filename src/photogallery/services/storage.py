"""Storage service for Google Cloud Storage operations."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from urllib.parse import quote

import google.auth
import google.auth.transport.requests
from google.api_core.exceptions import PreconditionFailed
from google.auth.exceptions import GoogleAuthError
from google.cloud import storage  # type: ignore[attr-defined]
from google.cloud.exceptions import GoogleCloudError, NotFound

from ..config import DEFAULT_PUBLIC_BASE_URL, GalleryConfig
from ..errors import StorageError
from ..logging_config import get_logger
from ..models.result import Failure, Result, Success

logger = get_logger(__name__)

DEFAULT_CACHE_CONTROL = "3600"


@dataclass(frozen=True)
class UploadInfo:
    """What the bucket reported back for a stored object."""

    key: str
    size: int
    content_type: str
    uploaded_at: datetime
    generation: int | None = None


class StorageService:
    """Service for the photos bucket and the optional database bucket."""

    def __init__(
        self,
        bucket_name: str,
        project_id: str,
        database_bucket_name: str | None = None,
        public_base_url: str = DEFAULT_PUBLIC_BASE_URL,
        url_mode: str = "public",
        signed_url_expiration: int = 3600,
    ) -> None:
        """
        Initialize the storage service.

        Args:
            bucket_name: GCS bucket holding the photos
            project_id: GCP project ID
            database_bucket_name: Bucket mirroring the metadata database (optional)
            public_base_url: Endpoint public object URLs are built from
            url_mode: "public" to concatenate URLs, "signed" to sign them
            signed_url_expiration: Lifetime of signed URLs in seconds

        Raises:
            StorageError: If required settings are missing or the client cannot be created
        """
        if not bucket_name:
            raise StorageError("GCS_PHOTOS_BUCKET is required", code="missing_bucket")
        if not project_id:
            raise StorageError("GOOGLE_CLOUD_PROJECT is required", code="missing_project")

        self.photos_bucket_name = bucket_name
        self.project_id = project_id
        self.database_bucket_name = database_bucket_name
        self.public_base_url = public_base_url.rstrip("/")
        self.url_mode = url_mode
        self.signed_url_expiration = signed_url_expiration

        try:
            self.client = storage.Client(project=self.project_id)
            self.photos_bucket = self.client.bucket(self.photos_bucket_name)
            self.database_bucket = self.client.bucket(database_bucket_name) if database_bucket_name else None
        except Exception as e:
            raise StorageError(f"Failed to initialize GCS client: {e}", original_exception=e) from e

        logger.info(
            "storage_service_initialized",
            photos_bucket=self.photos_bucket_name,
            database_bucket=self.database_bucket_name,
            project_id=self.project_id,
            url_mode=self.url_mode,
        )

    @classmethod
    def from_config(cls, config: GalleryConfig) -> "StorageService":
        return cls(
            bucket_name=config.photos_bucket,
            project_id=config.project_id,
            database_bucket_name=config.database_bucket,
            public_base_url=config.public_base_url,
            url_mode=config.url_mode,
            signed_url_expiration=config.signed_url_expiration,
        )

    def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        cache_control: str = DEFAULT_CACHE_CONTROL,
        overwrite: bool = False,
        metadata: dict[str, str] | None = None,
    ) -> Result[UploadInfo]:
        """
        Write an object to the photos bucket.

        Args:
            key: Object name
            data: Object bytes
            content_type: MIME type stored with the object
            cache_control: Max age in seconds for the Cache-Control header
            overwrite: When False the write fails if ``key`` already exists
            metadata: Custom object metadata

        Returns:
            Success with the UploadInfo, or Failure with a StorageError
        """
        try:
            blob = self.photos_bucket.blob(key)
            blob.cache_control = f"max-age={cache_control}"
            blob.metadata = dict(metadata or {})

            # generation 0 only matches when no live object exists
            blob.upload_from_string(
                data,
                content_type=content_type,
                if_generation_match=None if overwrite else 0,
            )

            info = UploadInfo(
                key=key,
                size=len(data),
                content_type=content_type,
                uploaded_at=datetime.now(UTC),
                generation=blob.generation,
            )
            logger.info("object_uploaded", key=key, size=len(data), content_type=content_type)
            return Success(info)

        except PreconditionFailed as e:
            return Failure(
                StorageError(
                    f"Object already exists: {key}",
                    code="object_exists",
                    details={"key": key},
                    original_exception=e,
                )
            )
        except GoogleCloudError as e:
            return Failure(
                StorageError(f"Failed to upload '{key}': {e}", details={"key": key}, original_exception=e)
            )
        except Exception as e:
            return Failure(
                StorageError(f"Unexpected error uploading '{key}': {e}", details={"key": key}, original_exception=e)
            )

    def remove(self, key: str) -> Result[str]:
        """
        Delete an object from the photos bucket.

        A key with no object behind it counts as removed, so a record whose
        object is already gone can still be deleted.

        Returns:
            Success with the key, or Failure with a StorageError
        """
        try:
            self.photos_bucket.blob(key).delete()
            logger.info("object_removed", key=key)
            return Success(key)

        except NotFound:
            logger.warning("object_not_found_for_removal", key=key)
            return Success(key)
        except GoogleCloudError as e:
            return Failure(
                StorageError(f"Failed to remove '{key}': {e}", details={"key": key}, original_exception=e)
            )
        except Exception as e:
            return Failure(
                StorageError(f"Unexpected error removing '{key}': {e}", details={"key": key}, original_exception=e)
            )

    def exists(self, key: str) -> bool:
        """
        Check if an object exists in the photos bucket.

        Raises:
            StorageError: If the check itself fails
        """
        try:
            return bool(self.photos_bucket.blob(key).exists())
        except Exception as e:
            raise StorageError(f"Failed to check existence of '{key}': {e}", original_exception=e) from e

    def object_path(self, key: str) -> str:
        """Path of an object relative to the public endpoint: ``/<bucket>/<key>``."""
        return f"/{self.photos_bucket_name}/{quote(key)}"

    def public_url(self, key: str) -> str:
        """
        Map a storage key to a URL a browser can fetch.

        In public mode this is plain concatenation with the public endpoint.
        In signed mode a V4 signed GET URL is generated.

        Raises:
            StorageError: If a signed URL cannot be generated
        """
        if self.url_mode != "signed":
            return f"{self.public_base_url}{self.object_path(key)}"
        return self.get_signed_url(key)

    def get_signed_url(self, key: str, expiration: int | None = None) -> str:
        """
        Generate a V4 signed GET URL.

        Args:
            key: Object name
            expiration: Lifetime in seconds (defaults to the configured value)

        Raises:
            StorageError: If URL generation fails
        """
        expiration = expiration or self.signed_url_expiration
        try:
            credentials, _ = google.auth.default()
            try:
                credentials.refresh(google.auth.transport.requests.Request())
            except GoogleAuthError as e:
                # local user credentials cannot always refresh; signing may still work
                logger.debug("credentials_refresh_skipped", error=str(e))

            signed_url: str = self.photos_bucket.blob(key).generate_signed_url(
                expiration=timedelta(seconds=expiration),
                method="GET",
                version="v4",
                service_account_email=getattr(credentials, "service_account_email", None),
                access_token=getattr(credentials, "token", None),
            )
            logger.debug("signed_url_generated", key=key, expiration=expiration)
            return signed_url

        except GoogleCloudError as e:
            raise StorageError(f"Failed to generate signed URL for '{key}': {e}", original_exception=e) from e
        except Exception as e:
            raise StorageError(f"Unexpected error generating signed URL: {e}", original_exception=e) from e

    def _database_blob(self, filename: str):
        if self.database_bucket is None:
            raise StorageError("Database bucket not configured", code="missing_database_bucket")
        return self.database_bucket.blob(f"databases/{filename}")

    def database_file_exists(self, filename: str) -> bool:
        """
        Check if the mirrored database file exists.

        Raises:
            StorageError: If the bucket is not configured or the check fails
        """
        blob = self._database_blob(filename)
        try:
            return bool(blob.exists())
        except Exception as e:
            raise StorageError(f"Failed to check database file '{filename}': {e}", original_exception=e) from e

    def upload_database_file(self, filename: str, file_data: bytes) -> None:
        """
        Upload the metadata database file to the database bucket.

        Raises:
            StorageError: If upload fails
        """
        blob = self._database_blob(filename)
        try:
            blob.metadata = {"file_type": "database", "synced_at": datetime.now(UTC).isoformat()}
            blob.upload_from_string(file_data, content_type="application/octet-stream")
            logger.info("database_file_uploaded", filename=filename, file_size=len(file_data))

        except GoogleCloudError as e:
            raise StorageError(f"Failed to upload database file '{filename}': {e}", original_exception=e) from e
        except Exception as e:
            raise StorageError(
                f"Unexpected error uploading database file '{filename}': {e}", original_exception=e
            ) from e

    def download_database_file(self, filename: str) -> bytes:
        """
        Download the metadata database file from the database bucket.

        Raises:
            StorageError: If download fails
        """
        blob = self._database_blob(filename)
        try:
            file_data: bytes = blob.download_as_bytes()
            logger.info("database_file_downloaded", filename=filename, file_size=len(file_data))
            return file_data

        except NotFound as e:
            raise StorageError(f"Database file not found: {filename}", original_exception=e) from e
        except GoogleCloudError as e:
            raise StorageError(f"Failed to download database file '{filename}': {e}", original_exception=e) from e
        except Exception as e:
            raise StorageError(
                f"Unexpected error downloading database file '{filename}': {e}", original_exception=e
            ) from e
