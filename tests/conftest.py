"""
Pytest configuration and fixtures for photogallery tests.
"""

import itertools
from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from photogallery.controller import GalleryController
from photogallery.errors import DatabaseError, StorageError
from photogallery.models.image import ImageRecord, NewImage, PendingFile
from photogallery.models.result import Failure, Result, Success
from photogallery.services.metadata import MetadataService
from photogallery.services.storage import UploadInfo

# 1x1 pixel PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010802000000907753de"
    "0000000c4944415408d763f80000000001000100000000000049454e44ae426082"
)

FIXED_NOW = 1_700_000_000.0


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set up test environment variables."""
    monkeypatch.setenv("TESTING", "true")
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("GOOGLE_CLOUD_PROJECT", "test-project")
    monkeypatch.setenv("GCS_PHOTOS_BUCKET", "test-photos-bucket")
    monkeypatch.delenv("GCS_DATABASE_BUCKET", raising=False)


@pytest.fixture
def temp_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Temporary directory for database files."""
    yield tmp_path


@pytest.fixture
def sample_image_data() -> bytes:
    """Provide sample image data for testing."""
    return PNG_BYTES


class FakeStorageService:
    """In-memory stand-in for StorageService."""

    def __init__(self, bucket_name: str = "test-photos-bucket"):
        self.bucket_name = bucket_name
        self.objects: dict[str, bytes] = {}
        self.put_calls: list[dict] = []
        self.removed: list[str] = []
        self.fail_put = False
        self.fail_remove = False

    def put(
        self, key, data, content_type, cache_control="3600", overwrite=False, metadata=None
    ) -> Result[UploadInfo]:
        self.put_calls.append(
            {
                "key": key,
                "content_type": content_type,
                "cache_control": cache_control,
                "overwrite": overwrite,
                "metadata": metadata,
            }
        )
        if self.fail_put:
            return Failure(StorageError("simulated upload failure", details={"key": key}))
        if key in self.objects and not overwrite:
            return Failure(StorageError(f"Object already exists: {key}", code="object_exists"))

        self.objects[key] = data
        return Success(UploadInfo(key=key, size=len(data), content_type=content_type, uploaded_at=datetime.now(UTC)))

    def remove(self, key) -> Result[str]:
        if self.fail_remove:
            return Failure(StorageError("simulated remove failure", details={"key": key}))
        self.objects.pop(key, None)
        self.removed.append(key)
        return Success(key)

    def object_path(self, key: str) -> str:
        return f"/{self.bucket_name}/{key}"

    def public_url(self, key: str) -> str:
        return f"https://storage.example.com{self.object_path(key)}"


class FakeMetadataService:
    """In-memory stand-in for MetadataService; each insert is one second newer."""

    def __init__(self):
        self.rows: dict[int, ImageRecord] = {}
        self._ids = itertools.count(1)
        self._base_time = datetime(2024, 1, 1, tzinfo=UTC)
        self.fail_list = False
        self.fail_insert = False
        self.fail_delete = False
        self.list_calls = 0

    def list_images(self) -> Result[list[ImageRecord]]:
        self.list_calls += 1
        if self.fail_list:
            return Failure(DatabaseError("simulated list failure"))
        ordered = sorted(self.rows.values(), key=lambda r: (r.created_at, r.id), reverse=True)
        return Success(ordered)

    def insert_image(self, new_image: NewImage) -> Result[ImageRecord]:
        if self.fail_insert:
            return Failure(DatabaseError("simulated insert failure"))
        image_id = next(self._ids)
        record = ImageRecord(
            id=image_id,
            created_at=new_image.created_at or self._base_time + timedelta(seconds=image_id),
            file_name=new_image.file_name,
            file_size=new_image.file_size,
            url=new_image.url,
            storage_path=new_image.storage_path,
            content_type=new_image.content_type,
        )
        self.rows[image_id] = record
        return Success(record)

    def delete_image(self, image_id: int) -> Result[bool]:
        if self.fail_delete:
            return Failure(DatabaseError("simulated delete failure", details={"image_id": image_id}))
        return Success(self.rows.pop(image_id, None) is not None)


def make_pending_file(name: str = "cat.png", size: int = 2048, content_type: str = "image/png") -> PendingFile:
    """Build a PendingFile with ``size`` bytes of data."""
    return PendingFile(name=name, size=size, content_type=content_type, data=b"\x00" * size)


class SteppingClock:
    """Clock returning a later instant on every call."""

    def __init__(self, start: float = FIXED_NOW, step: float = 1.0):
        self.now = start
        self.step = step

    def __call__(self) -> float:
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def fake_storage() -> FakeStorageService:
    return FakeStorageService()


@pytest.fixture
def fake_metadata() -> FakeMetadataService:
    return FakeMetadataService()


@pytest.fixture
def pending_file_factory():
    """Factory for PendingFile objects."""
    return make_pending_file


@pytest.fixture
def controller(fake_storage: FakeStorageService, fake_metadata: FakeMetadataService) -> GalleryController:
    """Controller wired to in-memory collaborators."""
    return GalleryController(fake_storage, fake_metadata, max_file_size=1024 * 1024, clock=SteppingClock())


@pytest.fixture
def metadata_service(temp_dir: Path) -> MetadataService:
    """MetadataService backed by a DuckDB file in a temporary directory."""
    return MetadataService(str(temp_dir / "metadata.db"))
