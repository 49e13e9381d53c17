"""
Image models for the photogallery application.

``ImageRecord`` mirrors one row of the ``images`` table, ``NewImage`` is the
payload written after a successful upload, and ``PendingFile`` is the file a
user picked but has not uploaded yet.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from ..errors import ValidationError

IMAGE_COLUMNS = ("id", "created_at", "file_name", "file_size", "url", "storage_path", "content_type")


def _as_utc(value: datetime | str) -> datetime:
    """Normalize a timestamp from DuckDB or JSON to an aware UTC datetime."""
    if isinstance(value, str):
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        value = datetime.fromisoformat(value)

    if value.tzinfo is None:
        # DuckDB TIMESTAMP columns are naive and hold UTC
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


@dataclass
class ImageRecord:
    """One uploaded photo as stored in the metadata store."""

    id: int
    created_at: datetime
    file_name: str
    file_size: int
    url: str
    storage_path: str
    content_type: str = "application/octet-stream"

    def __post_init__(self) -> None:
        self.created_at = _as_utc(self.created_at)

    @property
    def size_kb(self) -> int:
        """Size in whole kilobytes, rounded half up like the card label."""
        return int(self.file_size / 1024 + 0.5)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "file_name": self.file_name,
            "file_size": self.file_size,
            "url": self.url,
            "storage_path": self.storage_path,
            "content_type": self.content_type,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ImageRecord":
        """
        Create an ImageRecord from a dictionary.

        Args:
            data: Mapping with the ``images`` column names as keys

        Returns:
            ImageRecord instance
        """
        return cls(
            id=int(data["id"]),
            created_at=data["created_at"],
            file_name=data["file_name"],
            file_size=int(data["file_size"]),
            url=data["url"],
            storage_path=data["storage_path"],
            content_type=data.get("content_type") or "application/octet-stream",
        )

    @classmethod
    def from_row(cls, row: tuple) -> "ImageRecord":
        """Create an ImageRecord from a row selected in ``IMAGE_COLUMNS`` order."""
        return cls.from_dict(dict(zip(IMAGE_COLUMNS, row)))

    def validate(self) -> bool:
        if self.id is None or self.id < 0:
            return False
        if not self.file_name or not self.storage_path:
            return False
        return self.file_size >= 0


@dataclass
class NewImage:
    """Metadata row to insert once the object is in storage."""

    file_name: str
    file_size: int
    url: str
    storage_path: str
    content_type: str
    created_at: datetime | None = None


@dataclass
class PendingFile:
    """A file selected in the picker, waiting for the upload button."""

    name: str
    size: int
    content_type: str
    data: bytes = field(repr=False)
    # Streamlit upload id; a new pick gets a new id even with the same name and size
    file_id: str | None = None

    @classmethod
    def from_uploaded_file(cls, uploaded_file: Any) -> "PendingFile":
        """
        Adapt a Streamlit ``UploadedFile``.

        Args:
            uploaded_file: Object with ``name``, ``type``, ``file_id`` and ``getvalue()``

        Returns:
            PendingFile holding a copy of the file bytes
        """
        data = uploaded_file.getvalue()
        return cls(
            name=uploaded_file.name,
            size=len(data),
            content_type=uploaded_file.type or "application/octet-stream",
            data=data,
            file_id=getattr(uploaded_file, "file_id", None),
        )

    def validate(self, max_file_size: int) -> None:
        """
        Check the file can be uploaded.

        Args:
            max_file_size: Largest accepted size in bytes

        Raises:
            ValidationError: If the name, type or size is not acceptable
        """
        if not self.name or not self.name.strip():
            raise ValidationError("Selected file has no name", code="missing_file_name")

        if "/" in self.name or "\\" in self.name:
            raise ValidationError(
                f"File name must not contain path separators: {self.name}",
                code="invalid_file_name",
                details={"file_name": self.name},
            )

        if not self.content_type.startswith("image/"):
            raise ValidationError(
                f"Unsupported content type '{self.content_type}' for {self.name}",
                code="unsupported_content_type",
                details={"file_name": self.name, "content_type": self.content_type},
            )

        if self.size <= 0:
            raise ValidationError(f"File is empty: {self.name}", code="empty_file", details={"file_name": self.name})

        if self.size > max_file_size:
            raise ValidationError(
                f"File too large: {self.size} bytes (max {max_file_size})",
                code="file_too_large",
                details={"file_name": self.name, "file_size": self.size, "max_file_size": max_file_size},
            )
