"""
Tagged results returned by the storage and metadata collaborators.

A collaborator call either succeeds with a value or fails with a
``GalleryError``; callers branch on ``result.ok`` instead of probing for
``None`` or catching library exceptions.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from ..errors import GalleryError

T = TypeVar("T")


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful collaborator call."""

    value: T

    @property
    def ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Failed collaborator call."""

    error: GalleryError

    @property
    def ok(self) -> bool:
        return False

    def unwrap(self):
        raise self.error


Result = Success[T] | Failure
