"""
Services module for the photogallery application.

- StorageService: Google Cloud Storage operations (photos and database mirror)
- MetadataService: DuckDB metadata store for the images table
"""

from .metadata import MetadataService
from .storage import StorageService, UploadInfo

__all__ = [
    "MetadataService",
    "StorageService",
    "UploadInfo",
]
