"""
Models module for the photogallery application.

- ImageRecord / NewImage / PendingFile: image data classes
- Success / Failure: tagged collaborator results
- DatabaseManager: DuckDB connection and schema management
"""

from .database import DatabaseManager, create_database, get_database_manager
from .image import ImageRecord, NewImage, PendingFile
from .result import Failure, Result, Success
from .schema import get_schema_statements, validate_schema_compatibility

__all__ = [
    "ImageRecord",
    "NewImage",
    "PendingFile",
    "Success",
    "Failure",
    "Result",
    "DatabaseManager",
    "create_database",
    "get_database_manager",
    "get_schema_statements",
    "validate_schema_compatibility",
]
