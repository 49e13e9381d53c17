"""
Database schema definitions for the photogallery metadata store.

One table, ``images``, with a sequence-backed integer primary key.
"""

from typing import List

IMAGES_TABLE = "images"

IMAGES_ID_SEQUENCE = "CREATE SEQUENCE IF NOT EXISTS images_id_seq START 1;"

IMAGES_TABLE_SCHEMA = """
CREATE TABLE IF NOT EXISTS images (
    id INTEGER PRIMARY KEY DEFAULT nextval('images_id_seq'),
    created_at TIMESTAMP NOT NULL DEFAULT current_timestamp,
    file_name TEXT NOT NULL,
    file_size BIGINT NOT NULL,
    url TEXT NOT NULL,
    storage_path TEXT NOT NULL UNIQUE,
    content_type TEXT NOT NULL
);
"""

IMAGES_TABLE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_images_created_at ON images(created_at);",
]

REQUIRED_COLUMNS = {"id", "created_at", "file_name", "file_size", "url", "storage_path", "content_type"}

ALL_SCHEMA_STATEMENTS = [IMAGES_ID_SEQUENCE, IMAGES_TABLE_SCHEMA] + IMAGES_TABLE_INDEXES


def get_schema_statements() -> List[str]:
    """
    Get all database schema creation statements.

    Returns:
        List of SQL statements creating the sequence, table and indexes
    """
    return ALL_SCHEMA_STATEMENTS


def validate_schema_compatibility() -> bool:
    """Check that every ImageRecord field has a column in the table definition."""
    from .image import IMAGE_COLUMNS

    schema_lower = IMAGES_TABLE_SCHEMA.lower()
    return set(IMAGE_COLUMNS) == REQUIRED_COLUMNS and all(column in schema_lower for column in REQUIRED_COLUMNS)
