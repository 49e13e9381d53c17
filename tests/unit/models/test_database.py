"""
Tests for database initialization and management.
"""

from pathlib import Path
from unittest.mock import patch

import duckdb
import pytest

from photogallery.models.database import DatabaseManager, create_database, get_database_manager
from photogallery.models.schema import (
    IMAGES_TABLE,
    REQUIRED_COLUMNS,
    get_schema_statements,
    validate_schema_compatibility,
)


class TestSchema:
    """Test cases for schema definitions."""

    def test_schema_matches_image_record(self):
        assert validate_schema_compatibility()

    def test_statements_create_sequence_before_table(self):
        statements = get_schema_statements()

        assert "CREATE SEQUENCE" in statements[0]
        assert f"CREATE TABLE IF NOT EXISTS {IMAGES_TABLE}" in statements[1]
        assert any("idx_images_created_at" in s for s in statements)


class TestDatabaseManager:
    """Test cases for DatabaseManager."""

    def test_create_database(self, temp_dir: Path):
        """A new file gets the images table with every column."""
        db_path = str(temp_dir / "nested" / "metadata.db")

        manager = create_database(db_path)

        assert Path(db_path).exists()
        with manager as db:
            assert db.verify_schema()
            columns = db.execute_query(
                "SELECT column_name FROM information_schema.columns WHERE table_name = ?", (IMAGES_TABLE,)
            )
        assert {c[0] for c in columns} == REQUIRED_COLUMNS

    def test_initialize_schema_is_idempotent(self, temp_dir: Path):
        db_path = str(temp_dir / "metadata.db")
        create_database(db_path)

        with DatabaseManager(db_path) as db:
            db.initialize_schema()
            assert db.verify_schema()

    def test_ids_come_from_sequence(self, temp_dir: Path):
        """Inserted rows get increasing ids without passing one."""
        with create_database(str(temp_dir / "metadata.db")) as db:
            ids = [
                db.execute_query(
                    "INSERT INTO images (file_name, file_size, url, storage_path, content_type) "
                    "VALUES (?, ?, ?, ?, ?) RETURNING id",
                    (name, 1, f"/b/{name}", name, "image/png"),
                )[0][0]
                for name in ["a.png", "b.png"]
            ]

        assert ids == [1, 2]

    def test_storage_path_is_unique(self, temp_dir: Path):
        with create_database(str(temp_dir / "metadata.db")) as db:
            insert = (
                "INSERT INTO images (file_name, file_size, url, storage_path, content_type) VALUES (?, ?, ?, ?, ?)"
            )
            db.execute_query(insert, ("a.png", 1, "/b/k", "k", "image/png"))

            with pytest.raises(duckdb.ConstraintException):
                db.execute_query(insert, ("b.png", 1, "/b/k", "k", "image/png"))

    def test_verify_schema_missing_table(self, temp_dir: Path):
        with DatabaseManager(str(temp_dir / "empty.db")) as db:
            assert not db.verify_schema()

    def test_context_manager_closes_connection(self, temp_dir: Path):
        db = DatabaseManager(str(temp_dir / "metadata.db"))
        with db:
            db.connect()
            assert db._connection is not None

        assert db._connection is None

    def test_execute_query_propagates_errors(self, temp_dir: Path):
        with DatabaseManager(str(temp_dir / "metadata.db")) as db:
            with pytest.raises(duckdb.Error):
                db.execute_query("SELECT * FROM missing_table")

    def test_create_database_wraps_errors(self, temp_dir: Path):
        with patch("photogallery.models.database.validate_schema_compatibility", return_value=False):
            with pytest.raises(RuntimeError, match="Database creation failed"):
                create_database(str(temp_dir / "metadata.db"))


class TestGetDatabaseManager:
    """Test cases for get_database_manager."""

    def test_missing_file_without_create(self, temp_dir: Path):
        with pytest.raises(FileNotFoundError):
            get_database_manager(str(temp_dir / "missing.db"), create_if_missing=False)

    def test_missing_file_is_created(self, temp_dir: Path):
        db_path = temp_dir / "metadata.db"

        get_database_manager(str(db_path))

        assert db_path.exists()

    def test_existing_file_without_schema_is_repaired(self, temp_dir: Path):
        """A file missing the images table gets the schema on open."""
        db_path = str(temp_dir / "metadata.db")
        conn = duckdb.connect(db_path)
        conn.execute("CREATE TABLE other (x INTEGER)")
        conn.close()

        with get_database_manager(db_path) as db:
            assert db.verify_schema()
