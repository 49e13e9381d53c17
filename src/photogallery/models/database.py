"""
Database initialization and management for the photogallery metadata store.

This module provides functions to initialize DuckDB databases and manage
database connections.
"""

from pathlib import Path
from typing import Any

import duckdb

from ..logging_config import get_logger
from .schema import IMAGES_TABLE, REQUIRED_COLUMNS, get_schema_statements, validate_schema_compatibility

logger = get_logger(__name__)


class DatabaseManager:
    """
    Manages a DuckDB connection and the ``images`` schema.

    Used as a context manager the connection is closed on exit, so each
    metadata operation opens the file, works, and releases it.
    """

    def __init__(self, db_path: str):
        """
        Initialize DatabaseManager.

        Args:
            db_path: Path to the DuckDB database file
        """
        self.db_path = db_path
        self._connection: duckdb.DuckDBPyConnection | None = None

    def connect(self) -> duckdb.DuckDBPyConnection:
        """
        Get or create a database connection.

        Returns:
            DuckDB connection object
        """
        if self._connection is None:
            self._connection = duckdb.connect(self.db_path)
            logger.debug("database_connected", db_path=self.db_path)

        return self._connection

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.debug("database_closed", db_path=self.db_path)

    def initialize_schema(self) -> None:
        """
        Create the sequence, table and indexes if they don't exist.

        Raises:
            RuntimeError: If the schema does not match ImageRecord
            duckdb.Error: If database operations fail
        """
        if not validate_schema_compatibility():
            raise RuntimeError("Schema is not compatible with ImageRecord model")

        conn = self.connect()

        try:
            for statement in get_schema_statements():
                conn.execute(statement)
            logger.info("database_schema_initialized", db_path=self.db_path)

        except duckdb.Error as e:
            logger.error("database_schema_initialization_failed", db_path=self.db_path, error=str(e))
            raise

    def verify_schema(self) -> bool:
        """
        Verify that the ``images`` table exists with every required column.

        Returns:
            True if schema is valid, False otherwise
        """
        conn = self.connect()

        try:
            columns = conn.execute(
                "SELECT column_name FROM information_schema.columns WHERE table_name = ?", (IMAGES_TABLE,)
            ).fetchall()

            if not columns:
                logger.warning("images_table_missing", db_path=self.db_path)
                return False

            missing_columns = REQUIRED_COLUMNS - {col[0] for col in columns}
            if missing_columns:
                logger.warning("images_table_columns_missing", missing=sorted(missing_columns))
                return False

            return True

        except duckdb.Error as e:
            logger.error("schema_verification_failed", db_path=self.db_path, error=str(e))
            return False

    def execute_query(self, query: str, parameters: tuple | None = None) -> list[tuple]:
        """
        Execute a SQL query and return results.

        Args:
            query: SQL query string
            parameters: Optional query parameters

        Returns:
            List of result tuples

        Raises:
            duckdb.Error: If query execution fails
        """
        conn = self.connect()

        try:
            if parameters:
                result = conn.execute(query, parameters)
            else:
                result = conn.execute(query)

            return result.fetchall()

        except duckdb.Error as e:
            logger.error("query_failed", query=" ".join(query.split()), error=str(e))
            raise

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def create_database(db_path: str) -> DatabaseManager:
    """
    Create and initialize a new DuckDB database.

    Args:
        db_path: Path where the database file should be created

    Returns:
        Initialized DatabaseManager instance

    Raises:
        RuntimeError: If database creation fails
    """
    try:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        with DatabaseManager(db_path) as db_manager:
            db_manager.initialize_schema()

            if not db_manager.verify_schema():
                raise RuntimeError("Schema verification failed after creation")

        logger.info("database_created", db_path=db_path)
        return db_manager

    except Exception as e:
        logger.error("database_creation_failed", db_path=db_path, error=str(e))
        raise RuntimeError(f"Database creation failed: {e}") from e


def get_database_manager(db_path: str, create_if_missing: bool = True) -> DatabaseManager:
    """
    Get a DatabaseManager, optionally creating the database file first.

    Args:
        db_path: Path to the database file
        create_if_missing: Whether to create the database if it doesn't exist

    Returns:
        DatabaseManager instance

    Raises:
        FileNotFoundError: If database doesn't exist and create_if_missing is False
        RuntimeError: If database operations fail
    """
    if not Path(db_path).exists():
        if create_if_missing:
            return create_database(db_path)
        raise FileNotFoundError(f"Database file not found: {db_path}")

    with DatabaseManager(db_path) as db_manager:
        if not db_manager.verify_schema():
            logger.warning("schema_reinitializing", db_path=db_path)
            db_manager.initialize_schema()

    return db_manager
