"""Configuration management for the photogallery application.

Values come from environment variables, with Streamlit secrets as fallback.
``GalleryConfig`` snapshots everything the storage and metadata clients need
so they can be constructed explicitly instead of reaching for globals.
"""

import os
from dataclasses import dataclass
from typing import Any

try:
    import streamlit as st

    STREAMLIT_AVAILABLE = True
except ImportError:
    STREAMLIT_AVAILABLE = False

from .errors import ConfigurationError
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_PUBLIC_BASE_URL = "https://storage.googleapis.com"
DEFAULT_DATABASE_PATH = "/tmp/photogallery/metadata.db"  # nosec B108
DEFAULT_MAX_FILE_SIZE = 50 * 1024 * 1024
URL_MODES = ("public", "signed")


class Config:
    """Environment-backed configuration with typed casting and caching."""

    def __init__(self):
        self._cache = {}

    def get(self, key: str, default: Any = None, cast_type: type = str) -> Any:
        """Get configuration value from environment variables or Streamlit secrets.

        Args:
            key: Configuration key
            default: Default value if not found
            cast_type: Type to cast the value to (str, int, bool, float)

        Returns:
            Configuration value cast to the specified type
        """
        cache_key = f"{key}:{cast_type.__name__}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        value = os.getenv(key)

        if value is None and STREAMLIT_AVAILABLE:
            try:
                value = st.secrets.get(key)
            except Exception:  # nosec B110
                # No secrets.toml, or not running inside Streamlit
                pass

        if value is None:
            value = default

        if value is not None:
            try:
                if cast_type is bool:
                    if isinstance(value, str):
                        value = value.lower() in ("true", "1", "yes", "on")  # type: ignore[assignment]
                    else:
                        value = bool(value)  # type: ignore[assignment]
                elif cast_type is not str:
                    value = cast_type(value)
            except (ValueError, TypeError) as e:
                logger.warning("config_cast_failed", key=key, cast_type=cast_type.__name__, error=str(e))
                value = default

        self._cache[cache_key] = value
        return value

    def get_required(self, key: str, cast_type: type = str) -> Any:
        """Get required configuration value.

        Raises:
            ConfigurationError: If the value is not set anywhere
        """
        value = self.get(key, cast_type=cast_type)
        if value is None or value == "":
            raise ConfigurationError(f"Required configuration '{key}' not found", details={"key": key})
        return value

    def is_development(self) -> bool:
        """Check if running in development mode."""
        environment = self.get("ENVIRONMENT", "development").lower()
        return environment in ["development", "dev", "local"]

    def clear_cache(self):
        """Clear configuration cache."""
        self._cache.clear()


@dataclass(frozen=True)
class GalleryConfig:
    """Settings needed to build the gallery's collaborators."""

    project_id: str
    photos_bucket: str
    database_bucket: str | None = None
    public_base_url: str = DEFAULT_PUBLIC_BASE_URL
    url_mode: str = "public"
    signed_url_expiration: int = 3600
    database_path: str = DEFAULT_DATABASE_PATH
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    grid_columns: int = 4

    @property
    def sync_enabled(self) -> bool:
        """Whether the metadata database is mirrored to a bucket."""
        return bool(self.database_bucket)

    @classmethod
    def from_config(cls, config: Config) -> "GalleryConfig":
        """Build a snapshot from a ``Config`` instance.

        Raises:
            ConfigurationError: If required keys are missing or values are invalid
        """
        url_mode = str(config.get("GALLERY_URL_MODE", "public")).lower()
        if url_mode not in URL_MODES:
            raise ConfigurationError(
                f"GALLERY_URL_MODE must be one of {URL_MODES}, got '{url_mode}'",
                details={"key": "GALLERY_URL_MODE", "value": url_mode},
            )

        grid_columns = config.get("GALLERY_GRID_COLUMNS", 4, int)
        if grid_columns < 1:
            raise ConfigurationError("GALLERY_GRID_COLUMNS must be at least 1", details={"value": grid_columns})

        return cls(
            project_id=str(config.get_required("GOOGLE_CLOUD_PROJECT")),
            photos_bucket=str(config.get_required("GCS_PHOTOS_BUCKET")),
            database_bucket=config.get("GCS_DATABASE_BUCKET") or None,
            public_base_url=str(config.get("GALLERY_PUBLIC_BASE_URL", DEFAULT_PUBLIC_BASE_URL)).rstrip("/"),
            url_mode=url_mode,
            signed_url_expiration=config.get("GCS_SIGNED_URL_EXPIRATION", 3600, int),
            database_path=str(config.get("GALLERY_DATABASE_PATH", DEFAULT_DATABASE_PATH)),
            max_file_size=config.get("GALLERY_MAX_FILE_SIZE", DEFAULT_MAX_FILE_SIZE, int),
            grid_columns=grid_columns,
        )


_config: Config | None = None


def get_config() -> Config:
    """Get the process-wide configuration reader."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def load_gallery_config() -> GalleryConfig:
    """Read the gallery settings once, at session start."""
    return GalleryConfig.from_config(get_config())


def get_debug_mode() -> bool:
    """Get debug mode setting."""
    config = get_config()
    return bool(config.get("DEBUG", False, bool)) or config.is_development()
