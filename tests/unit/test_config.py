"""
Unit tests for configuration management.
"""

import pytest

from photogallery import config as config_module
from photogallery.config import (
    DEFAULT_DATABASE_PATH,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_PUBLIC_BASE_URL,
    Config,
    GalleryConfig,
    get_config,
    get_debug_mode,
    load_gallery_config,
)
from photogallery.errors import ConfigurationError


@pytest.fixture(autouse=True)
def no_streamlit_secrets(monkeypatch: pytest.MonkeyPatch):
    """Read configuration from the environment only."""
    monkeypatch.setattr(config_module, "STREAMLIT_AVAILABLE", False)
    monkeypatch.setattr(config_module, "_config", None)


class TestConfig:
    """Test cases for Config."""

    def test_get_string(self, monkeypatch):
        monkeypatch.setenv("SOME_KEY", "value")

        assert Config().get("SOME_KEY") == "value"

    def test_get_default(self):
        assert Config().get("MISSING_KEY", "fallback") == "fallback"

    @pytest.mark.parametrize("raw,expected", [("true", True), ("1", True), ("on", True), ("false", False), ("no", False)])
    def test_get_bool(self, monkeypatch, raw, expected):
        monkeypatch.setenv("FLAG", raw)

        assert Config().get("FLAG", False, bool) is expected

    def test_get_int(self, monkeypatch):
        monkeypatch.setenv("NUMBER", "42")

        assert Config().get("NUMBER", 0, int) == 42

    def test_cast_failure_uses_default(self, monkeypatch):
        monkeypatch.setenv("NUMBER", "many")

        assert Config().get("NUMBER", 7, int) == 7

    def test_values_are_cached(self, monkeypatch):
        config = Config()
        monkeypatch.setenv("CACHED", "first")
        assert config.get("CACHED") == "first"

        monkeypatch.setenv("CACHED", "second")
        assert config.get("CACHED") == "first"

        config.clear_cache()
        assert config.get("CACHED") == "second"

    def test_get_required_missing(self):
        with pytest.raises(ConfigurationError, match="Required configuration 'MISSING_KEY' not found"):
            Config().get_required("MISSING_KEY")

    def test_get_required_empty(self, monkeypatch):
        monkeypatch.setenv("EMPTY_KEY", "")

        with pytest.raises(ConfigurationError):
            Config().get_required("EMPTY_KEY")

    @pytest.mark.parametrize("environment,expected", [("development", True), ("local", True), ("production", False)])
    def test_is_development(self, monkeypatch, environment, expected):
        monkeypatch.setenv("ENVIRONMENT", environment)

        assert Config().is_development() is expected


class TestGalleryConfig:
    """Test cases for GalleryConfig."""

    def test_defaults(self):
        gallery_config = GalleryConfig.from_config(Config())

        assert gallery_config.project_id == "test-project"
        assert gallery_config.photos_bucket == "test-photos-bucket"
        assert gallery_config.database_bucket is None
        assert gallery_config.sync_enabled is False
        assert gallery_config.public_base_url == DEFAULT_PUBLIC_BASE_URL
        assert gallery_config.url_mode == "public"
        assert gallery_config.signed_url_expiration == 3600
        assert gallery_config.database_path == DEFAULT_DATABASE_PATH
        assert gallery_config.max_file_size == DEFAULT_MAX_FILE_SIZE
        assert gallery_config.grid_columns == 4

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("GCS_DATABASE_BUCKET", "test-database-bucket")
        monkeypatch.setenv("GALLERY_PUBLIC_BASE_URL", "https://cdn.example.com/")
        monkeypatch.setenv("GALLERY_URL_MODE", "SIGNED")
        monkeypatch.setenv("GCS_SIGNED_URL_EXPIRATION", "600")
        monkeypatch.setenv("GALLERY_DATABASE_PATH", "/data/gallery.db")
        monkeypatch.setenv("GALLERY_MAX_FILE_SIZE", "1024")
        monkeypatch.setenv("GALLERY_GRID_COLUMNS", "3")

        gallery_config = GalleryConfig.from_config(Config())

        assert gallery_config.database_bucket == "test-database-bucket"
        assert gallery_config.sync_enabled is True
        assert gallery_config.public_base_url == "https://cdn.example.com"
        assert gallery_config.url_mode == "signed"
        assert gallery_config.signed_url_expiration == 600
        assert gallery_config.database_path == "/data/gallery.db"
        assert gallery_config.max_file_size == 1024
        assert gallery_config.grid_columns == 3

    def test_missing_bucket(self, monkeypatch):
        monkeypatch.delenv("GCS_PHOTOS_BUCKET")

        with pytest.raises(ConfigurationError, match="GCS_PHOTOS_BUCKET"):
            GalleryConfig.from_config(Config())

    def test_invalid_url_mode(self, monkeypatch):
        monkeypatch.setenv("GALLERY_URL_MODE", "private")

        with pytest.raises(ConfigurationError, match="GALLERY_URL_MODE"):
            GalleryConfig.from_config(Config())

    def test_invalid_grid_columns(self, monkeypatch):
        monkeypatch.setenv("GALLERY_GRID_COLUMNS", "0")

        with pytest.raises(ConfigurationError, match="GALLERY_GRID_COLUMNS"):
            GalleryConfig.from_config(Config())

    def test_snapshot_is_frozen(self):
        gallery_config = load_gallery_config()

        with pytest.raises(AttributeError):
            gallery_config.grid_columns = 2  # type: ignore[misc]


def test_get_config_is_shared():
    assert get_config() is get_config()


def test_debug_mode(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.setenv("DEBUG", "true")

    assert get_debug_mode() is True


def test_debug_mode_off_in_production(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.delenv("DEBUG", raising=False)

    assert get_debug_mode() is False
