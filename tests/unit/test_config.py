"""Tests for configuration module."""

from __future__ import annotations

from pathlib import Path

import pytest

from hoop_rivals.config import Settings, get_settings, reset_settings


class TestSettings:
    """Tests for Settings class."""

    def test_default_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Settings should have sensible defaults."""
        for key in ["HOOP_DB_PATH", "HOOP_SQL_ECHO", "LOG_LEVEL", "LOG_DIR"]:
            monkeypatch.delenv(key, raising=False)

        settings = Settings(_env_file=None)

        assert settings.db_path == "data/hoop_rivals.db"
        assert settings.sql_echo is False
        assert settings.log_level == "INFO"
        assert settings.log_dir == "logs"

    def test_path_properties(self) -> None:
        """Path properties should return Path objects."""
        settings = Settings()

        assert isinstance(settings.db_path_obj, Path)
        assert isinstance(settings.log_dir_obj, Path)

    def test_validation_rejects_empty_path(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Blank paths should be rejected."""
        # pydantic_settings uses aliases as env var names
        monkeypatch.setenv("HOOP_DB_PATH", "   ")
        with pytest.raises(ValueError, match="cannot be empty"):
            Settings()

    def test_validation_rejects_unknown_log_level(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Log level must be one of the standard names."""
        monkeypatch.setenv("LOG_LEVEL", "CHATTY")
        with pytest.raises(ValueError):
            Settings()

    def test_sql_echo_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """SQL echo can be switched on from the environment."""
        monkeypatch.setenv("HOOP_SQL_ECHO", "true")

        assert Settings().sql_echo is True

    def test_ensure_directories_creates_dirs(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """ensure_directories should create required directories."""
        monkeypatch.setenv("HOOP_DB_PATH", str(tmp_path / "data" / "test.db"))
        monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))

        settings = Settings()
        settings.ensure_directories()

        assert (tmp_path / "data").exists()
        assert (tmp_path / "logs").exists()


class TestGetSettings:
    """Tests for get_settings function."""

    def setup_method(self) -> None:
        """Reset settings before each test."""
        reset_settings()

    def teardown_method(self) -> None:
        """Reset settings after each test."""
        reset_settings()

    def test_returns_singleton(self) -> None:
        """get_settings should return the same instance."""
        assert get_settings() is get_settings()

    def test_loads_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Settings should load from environment variables."""
        monkeypatch.setenv("HOOP_DB_PATH", "custom/path/hoop.sqlite")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        reset_settings()
        settings = get_settings()

        assert settings.db_path == "custom/path/hoop.sqlite"
        assert settings.log_level == "WARNING"

    def test_reset_clears_singleton(self) -> None:
        """reset_settings should clear the cached instance."""
        settings1 = get_settings()
        reset_settings()
        settings2 = get_settings()

        assert settings1 is not settings2
        assert settings1.db_path == settings2.db_path
