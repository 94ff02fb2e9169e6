"""
Tests for configuration loaded from LENDBOOK_* environment variables.
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from lendbook.config import (
    AppSettings,
    LoggingSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


class TestSettings:
    """Tests for the settings classes."""

    def test_defaults(self):
        """Test the defaults without any environment."""
        settings = get_settings()
        assert settings.storage.backend == "memory"
        assert settings.storage.data_file == Path("lendbook_data.json")
        assert settings.logging.level == "INFO"
        assert settings.logging.json_output is True
        assert settings.app.max_principal == 10_000_000.0
        assert settings.app.future_date_tolerance_days == 7
        assert settings.app.recent_transactions_limit == 10

    def test_environment_overrides(self, monkeypatch):
        """Test values read from prefixed variables."""
        monkeypatch.setenv("LENDBOOK_STORAGE_BACKEND", "json")
        monkeypatch.setenv("LENDBOOK_STORAGE_DATA_FILE", "/tmp/book.json")
        monkeypatch.setenv("LENDBOOK_LOG_LEVEL", "debug")
        monkeypatch.setenv("LENDBOOK_FUTURE_DATE_TOLERANCE_DAYS", "0")

        assert StorageSettings().backend == "json"
        assert StorageSettings().data_file == Path("/tmp/book.json")
        assert LoggingSettings().level == "DEBUG"
        assert AppSettings().future_date_tolerance_days == 0

    def test_unknown_backend(self):
        """Test the backend is restricted."""
        with pytest.raises(ValidationError):
            StorageSettings(backend="sqlite")

    def test_unknown_log_level(self):
        """Test the log level is restricted."""
        with pytest.raises(ValidationError):
            LoggingSettings(level="verbose")

    def test_settings_are_cached(self):
        """Test get_settings returns one instance until cleared."""
        assert get_settings() is get_settings()

    def test_validate_all_settings(self):
        """Test the startup check with a valid environment."""
        results = validate_all_settings()
        assert results == {"storage": True, "logging": True, "app": True}

    def test_validate_all_settings_reports_errors(self, monkeypatch):
        """Test the startup check names the broken section."""
        monkeypatch.setenv("LENDBOOK_LOG_LEVEL", "loud")
        results = validate_all_settings()
        assert results["logging"] is False
        assert "logging_error" in results
        assert results["storage"] is True
