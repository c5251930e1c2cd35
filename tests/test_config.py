"""Tests for settings loading."""

import logging

import pytest

from expense_tracker.audit import configure_logging
from expense_tracker.config import AppSettings, StorageSettings, get_settings, validate_all_settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("EXPENSES_DB_PATH", raising=False)
        storage = StorageSettings()
        assert storage.path == "expenses.db"
        assert storage.connect_attempts == 3

    def test_storage_env_prefix(self, monkeypatch):
        monkeypatch.setenv("EXPENSES_DB_PATH", "/tmp/other.db")
        assert StorageSettings().path == "/tmp/other.db"

    def test_log_level_is_uppercased(self):
        assert AppSettings(log_level="debug").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValueError):
            AppSettings(log_level="chatty")

    def test_unknown_default_window_rejected(self):
        with pytest.raises(ValueError):
            AppSettings(default_window="year")

    def test_debug_mode_forces_debug_logging(self):
        package_logger = logging.getLogger("expense_tracker")
        try:
            configure_logging(AppSettings(debug_mode=True, log_level="WARNING"))
            assert package_logger.level == logging.DEBUG

            configure_logging(AppSettings(log_level="WARNING"))
            assert package_logger.level == logging.WARNING
        finally:
            configure_logging(AppSettings())

    def test_validate_all_settings(self):
        get_settings.cache_clear()
        assert validate_all_settings() == {"storage": True, "app": True}

    def test_validate_all_settings_reports_errors(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        get_settings.cache_clear()

        results = validate_all_settings()

        assert results["app"] is False
        assert "app_error" in results
        assert results["storage"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
