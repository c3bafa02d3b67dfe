"""Tests for environment-driven configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from ledgerbook.config import (
    LedgerSettings,
    LoggingSettings,
    StorageSettings,
    get_settings,
    validate_all_settings,
)


class TestStorageSettings:

    def test_defaults(self):
        settings = StorageSettings()
        assert settings.ledger_path == Path("data") / "transactions.csv"
        assert settings.timestamp_format == "iso"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("LEDGER_STORAGE_DATA_DIR", "/srv/ledgers/alice")
        monkeypatch.setenv("LEDGER_STORAGE_LEDGER_FILENAME", "2023.csv")
        assert StorageSettings().ledger_path == Path("/srv/ledgers/alice/2023.csv")

    def test_filename_must_not_contain_directories(self):
        with pytest.raises(ValidationError):
            StorageSettings(ledger_filename="../escape.csv")

    def test_unknown_timestamp_format(self):
        with pytest.raises(ValidationError):
            StorageSettings(timestamp_format="rfc822")


class TestLedgerSettings:

    def test_year_bounds_must_be_ordered(self, monkeypatch):
        monkeypatch.setenv("LEDGER_MIN_YEAR", "2050")
        monkeypatch.setenv("LEDGER_MAX_YEAR", "2000")
        with pytest.raises(ValidationError):
            LedgerSettings()

    def test_save_on_close_from_env(self, monkeypatch):
        monkeypatch.setenv("LEDGER_SAVE_ON_CLOSE", "0")
        assert LedgerSettings().save_on_close is False


class TestLoggingSettings:

    def test_level_is_upper_cased(self):
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_unknown_level(self):
        with pytest.raises(ValidationError):
            LoggingSettings(level="chatty")


class TestValidateAllSettings:

    def test_all_valid(self):
        assert validate_all_settings() == {
            "storage": True,
            "ledger": True,
            "logging": True,
        }

    def test_reports_broken_section(self, monkeypatch):
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "chatty")
        results = validate_all_settings()
        assert results["logging"] is False
        assert "logging_error" in results
        assert results["storage"] is True

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
