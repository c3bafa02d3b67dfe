"""
Configuration Management for Ledgerbook

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The core (codec and ledger) never reads the environment itself; the
session layer resolves paths and bounds from these settings and passes
plain values down.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Ledger file location and on-disk format."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: str = Field(
        default="data",
        description="Directory holding the ledger file"
    )
    ledger_filename: str = Field(
        default="transactions.csv",
        min_length=1,
        description="Name of the ledger file inside data_dir"
    )
    timestamp_format: str = Field(
        default="iso",
        pattern="^(iso|epoch)$",
        description="Canonical timestamp format used when writing rows"
    )
    encoding: str = Field(
        default="utf-8",
        description="Text encoding of the ledger file"
    )

    @field_validator('ledger_filename')
    @classmethod
    def validate_filename(cls, v: str) -> str:
        """The filename must not smuggle in a directory."""
        if Path(v).name != v:
            raise ValueError(f"ledger_filename must be a bare file name, got {v!r}")
        return v

    @property
    def ledger_path(self) -> Path:
        """Resolved path of the ledger file."""
        return Path(self.data_dir) / self.ledger_filename


class LedgerSettings(BaseSettings):
    """Aggregation engine behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    min_year: int = Field(
        default=1900,
        ge=1,
        le=9999,
        description="Oldest year accepted in a YYYY-MM query"
    )
    max_year: int = Field(
        default=2100,
        ge=1,
        le=9999,
        description="Newest year accepted in a YYYY-MM query"
    )
    save_on_close: bool = Field(
        default=True,
        description="Persist the ledger when a session is closed"
    )

    @model_validator(mode='after')
    def validate_year_bounds(self) -> 'LedgerSettings':
        if self.min_year > self.max_year:
            raise ValueError("min_year cannot be greater than max_year")
        return self


class LoggingSettings(BaseSettings):
    """structlog output configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LEDGER_LOG_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Minimum log level"
    )
    json_output: bool = Field(
        default=True,
        description="Render log lines as JSON (False = console renderer)"
    )

    @field_validator('level', mode='before')
    @classmethod
    def upper_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are built on access so that a broken section
    # does not prevent the others from loading.

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def logging(self) -> LoggingSettings:
        return LoggingSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings() -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}, plus a
    "<setting_name>_error" entry for every section that failed.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "ledger", "logging"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
