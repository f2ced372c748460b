"""
Configuration Management for WealthFlow

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The pure ledger functions never read settings themselves; the session
passes the relevant values in, so derivations stay deterministic in tests.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local JSON storage backend configuration."""

    model_config = SettingsConfigDict(
        env_prefix="WEALTHFLOW_STORAGE_",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path.home() / ".wealthflow",
        description="Directory holding the persisted store"
    )
    store_filename: str = Field(
        default="store.json",
        description="Current-schema store document"
    )
    legacy_filename: str = Field(
        default="wealthflow.v1.json",
        description="Single-key blob written by the pre-category releases"
    )
    marker_filename: str = Field(
        default=".migrated",
        description="Marker written once the legacy blob has been upgraded"
    )
    retry_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts for each file operation before giving up"
    )

    @field_validator("store_filename", "legacy_filename", "marker_filename")
    @classmethod
    def validate_plain_filename(cls, v: str) -> str:
        """Filenames must not escape the data directory."""
        if not v or Path(v).name != v:
            raise ValueError(f"Expected a bare filename, got: {v!r}")
        return v


class LedgerSettings(BaseSettings):
    """Tuning for derived views."""

    model_config = SettingsConfigDict(
        env_prefix="WEALTHFLOW_LEDGER_",
        extra="ignore"
    )

    suggestion_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Autocomplete suggestions returned per query"
    )
    top_vendor_limit: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Vendors shown in the spend-by-vendor chart"
    )
    top_category_limit: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Categories shown in the monthly snapshot"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    audit_trail_size: int = Field(
        default=500,
        ge=10,
        le=10000,
        description="Audit events kept in memory"
    )


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

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def ledger(self) -> LedgerSettings:
        return LedgerSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


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
    ``<name>_error`` entry for each group that failed to load.
    """
    results = {}

    settings = get_settings()

    for name in ("storage", "ledger", "app"):
        try:
            getattr(settings, name)
            results[name] = True
        except Exception as e:
            results[name] = False
            results[f"{name}_error"] = str(e)

    return results
