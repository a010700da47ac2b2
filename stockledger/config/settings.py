"""
Ledger settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Local SQLite storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "ledger.db"

    # SQLite settings
    # Query-only connections for report reads
    reader_connections: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class BackendSettings(BaseSettings):
    """Hosted relational backend (PostgREST-style) configuration."""

    model_config = SettingsConfigDict(env_prefix="BACKEND_")

    url: str = "http://localhost:54321/rest/v1"
    api_key: str = ""
    timeout: float = 30.0
    page_size: int = 1000


class ReportSettings(BaseSettings):
    """Report computation configuration."""

    model_config = SettingsConfigDict(env_prefix="REPORT_")

    # Cost-to-revenue ratios above this percentage are flagged
    cost_ratio_threshold: float = 75.0
    head_office_branch: str = "HEAD OFFICE"

    # Report cache
    cache_size: int = 256
    cache_ttl: int = 300  # seconds


class Settings(BaseSettings):
    """Main ledger settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Stock Ledger"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Which Movement Record Store adapter to wire
    ledger_backend: Literal["sqlite", "rest"] = "sqlite"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    backend: BackendSettings = Field(default_factory=BackendSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
