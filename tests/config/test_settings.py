"""Tests for ledger settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from stockledger.config import Settings, get_settings, reset_settings


class TestSettings:
    def test_defaults(self, tmp_path: Path):
        settings = get_settings()

        assert settings.ledger_backend == "sqlite"
        assert settings.storage.db_path == tmp_path / "data" / "ledger.db"
        assert settings.report.cost_ratio_threshold == 75.0
        assert settings.report.head_office_branch == "HEAD OFFICE"
        assert settings.backend.page_size == 1000

    def test_singleton(self):
        assert get_settings() is get_settings()

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("LEDGER_BACKEND", "rest")
        monkeypatch.setenv("BACKEND_API_KEY", "anon")
        monkeypatch.setenv("REPORT_CACHE_TTL", "0")
        reset_settings()

        settings = get_settings()

        assert settings.ledger_backend == "rest"
        assert settings.backend.api_key == "anon"
        assert settings.report.cache_ttl == 0

    def test_unknown_backend_rejected(self, monkeypatch):
        monkeypatch.setenv("LEDGER_BACKEND", "mysql")
        with pytest.raises(ValidationError):
            Settings()

    def test_storage_dict_creates_data_dir(self, tmp_path: Path):
        data_dir = tmp_path / "custom"
        settings = Settings(storage={"data_dir": data_dir})

        assert data_dir.is_dir()
        assert settings.storage.db_path == data_dir / "ledger.db"
