"""Tests for ledger logging configuration."""

import logging

import pytest
import structlog

from stockledger.config import configure_logging, report_context, reset_settings
from stockledger.config.logging import QUIET_LOGGERS, add_ledger_context


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class _Request:
    def cache_key(self) -> tuple:
        return ("stock", "2024-01-01", "all")


class TestConfigureLogging:
    def test_level_override(self, restore_logging):
        configure_logging("debug")
        assert logging.getLogger().level == logging.DEBUG
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_level_from_settings(self, monkeypatch, restore_logging):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        reset_settings()
        configure_logging()
        assert logging.getLogger().level == logging.ERROR
        assert logging.getLogger("httpx").level == logging.ERROR


class TestLedgerContext:
    def test_adds_identity_and_backend(self):
        event = add_ledger_context(None, "info", {"event": "x"})
        assert event["app"] == "Stock Ledger"
        assert event["backend"] == "sqlite"

    def test_keeps_explicit_fields(self):
        event = add_ledger_context(None, "info", {"event": "x", "backend": "rest"})
        assert event["backend"] == "rest"


class TestReportContext:
    async def test_binds_report_while_running(self):
        seen = {}

        class UseCase:
            @report_context("stock_report")
            async def execute(self, request):
                seen.update(structlog.contextvars.get_contextvars())
                return "done"

        assert await UseCase().execute(_Request()) == "done"
        assert seen == {"report": "stock_report", "request_key": ("stock", "2024-01-01", "all")}
        assert "report" not in structlog.contextvars.get_contextvars()

    async def test_unbinds_on_error(self):
        class UseCase:
            @report_context("accounts_report")
            async def execute(self, request):
                raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await UseCase().execute(_Request())
        assert "report" not in structlog.contextvars.get_contextvars()
