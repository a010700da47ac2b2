"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import stockledger.infrastructure.storage.sqlite.connection as conn_module
from stockledger.infrastructure.storage.sqlite import SQLiteLedgerStore, close_pool
from stockledger.infrastructure.storage.sqlite.migrations import run_migrations


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """Temporary database with the full ledger schema."""
    await run_migrations(temp_db_path)
    return temp_db_path


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.reader_connections = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def sqlite_store(migrated_db: Path, mock_settings) -> AsyncGenerator[SQLiteLedgerStore, None]:
    """SQLiteLedgerStore over a migrated temp database with its own pool."""
    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        try:
            yield SQLiteLedgerStore()
        finally:
            await close_pool()
