"""Fixtures for report use case tests."""

from unittest.mock import AsyncMock

import pytest

from stockledger.core.interfaces import QueryFilters
from stockledger.infrastructure.cache import ReportCache


def _matches(row: dict, filters: QueryFilters | None) -> bool:
    if filters is None:
        return True
    for column, value in filters.eq.items():
        if str(row.get(column)) != str(value):
            return False
    for column, values in filters.isin.items():
        if str(row.get(column)) not in {str(v) for v in values}:
            return False
    for column, value in filters.gte.items():
        if row.get(column) is None or str(row[column]) < str(value):
            return False
    for column, value in filters.lte.items():
        if row.get(column) is None or str(row[column]) > str(value):
            return False
    return True


@pytest.fixture
def mock_ledger_store(ledger_tables):
    """AsyncMock store serving ledger_tables and honouring filters."""
    store = AsyncMock()

    async def fetch(table, filters=None, columns="*"):
        return [dict(row) for row in ledger_tables.get(table, []) if _matches(row, filters)]

    async def fetch_all(table):
        return [dict(row) for row in ledger_tables.get(table, [])]

    store.fetch.side_effect = fetch
    store.fetch_all.side_effect = fetch_all
    return store


@pytest.fixture
def report_cache():
    return ReportCache(max_size=32, ttl_seconds=60)
