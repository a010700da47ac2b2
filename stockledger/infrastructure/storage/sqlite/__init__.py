"""SQLite storage implementations."""

from stockledger.infrastructure.storage.sqlite.connection import (
    LedgerPool,
    close_pool,
    get_pool,
    reader,
    writer,
)
from stockledger.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore

# Singleton instance
_ledger_store: SQLiteLedgerStore | None = None


async def get_ledger_store() -> SQLiteLedgerStore:
    """Get singleton ledger store instance, migrating the database first."""
    global _ledger_store
    if _ledger_store is None:
        from stockledger.infrastructure.storage.sqlite.migrations import run_migrations

        await run_migrations()
        _ledger_store = SQLiteLedgerStore()
    return _ledger_store


__all__ = [
    # Connection
    "LedgerPool",
    "get_pool",
    "close_pool",
    "reader",
    "writer",
    # Store
    "SQLiteLedgerStore",
    "get_ledger_store",
]
