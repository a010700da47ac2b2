"""REST storage implementation for the hosted backend."""

from stockledger.infrastructure.storage.rest.ledger_store import RestLedgerStore, filter_params

# Singleton instance
_ledger_store: RestLedgerStore | None = None


async def get_ledger_store() -> RestLedgerStore:
    """Get singleton REST ledger store instance."""
    global _ledger_store
    if _ledger_store is None:
        _ledger_store = RestLedgerStore()
    return _ledger_store


__all__ = [
    "RestLedgerStore",
    "filter_params",
    "get_ledger_store",
]
