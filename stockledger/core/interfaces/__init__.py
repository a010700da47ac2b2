"""Core interfaces (ports) for dependency injection."""

from stockledger.core.interfaces.ledger_store import (
    IMovementStore,
    IReferenceStore,
    QueryFilters,
    Row,
)
from stockledger.core.interfaces.report_cache import IReportCache

__all__ = [
    # Storage interfaces
    "IMovementStore",
    "IReferenceStore",
    "QueryFilters",
    "Row",
    # Cache interfaces
    "IReportCache",
]
