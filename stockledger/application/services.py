"""
Service factory functions for dependency injection.

Wires the configured infrastructure adapters to the application layer.
Use cases resolve their defaults from here.
"""

from typing import TYPE_CHECKING

from stockledger.application.ledger_reader import LedgerReader
from stockledger.config import get_logger, get_settings
from stockledger.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from stockledger.core.interfaces import IMovementStore, IReferenceStore, IReportCache

logger = get_logger(__name__)

# Singleton instances
_ledger_store: "IMovementStore | None" = None
_report_cache: "IReportCache | None" = None


async def get_ledger_store() -> "IMovementStore":
    """
    Get or create the Movement Record Store for the configured backend.

    The returned store also implements IReferenceStore.

    Raises:
        ConfigurationError: If the configured backend is unknown
    """
    global _ledger_store

    if _ledger_store is not None:
        return _ledger_store

    backend = get_settings().ledger_backend

    # Lazy import infrastructure to avoid circular imports
    if backend == "sqlite":
        from stockledger.infrastructure.storage.sqlite import get_ledger_store as factory
    elif backend == "rest":
        from stockledger.infrastructure.storage.rest import get_ledger_store as factory
    else:
        raise ConfigurationError(f"Unknown ledger backend: {backend}")

    _ledger_store = await factory()
    logger.info("ledger_store_configured", backend=backend)
    return _ledger_store


def get_report_cache() -> "IReportCache":
    """Get or create the shared report cache."""
    global _report_cache

    if _report_cache is None:
        from stockledger.infrastructure.cache import ReportCache

        settings = get_settings()
        _report_cache = ReportCache(
            max_size=settings.report.cache_size,
            ttl_seconds=settings.report.cache_ttl,
        )
    return _report_cache


async def get_ledger_reader(
    movement_store: "IMovementStore | None" = None,
    reference_store: "IReferenceStore | None" = None,
) -> LedgerReader:
    """
    Build a LedgerReader over the given stores.

    Args:
        movement_store: Optional movement store override
        reference_store: Optional reference store override (defaults to
            the movement store when it is also a reference store)

    Returns:
        Configured LedgerReader
    """
    movements = movement_store or await get_ledger_store()
    references = reference_store or movements
    return LedgerReader(movements, references)  # type: ignore[arg-type]


def reset_services() -> None:
    """Reset service singletons (for testing)."""
    global _ledger_store, _report_cache
    _ledger_store = None
    _report_cache = None
