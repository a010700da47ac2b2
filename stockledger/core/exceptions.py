"""
Domain exceptions for the stock ledger.

Missing references and malformed numbers never raise: they degrade to 0
and surface as report warnings. Upstream fetch failures always raise.
"""

from typing import Any


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for presentation layers."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(LedgerError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class BackendFetchError(StorageError):
    """A read from the Movement Record Store or Reference Store failed."""

    def __init__(self, table: str, reason: str, status_code: int | None = None):
        super().__init__(
            f"Failed to fetch '{table}': {reason}",
            code="BACKEND_FETCH_FAILED",
            details={"table": table, "reason": reason, "status_code": status_code},
        )


class UnknownTableError(StorageError):
    """Table is not part of the ledger's table registry."""

    def __init__(self, table: str):
        super().__init__(
            f"Unknown ledger table: {table}",
            code="UNKNOWN_TABLE",
            details={"table": table},
        )


# Validation Exceptions
class ValidationError(LedgerError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class PriceBasisRequiredError(ValidationError):
    """A product price was requested without saying cost or revenue basis."""

    def __init__(self, entity_id: str):
        super().__init__(
            field="basis",
            message=f"Product '{entity_id}' needs an explicit price basis (cost or revenue)",
            value=entity_id,
        )
        self.code = "PRICE_BASIS_REQUIRED"


class InsufficientStockError(ValidationError):
    """Requested withdrawal exceeds the available quantity."""

    def __init__(
        self,
        entity_id: str,
        available: float,
        requested: float,
        branch_id: str | None = None,
    ):
        super().__init__(
            field="quantity",
            message=f"Cannot use more than available ({available:g})",
            value=requested,
        )
        self.code = "INSUFFICIENT_STOCK"
        self.details.update(
            {
                "entity_id": entity_id,
                "branch_id": branch_id,
                "available": available,
                "requested": requested,
            }
        )


class ConfigurationError(LedgerError):
    """Configuration error."""

    pass
