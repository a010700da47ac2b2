"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates the ledger engine by:
1. Defining request DTOs for report filters
2. Fetching movement and reference tables concurrently
3. Providing factory functions for dependency injection
"""

from stockledger.application.dto.requests import (
    AccountsReportRequest,
    CurrentStockRequest,
    ProductCostRatiosRequest,
    StockReportRequest,
)
from stockledger.application.ledger_reader import LedgerReader, ReferenceData, window_filters
from stockledger.application.services import (
    get_ledger_reader,
    get_ledger_store,
    get_report_cache,
    reset_services,
)
from stockledger.application.use_cases import (
    BuildAccountsReportUseCase,
    BuildStockReportUseCase,
    CurrentStockResult,
    CurrentStockUseCase,
    ProductCostRatiosUseCase,
)

__all__ = [
    # Request DTOs
    "StockReportRequest",
    "AccountsReportRequest",
    "CurrentStockRequest",
    "ProductCostRatiosRequest",
    # Reader
    "LedgerReader",
    "ReferenceData",
    "window_filters",
    # Use Cases
    "BuildStockReportUseCase",
    "BuildAccountsReportUseCase",
    "CurrentStockUseCase",
    "CurrentStockResult",
    "ProductCostRatiosUseCase",
    # Service factories
    "get_ledger_store",
    "get_ledger_reader",
    "get_report_cache",
    "reset_services",
]
