"""Data transfer objects for the application layer."""

from stockledger.application.dto.requests import (
    AccountsReportRequest,
    CurrentStockRequest,
    ProductCostRatiosRequest,
    StockReportRequest,
)

__all__ = [
    "StockReportRequest",
    "AccountsReportRequest",
    "CurrentStockRequest",
    "ProductCostRatiosRequest",
]
