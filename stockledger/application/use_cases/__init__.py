"""Application use cases."""

from stockledger.application.use_cases.build_accounts_report import BuildAccountsReportUseCase
from stockledger.application.use_cases.build_stock_report import BuildStockReportUseCase
from stockledger.application.use_cases.current_stock import (
    CurrentStockResult,
    CurrentStockUseCase,
)
from stockledger.application.use_cases.product_cost_ratios import ProductCostRatiosUseCase

__all__ = [
    "BuildStockReportUseCase",
    "BuildAccountsReportUseCase",
    "CurrentStockUseCase",
    "CurrentStockResult",
    "ProductCostRatiosUseCase",
]
