"""Core domain entities."""

from stockledger.core.entities.common import naive_utc, optional_number, safe_number
from stockledger.core.entities.movement import (
    INFLOW_CATEGORIES,
    OUTFLOW_CATEGORIES,
    SNAPSHOT_CATEGORIES,
    BalanceMode,
    BalanceSnapshot,
    Category,
    CostRecord,
    CostSource,
    EntityKind,
    InflowRecord,
    LossRecord,
    MovementRecord,
    OutflowRecord,
    StockSnapshotRecord,
    parse_movement,
)
from stockledger.core.entities.reference import (
    Branch,
    Material,
    PriceBasis,
    Product,
    Recipe,
    RecipeMaterial,
)
from stockledger.core.entities.report import (
    ALL_BRANCHES,
    AccountsReport,
    BranchPerformance,
    ProductCostRatio,
    ProductSales,
    ProfitMetrics,
    RangeSummary,
    RangeTotals,
    ReportWindow,
    StockReport,
    ValueTotals,
)
from stockledger.core.entities.sales import Sale, SaleLine

__all__ = [
    # Coercions
    "safe_number",
    "optional_number",
    "naive_utc",
    # Movement entities
    "Category",
    "EntityKind",
    "BalanceMode",
    "SNAPSHOT_CATEGORIES",
    "INFLOW_CATEGORIES",
    "OUTFLOW_CATEGORIES",
    "MovementRecord",
    "StockSnapshotRecord",
    "InflowRecord",
    "OutflowRecord",
    "LossRecord",
    "CostRecord",
    "CostSource",
    "BalanceSnapshot",
    "parse_movement",
    # Reference entities
    "Branch",
    "Material",
    "Product",
    "Recipe",
    "RecipeMaterial",
    "PriceBasis",
    # Sales entities
    "Sale",
    "SaleLine",
    # Report entities
    "ALL_BRANCHES",
    "ReportWindow",
    "RangeSummary",
    "ValueTotals",
    "RangeTotals",
    "StockReport",
    "ProfitMetrics",
    "BranchPerformance",
    "ProductSales",
    "ProductCostRatio",
    "AccountsReport",
]
