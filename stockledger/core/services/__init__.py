"""Core ledger services: pure computation, no I/O."""

from stockledger.core.services.balance import (
    DEFAULT_SIGNS,
    accumulate,
    current_quantities,
    ensure_available,
    low_stock,
    magnitudes,
    sales_to_movements,
    stock_value,
)
from stockledger.core.services.metrics import (
    branch_performance,
    compose_metrics,
    cost_ratio,
    iter_lines,
    product_cost_ratio,
    product_performance,
)
from stockledger.core.services.point_in_time import (
    PointInTimeResolver,
    chronological,
    resolve_at,
)
from stockledger.core.services.pricing import PriceResolver, RecipeCosting, cost_recipe
from stockledger.core.services.range_aggregator import (
    aggregate_range,
    merge_branches,
    summarize_totals,
)

__all__ = [
    # Balance accumulator
    "DEFAULT_SIGNS",
    "accumulate",
    "magnitudes",
    "current_quantities",
    "sales_to_movements",
    "ensure_available",
    "low_stock",
    "stock_value",
    # Point-in-time resolver
    "PointInTimeResolver",
    "chronological",
    "resolve_at",
    # Range aggregator
    "aggregate_range",
    "summarize_totals",
    "merge_branches",
    # Price resolver
    "PriceResolver",
    "RecipeCosting",
    "cost_recipe",
    # Metrics composer
    "compose_metrics",
    "cost_ratio",
    "iter_lines",
    "branch_performance",
    "product_performance",
    "product_cost_ratio",
]
