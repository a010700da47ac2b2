"""
Metrics composer.

Pure aggregation over already-fetched sales and cost rows: revenue, cost,
profit and the cost-to-revenue ratio, per report, per branch and per
product.
"""

from collections.abc import Iterable, Iterator, Sequence
from typing import Protocol

from stockledger.core.entities import (
    Branch,
    BranchPerformance,
    ProductCostRatio,
    ProductSales,
    ProfitMetrics,
    Recipe,
    Sale,
    SaleLine,
)


class HasCost(Protocol):
    branch_id: str | None
    cost: float | None


def cost_ratio(cost: float, revenue: float) -> float:
    """Cost as a percentage of revenue; 0 when there is no revenue."""
    return (cost / revenue) * 100 if revenue > 0 else 0.0


def iter_lines(sales: Iterable[Sale], product_id: str | None = None) -> Iterator[SaleLine]:
    """Sale lines of the sales, optionally only those of one product."""
    for sale in sales:
        for line in sale.items:
            if product_id is None or line.product_id == product_id:
                yield line


def _bucket_cost(buckets: Iterable[Iterable[HasCost]], branch_id: str | None = None) -> float:
    total = 0.0
    for bucket in buckets:
        for record in bucket:
            if branch_id is not None and record.branch_id != branch_id:
                continue
            total += record.cost or 0.0
    return total


def compose_metrics(
    sales: Iterable[SaleLine],
    cost_buckets: Iterable[Iterable[HasCost]] = (),
) -> ProfitMetrics:
    """Revenue, cost, profit, cost ratio and items sold."""
    revenue = 0.0
    cost = 0.0
    total_items = 0.0
    for line in sales:
        revenue += line.subtotal
        cost += line.total_cost
        total_items += line.quantity
    cost += _bucket_cost(cost_buckets)

    return ProfitMetrics(
        revenue=revenue,
        cost=cost,
        profit=revenue - cost,
        cost_to_revenue_ratio=cost_ratio(cost, revenue),
        total_items=total_items,
    )


def branch_performance(
    sales: Iterable[Sale],
    branches: Iterable[Branch],
    cost_buckets: Sequence[Sequence[HasCost]] = (),
) -> list[BranchPerformance]:
    """
    Profit metrics per known branch, most profitable first.

    Sales of branches missing from the reference list are ignored.
    """
    known = {branch.id: branch for branch in branches}
    lines: dict[str, list[SaleLine]] = {branch_id: [] for branch_id in known}
    for sale in sales:
        if sale.branch_id in lines:
            lines[sale.branch_id].extend(sale.items)

    rows = []
    for branch_id, branch in known.items():
        metrics = compose_metrics(lines[branch_id])
        cost = metrics.cost + _bucket_cost(cost_buckets, branch_id)
        rows.append(
            BranchPerformance(
                branch_id=branch_id,
                name=branch.name,
                revenue=metrics.revenue,
                cost=cost,
                profit=metrics.revenue - cost,
                cost_to_revenue_ratio=cost_ratio(cost, metrics.revenue),
                total_items=metrics.total_items,
            )
        )
    rows.sort(key=lambda row: row.profit, reverse=True)
    return rows


def product_performance(sales: Iterable[Sale]) -> list[ProductSales]:
    """Quantity sold per product, best sellers first."""
    totals: dict[str, ProductSales] = {}
    for line in iter_lines(sales):
        if line.product_id is None:
            continue
        row = totals.get(line.product_id)
        if row is None:
            row = totals[line.product_id] = ProductSales(
                product_id=line.product_id, name=line.product_name or "Unknown"
            )
        row.quantity += line.quantity
    return sorted(totals.values(), key=lambda row: row.quantity, reverse=True)


def product_cost_ratio(
    product_id: str,
    recipe: Recipe | None,
    sales_revenue: float,
    sales_cost: float,
    non_sales_cost: float,
    threshold: float,
    name: str = "",
) -> ProductCostRatio:
    """
    UCRR and ACRR of a product.

    UCRR compares the recipe's unit cost with its selling price; ACRR
    compares everything the product cost (sales, complimentary, damages)
    with what it sold for. Zero denominators count as 1.
    """
    unit_cost = (recipe.unit_cost if recipe else None) or 0.0
    selling_price = (recipe.selling_price if recipe else None) or 1.0
    ucrr = unit_cost / selling_price * 100
    acrr = (sales_cost + non_sales_cost) / (sales_revenue or 1.0) * 100
    return ProductCostRatio(
        product_id=product_id,
        name=name,
        ucrr=ucrr,
        acrr=acrr,
        ucrr_flagged=ucrr > threshold,
        acrr_flagged=acrr > threshold,
    )
