"""Product Cost Ratios Use Case: UCRR and ACRR per product."""

import asyncio
from collections import defaultdict

from stockledger.application.dto.requests import ProductCostRatiosRequest
from stockledger.application.ledger_reader import LedgerReader
from stockledger.config import get_logger, get_settings, report_context
from stockledger.core.entities import (
    Category,
    EntityKind,
    LossRecord,
    ProductCostRatio,
)
from stockledger.core.interfaces import IMovementStore, IReferenceStore, IReportCache
from stockledger.core.services import iter_lines, product_cost_ratio

logger = get_logger(__name__)

LOSS_CATEGORIES = frozenset({Category.COMPLIMENTARY_OUT, Category.DAMAGE_OUT})


class ProductCostRatiosUseCase:
    """
    Unit and actual cost-to-revenue ratios for every product.

    UCRR comes from the stored recipe; ACRR adds complimentary and damage
    costs of the product to its sales cost over the window.
    """

    def __init__(
        self,
        movement_store: IMovementStore | None = None,
        reference_store: IReferenceStore | None = None,
        cache: IReportCache | None = None,
    ):
        self._movement_store = movement_store
        self._reference_store = reference_store
        self._cache = cache

    async def _get_reader(self) -> LedgerReader:
        from stockledger.application.services import get_ledger_reader

        return await get_ledger_reader(self._movement_store, self._reference_store)

    def _get_cache(self) -> IReportCache:
        if self._cache is None:
            from stockledger.application.services import get_report_cache

            self._cache = get_report_cache()
        return self._cache

    @report_context("product_cost_ratios")
    async def execute(self, request: ProductCostRatiosRequest) -> list[ProductCostRatio]:
        """Execute product cost ratios use case."""
        cache = self._get_cache()
        key = request.cache_key()
        cached = cache.get(key)
        if cached is not None:
            return cached

        settings = get_settings()
        reader = await self._get_reader()
        references = await reader.references()
        branch_filter = references.scope(
            request.branch_filter, settings.report.head_office_branch
        )
        window = request.window

        sales, losses = await asyncio.gather(
            reader.sales(window, branch_filter, references.product_names()),
            reader.movements(window, branch_filter, EntityKind.PRODUCT, LOSS_CATEGORIES),
        )

        revenue: dict[str, float] = defaultdict(float)
        sales_cost: dict[str, float] = defaultdict(float)
        for line in iter_lines(sales):
            if line.product_id is None:
                continue
            revenue[line.product_id] += line.subtotal
            sales_cost[line.product_id] += line.total_cost

        non_sales_cost: dict[str, float] = defaultdict(float)
        for record in losses:
            if isinstance(record, LossRecord) and window.contains(record.created_at):
                non_sales_cost[record.entity_id] += record.cost

        prices = references.resolver()
        names = references.product_names()
        product_ids = set(names) | set(revenue)
        threshold = settings.report.cost_ratio_threshold

        rows = [
            product_cost_ratio(
                product_id,
                prices.recipe_for(product_id),
                sales_revenue=revenue[product_id],
                sales_cost=sales_cost[product_id],
                non_sales_cost=non_sales_cost[product_id],
                threshold=threshold,
                name=names.get(product_id, ""),
            )
            for product_id in product_ids
        ]
        rows.sort(key=lambda row: (row.name, row.product_id))
        cache.set(key, rows)

        logger.info(
            "product_cost_ratios_computed",
            products=len(rows),
            flagged=sum(1 for row in rows if row.ucrr_flagged or row.acrr_flagged),
        )
        return rows
