"""Build Accounts Report Use Case: profit metrics, performance and stock."""

import asyncio

from stockledger.application.dto.requests import AccountsReportRequest
from stockledger.application.ledger_reader import LedgerReader
from stockledger.application.use_cases.build_stock_report import BuildStockReportUseCase
from stockledger.config import get_logger, get_settings, report_context
from stockledger.core.entities import ALL_BRANCHES, AccountsReport
from stockledger.core.interfaces import IMovementStore, IReferenceStore, IReportCache
from stockledger.core.services import (
    branch_performance,
    compose_metrics,
    iter_lines,
    product_performance,
)

logger = get_logger(__name__)


class BuildAccountsReportUseCase:
    """Compose revenue, cost and profit with the stock movement table."""

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

    @report_context("accounts_report")
    async def execute(self, request: AccountsReportRequest) -> AccountsReport:
        """Execute accounts report use case."""
        cache = self._get_cache()
        key = request.cache_key()
        cached = cache.get(key)
        if cached is not None:
            logger.debug("accounts_report_cache_hit", key=key)
            return cached

        logger.info(
            "accounts_report_started",
            start=request.start,
            end=request.end,
            branch_filter=request.branch_filter,
            product_id=request.product_id,
        )

        reader = await self._get_reader()
        references = await reader.references()
        branch_filter = references.scope(
            request.branch_filter, get_settings().report.head_office_branch
        )
        window = request.window

        stock_use_case = BuildStockReportUseCase(
            self._movement_store, self._reference_store, cache
        )
        sales, costs, stock = await asyncio.gather(
            reader.sales(window, branch_filter, references.product_names()),
            reader.costs(window, branch_filter),
            stock_use_case.execute(request.stock_request(branch_filter)),
        )

        # Cost buckets are never product-scoped
        metrics = compose_metrics(
            iter_lines(sales, request.product_id), costs.values()
        )

        branches = references.branches
        if branch_filter != ALL_BRANCHES:
            branches = [b for b in branches if b.id == branch_filter]
        performance = branch_performance(sales, branches, list(costs.values()))

        products = product_performance(sales)
        if request.product_id is not None:
            products = [p for p in products if p.product_id == request.product_id]

        report = AccountsReport(
            metrics=metrics,
            stock=stock,
            branches=performance,
            products=products,
        )
        cache.set(key, report)

        threshold = get_settings().report.cost_ratio_threshold
        logger.info(
            "accounts_report_built",
            revenue=metrics.revenue,
            cost=metrics.cost,
            profit=metrics.profit,
            ratio_flagged=metrics.exceeds(threshold),
            sales=len(sales),
        )
        return report
