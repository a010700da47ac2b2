"""Build Stock Report Use Case: date-ranged opening, flows and closing."""

from stockledger.application.dto.requests import StockReportRequest
from stockledger.application.ledger_reader import LedgerReader
from stockledger.config import get_logger, get_settings, report_context
from stockledger.core.entities import EntityKind, MovementRecord, StockReport
from stockledger.core.interfaces import IMovementStore, IReferenceStore, IReportCache
from stockledger.core.services import (
    PointInTimeResolver,
    aggregate_range,
    merge_branches,
    summarize_totals,
)

logger = get_logger(__name__)


def _only_product(records: list[MovementRecord], product_id: str) -> list[MovementRecord]:
    return [
        r
        for r in records
        if r.entity_kind is not EntityKind.PRODUCT or r.entity_id == product_id
    ]


class BuildStockReportUseCase:
    """Fetch every movement table concurrently and run the Range Aggregator."""

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

    @report_context("stock_report")
    async def execute(self, request: StockReportRequest) -> StockReport:
        """Execute stock report use case."""
        cache = self._get_cache()
        key = request.cache_key()
        cached = cache.get(key)
        if cached is not None:
            logger.debug("stock_report_cache_hit", key=key)
            return cached

        logger.info(
            "stock_report_started",
            start=request.start,
            end=request.end,
            branch_filter=request.branch_filter,
            basis=request.product_price_basis.value,
        )

        reader = await self._get_reader()
        references = await reader.references()
        branch_filter = references.scope(
            request.branch_filter, get_settings().report.head_office_branch
        )
        window = request.window

        # 1. Load every movement table in one concurrent batch
        records = await reader.movements(window, branch_filter)
        if request.product_id is not None:
            records = _only_product(records, request.product_id)

        # 2. Aggregate per (entity, branch) pair
        prices = references.resolver()
        summaries = aggregate_range(
            records,
            branch_filter=branch_filter,
            window=window,
            price_of=lambda entity_id, kind: prices.price_of(
                entity_id, kind, request.product_price_basis
            ),
            resolver=PointInTimeResolver(),
        )
        if request.merge_branches:
            summaries = merge_branches(summaries)

        report = StockReport(
            branch_filter=branch_filter,
            window=window,
            summaries=summaries,
            totals=summarize_totals(summaries),
            warnings=prices.missing,
        )
        cache.set(key, report)

        logger.info(
            "stock_report_built",
            pairs=len(summaries),
            records=len(records),
            warnings=len(report.warnings),
        )
        return report
