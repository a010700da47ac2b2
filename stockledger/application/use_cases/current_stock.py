"""Current Stock Use Case: quantities on hand, with a withdrawal check."""

from dataclasses import dataclass, field

from stockledger.application.dto.requests import CurrentStockRequest
from stockledger.application.ledger_reader import LedgerReader
from stockledger.config import get_logger, get_settings, report_context
from stockledger.core.entities import ALL_BRANCHES, EntityKind, ReportWindow
from stockledger.core.interfaces import IMovementStore, IReferenceStore, IReportCache
from stockledger.core.services import (
    current_quantities,
    ensure_available,
    low_stock,
    sales_to_movements,
    stock_value,
)

logger = get_logger(__name__)


@dataclass
class CurrentStockResult:
    """Current quantity per entity of one kind, with low-stock ids and stock value."""

    kind: EntityKind
    branch_filter: str
    quantities: dict[str, float] = field(default_factory=dict)
    # Materials only; products carry no minimum stock
    low_stock: list[str] = field(default_factory=list)
    # None for products requested without a price basis
    stock_value: float | None = None
    warnings: list[str] = field(default_factory=list)

    def quantity_of(self, entity_id: str) -> float:
        return self.quantities.get(entity_id, 0.0)


class CurrentStockUseCase:
    """
    Current quantities from the whole movement history.

    Product quantities include sales. A request naming an entity and a
    quantity is a withdrawal check: it always reads fresh data and raises
    InsufficientStockError when the withdrawal exceeds what is on hand.
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

    @report_context("current_stock")
    async def execute(self, request: CurrentStockRequest) -> CurrentStockResult:
        """Execute current stock use case."""
        checking = request.entity_id is not None and request.requested is not None
        cache = self._get_cache()
        key = request.cache_key()
        if not checking:
            cached = cache.get(key)
            if cached is not None:
                return cached

        reader = await self._get_reader()
        references = await reader.references()
        branch_filter = references.scope(
            request.branch_filter, get_settings().report.head_office_branch
        )

        history = ReportWindow()
        records = await reader.movements(history, branch_filter, request.kind)
        if request.kind is EntityKind.PRODUCT:
            records.extend(sales_to_movements(await reader.sales(history, branch_filter)))

        scoped_branch = None if branch_filter == ALL_BRANCHES else branch_filter
        quantities = current_quantities(records, request.kind, scoped_branch)
        result = CurrentStockResult(
            kind=request.kind,
            branch_filter=branch_filter,
            quantities=quantities,
        )
        prices = references.resolver()
        if request.kind is EntityKind.MATERIAL:
            result.low_stock = low_stock(quantities, references.materials)
            result.stock_value = stock_value(
                quantities, lambda entity_id: prices.price_of(entity_id, EntityKind.MATERIAL)
            )
        elif request.price_basis is not None:
            result.stock_value = stock_value(
                quantities,
                lambda entity_id: prices.price_of(
                    entity_id, EntityKind.PRODUCT, request.price_basis
                ),
            )
        result.warnings = prices.missing

        if checking:
            ensure_available(
                request.entity_id,
                result.quantity_of(request.entity_id),
                request.requested,
                scoped_branch,
            )
            logger.info(
                "withdrawal_checked",
                entity_id=request.entity_id,
                requested=request.requested,
                available=result.quantity_of(request.entity_id),
            )
        else:
            cache.set(key, result)

        logger.info(
            "current_stock_computed",
            kind=request.kind.value,
            branch_filter=branch_filter,
            entities=len(result.quantities),
            low_stock=len(result.low_stock),
        )
        return result
