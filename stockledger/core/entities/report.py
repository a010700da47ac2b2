"""Report entities: windows, range summaries and profit metrics."""

from datetime import date, datetime, time

from pydantic import BaseModel, ConfigDict, Field, model_validator

from stockledger.core.entities.movement import EntityKind

ALL_BRANCHES = "all"


class ReportWindow(BaseModel):
    """
    Date window of a report.

    No start means "no range" (whole history). A start without an end is a
    single day. Both bounds are inclusive whole days.
    """

    model_config = ConfigDict(frozen=True)

    start: date | None = None
    end: date | None = None

    @model_validator(mode="after")
    def check_bounds(self) -> "ReportWindow":
        if self.start is None and self.end is not None:
            raise ValueError("a window end requires a start")
        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValueError("window end is before its start")
        return self

    @property
    def is_unbounded(self) -> bool:
        return self.start is None

    @property
    def last_day(self) -> date | None:
        return self.end or self.start

    @property
    def lower(self) -> datetime | None:
        if self.start is None:
            return None
        return datetime.combine(self.start, time.min)

    @property
    def upper(self) -> datetime | None:
        last = self.last_day
        if last is None:
            return None
        return datetime.combine(last, time.max)

    def contains(self, instant: datetime | None) -> bool:
        """Whether a timestamp falls inside the window (always true when unbounded)."""
        if self.is_unbounded:
            return True
        if instant is None:
            return False
        return self.lower <= instant <= self.upper


class RangeSummary(BaseModel):
    """Stock movement of one (entity, branch) pair over a window."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    entity_kind: EntityKind = EntityKind.MATERIAL
    # None once branches have been merged into a branch-agnostic summary
    branch_id: str | None = None

    opening: float = 0.0
    closing: float = 0.0
    damages: float = 0.0
    stock_in: float = 0.0
    transfers_out: float = 0.0

    unit_price: float = 0.0
    opening_value: float = 0.0
    closing_value: float = 0.0
    damages_value: float = 0.0
    stock_in_value: float = 0.0
    transfers_out_value: float = 0.0


class ValueTotals(BaseModel):
    """Monetary totals of a set of range summaries."""

    opening: float = 0.0
    closing: float = 0.0
    damages: float = 0.0
    stock_in: float = 0.0
    transfers_out: float = 0.0

    def __add__(self, other: "ValueTotals") -> "ValueTotals":
        return ValueTotals(
            opening=self.opening + other.opening,
            closing=self.closing + other.closing,
            damages=self.damages + other.damages,
            stock_in=self.stock_in + other.stock_in,
            transfers_out=self.transfers_out + other.transfers_out,
        )


class RangeTotals(BaseModel):
    """Per-kind and overall value totals."""

    material: ValueTotals = Field(default_factory=ValueTotals)
    product: ValueTotals = Field(default_factory=ValueTotals)
    total: ValueTotals = Field(default_factory=ValueTotals)


class StockReport(BaseModel):
    """Date-ranged stock movement table plus its totals."""

    branch_filter: str = ALL_BRANCHES
    window: ReportWindow = Field(default_factory=ReportWindow)
    summaries: list[RangeSummary] = Field(default_factory=list)
    totals: RangeTotals = Field(default_factory=RangeTotals)
    warnings: list[str] = Field(default_factory=list)


class ProfitMetrics(BaseModel):
    """Revenue, cost and profit of a set of sales plus cost buckets."""

    revenue: float = 0.0
    cost: float = 0.0
    profit: float = 0.0
    cost_to_revenue_ratio: float = 0.0
    total_items: float = 0.0

    def exceeds(self, threshold: float) -> bool:
        """Whether the cost ratio is above a threshold percentage."""
        return self.cost_to_revenue_ratio > threshold


class BranchPerformance(ProfitMetrics):
    """Profit metrics of one branch."""

    branch_id: str
    name: str = ""


class ProductSales(BaseModel):
    """Quantity sold of one product."""

    product_id: str
    name: str = "Unknown"
    quantity: float = 0.0


class ProductCostRatio(BaseModel):
    """Unit and actual cost-to-revenue ratios of one product (percent)."""

    product_id: str
    name: str = ""
    ucrr: float = 0.0
    acrr: float = 0.0
    ucrr_flagged: bool = False
    acrr_flagged: bool = False


class AccountsReport(BaseModel):
    """Everything the accounts screen shows for one filter tuple."""

    metrics: ProfitMetrics
    stock: StockReport
    branches: list[BranchPerformance] = Field(default_factory=list)
    products: list[ProductSales] = Field(default_factory=list)
