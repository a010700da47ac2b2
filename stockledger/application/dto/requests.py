"""Request DTOs for the report use cases.

Pydantic v2 models validated at the edge. Every request exposes
``cache_key()`` covering its full filter tuple so cached results of
different filters never mix.
"""

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from stockledger.core.entities import ALL_BRANCHES, EntityKind, PriceBasis, ReportWindow


class _BranchScoped(BaseModel):
    model_config = ConfigDict(frozen=True)

    branch_filter: str = Field(
        default=ALL_BRANCHES,
        description="Branch id, or 'all' for every branch",
        examples=["all", "3"],
    )

    @field_validator("branch_filter", mode="before")
    @classmethod
    def stringify_branch(cls, v: Any) -> Any:
        if v is None or v == "":
            return ALL_BRANCHES
        return str(v)


class _Windowed(_BranchScoped):
    start: date | None = Field(
        default=None,
        description="First day of the window; omit for the whole history",
    )
    end: date | None = Field(
        default=None,
        description="Last day of the window; omit for a single day",
    )

    @model_validator(mode="after")
    def check_window(self) -> "_Windowed":
        if self.start is None and self.end is not None:
            raise ValueError("a window end requires a start")
        if self.start is not None and self.end is not None and self.end < self.start:
            raise ValueError("window end is before its start")
        return self

    @property
    def window(self) -> ReportWindow:
        return ReportWindow(start=self.start, end=self.end)


class StockReportRequest(_Windowed):
    """Request for the date-ranged stock movement table."""

    product_price_basis: PriceBasis = Field(
        ...,
        description="Price used to value product rows",
        examples=["cost", "revenue"],
    )
    product_id: str | None = Field(
        default=None,
        description="Restrict product rows to one product",
    )
    merge_branches: bool = Field(
        default=False,
        description="Collapse branches into one summary per entity",
    )

    def cache_key(self) -> tuple:
        return (
            "stock",
            self.start,
            self.end,
            self.branch_filter,
            self.product_price_basis.value,
            self.product_id,
            self.merge_branches,
        )


class AccountsReportRequest(_Windowed):
    """Request for the accounts screen: metrics, performance and stock."""

    product_id: str | None = Field(
        default=None,
        description="Restrict sales metrics to one product",
    )
    product_price_basis: PriceBasis = Field(
        default=PriceBasis.COST,
        description="Price used to value product rows of the embedded stock report",
    )

    def stock_request(self, branch_filter: str | None = None) -> StockReportRequest:
        """The embedded stock report request for the same filters."""
        return StockReportRequest(
            start=self.start,
            end=self.end,
            branch_filter=branch_filter or self.branch_filter,
            product_price_basis=self.product_price_basis,
            product_id=self.product_id,
        )

    def cache_key(self) -> tuple:
        return (
            "accounts",
            self.start,
            self.end,
            self.branch_filter,
            self.product_price_basis.value,
            self.product_id,
        )


class CurrentStockRequest(_BranchScoped):
    """Request for current quantities, optionally checking a withdrawal."""

    kind: EntityKind = Field(
        default=EntityKind.MATERIAL,
        description="Entity kind: material or product",
    )
    entity_id: str | None = Field(
        default=None,
        description="Entity to check a withdrawal against",
    )
    requested: float | None = Field(
        default=None,
        description="Quantity about to be withdrawn",
    )
    price_basis: PriceBasis | None = Field(
        default=None,
        description="Product price basis for the stock value; products are not valued without one",
    )

    def cache_key(self) -> tuple:
        basis = self.price_basis.value if self.price_basis else None
        return ("current", self.kind.value, self.branch_filter, basis)


class ProductCostRatiosRequest(_Windowed):
    """Request for UCRR/ACRR rows per product."""

    def cache_key(self) -> tuple:
        return ("cost_ratios", self.start, self.end, self.branch_filter)
