"""
Movement record entities.

Each row of a movement table becomes one record of a tagged union keyed on
``category``. The category, never the stored value, decides the sign of a
movement.
"""

from datetime import date, datetime, time
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from stockledger.core.entities.common import RowId, naive_utc, optional_number, safe_number


class Category(str, Enum):
    """Movement categories; the category fixes the sign of a movement."""

    OPENING = "opening"
    CLOSING = "closing"
    PROCUREMENT_IN = "procurement_in"
    TRANSFER_IN = "transfer_in"
    PRODUCTION_IN = "production_in"
    TRANSFER_OUT = "transfer_out"
    USAGE_OUT = "usage_out"
    DAMAGE_OUT = "damage_out"
    SALES_OUT = "sales_out"
    COMPLIMENTARY_OUT = "complimentary_out"


SNAPSHOT_CATEGORIES = frozenset({Category.OPENING, Category.CLOSING})
INFLOW_CATEGORIES = frozenset(
    {Category.PROCUREMENT_IN, Category.TRANSFER_IN, Category.PRODUCTION_IN}
)
OUTFLOW_CATEGORIES = frozenset(
    {
        Category.TRANSFER_OUT,
        Category.USAGE_OUT,
        Category.DAMAGE_OUT,
        Category.SALES_OUT,
        Category.COMPLIMENTARY_OUT,
    }
)


class EntityKind(str, Enum):
    """What a movement affects."""

    MATERIAL = "material"
    PRODUCT = "product"


class BalanceMode(str, Enum):
    """Which side of a day boundary a point-in-time lookup resolves."""

    OPENING = "opening"
    CLOSING = "closing"


def _coerce_timestamp(value: Any) -> Any:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError:
            return value
    return value


class LedgerRow(BaseModel):
    """Fields shared by every row the ledger reads."""

    model_config = ConfigDict(frozen=True)

    id: RowId | None = None
    branch_id: str | None = None
    created_at: datetime | None = None

    @field_validator("branch_id", mode="before")
    @classmethod
    def stringify_branch(cls, v: Any) -> Any:
        return None if v is None else str(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def parse_created_at(cls, v: Any) -> Any:
        return _coerce_timestamp(v)

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime | None) -> datetime | None:
        return naive_utc(v)


class CostSource(str, Enum):
    """Cost-only buckets feeding the profit metrics."""

    COMPLIMENTARY = "complimentary"
    PRODUCT_DAMAGE = "product_damage"
    MATERIAL_DAMAGE = "material_damage"
    IMPREST = "imprest"
    INDIRECT_MATERIAL = "indirect_material"


class CostRecord(LedgerRow):
    """A row that only contributes money, e.g. an imprest supply."""

    source: CostSource
    cost: float = 0.0

    @field_validator("cost", mode="before")
    @classmethod
    def coerce_cost(cls, v: Any) -> float:
        return safe_number(v)


class _MovementBase(LedgerRow):
    entity_id: str
    entity_kind: EntityKind = EntityKind.MATERIAL
    branch_id: str
    quantity: float = 0.0
    cost: float | None = None

    @field_validator("entity_id", mode="before")
    @classmethod
    def stringify_entity(cls, v: Any) -> Any:
        return None if v is None else str(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v: Any) -> float:
        return safe_number(v)

    @field_validator("cost", mode="before")
    @classmethod
    def coerce_cost(cls, v: Any) -> float | None:
        return optional_number(v)

    @property
    def group_key(self) -> tuple[EntityKind, str, str]:
        return (self.entity_kind, self.entity_id, self.branch_id)


class StockSnapshotRecord(_MovementBase):
    """
    A row of an inventory or closing-stock view.

    ``quantity`` is the stock count as of this row; ``opening_stock`` is the
    documented starting point when the row carries one.
    """

    category: Literal[Category.OPENING, Category.CLOSING]
    opening_stock: float | None = None

    @field_validator("opening_stock", mode="before")
    @classmethod
    def coerce_opening_stock(cls, v: Any) -> float | None:
        return optional_number(v)

    @property
    def stock_level(self) -> float:
        return self.quantity

    @property
    def carries_balance(self) -> bool:
        return True


class _FlowRecord(_MovementBase):
    # Write-side maintained "quantity as of this row"; trusted, never recomputed.
    running_balance: float | None = None

    @field_validator("running_balance", mode="before")
    @classmethod
    def coerce_running_balance(cls, v: Any) -> float | None:
        return optional_number(v)

    @property
    def stock_level(self) -> float:
        if self.running_balance is not None:
            return self.running_balance
        return self.quantity

    @property
    def carries_balance(self) -> bool:
        return self.running_balance is not None


class InflowRecord(_FlowRecord):
    """Procurement receipt, transfer in or production yield."""

    category: Literal[Category.PROCUREMENT_IN, Category.TRANSFER_IN, Category.PRODUCTION_IN]


class OutflowRecord(_FlowRecord):
    """Transfer out, usage or sale."""

    category: Literal[Category.TRANSFER_OUT, Category.USAGE_OUT, Category.SALES_OUT]


class LossRecord(_FlowRecord):
    """Damage or complimentary giveaway; always carries a cost."""

    category: Literal[Category.DAMAGE_OUT, Category.COMPLIMENTARY_OUT]
    cost: float = 0.0

    @field_validator("cost", mode="before")
    @classmethod
    def coerce_cost(cls, v: Any) -> float:
        return safe_number(v)


MovementRecord = Annotated[
    Union[StockSnapshotRecord, InflowRecord, OutflowRecord, LossRecord],
    Field(discriminator="category"),
]

_movement_adapter: TypeAdapter[MovementRecord] = TypeAdapter(MovementRecord)


def parse_movement(data: dict[str, Any]) -> MovementRecord:
    """Build the right record type from a plain mapping with a ``category`` key."""
    return _movement_adapter.validate_python(data)


class BalanceSnapshot(BaseModel):
    """Quantity of one (entity, branch) group as of an instant."""

    model_config = ConfigDict(frozen=True)

    entity_id: str
    entity_kind: EntityKind = EntityKind.MATERIAL
    branch_id: str
    as_of: datetime | None = None
    mode: BalanceMode = BalanceMode.CLOSING
    quantity: float = 0.0
