"""Sales entities."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockledger.core.entities.common import RowId, naive_utc, safe_number


class SaleLine(BaseModel):
    """A single product line of a sale."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    product_id: str | None = None
    product_name: str | None = None
    quantity: float = 0.0
    unit_price: float = 0.0
    unit_cost: float = 0.0
    subtotal: float = 0.0
    total_cost: float = 0.0

    @field_validator("product_id", mode="before")
    @classmethod
    def stringify_product(cls, v: Any) -> Any:
        return None if v is None else str(v)

    @field_validator(
        "quantity", "unit_price", "unit_cost", "subtotal", "total_cost", mode="before"
    )
    @classmethod
    def coerce_numbers(cls, v: Any) -> float:
        return safe_number(v)


class Sale(BaseModel):
    """A sale with its lines."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: RowId | None = None
    branch_id: str | None = None
    created_at: datetime | None = None
    total_amount: float = 0.0
    items: list[SaleLine] = Field(default_factory=list)

    @field_validator("branch_id", mode="before")
    @classmethod
    def stringify_branch(cls, v: Any) -> Any:
        return None if v is None else str(v)

    @field_validator("total_amount", mode="before")
    @classmethod
    def coerce_total(cls, v: Any) -> float:
        return safe_number(v)

    @field_validator("items", mode="before")
    @classmethod
    def default_items(cls, v: Any) -> Any:
        return v or []

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: datetime | None) -> datetime | None:
        return naive_utc(v)
