"""Static reference data: branches, materials, products and recipes."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockledger.core.entities.common import optional_number, safe_number


class PriceBasis(str, Enum):
    """Which product price a caller wants. There is no default."""

    COST = "cost"
    REVENUE = "revenue"


class _Reference(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str
    name: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> Any:
        return None if v is None else str(v)

    @field_validator("name", mode="before")
    @classmethod
    def default_name(cls, v: Any) -> str:
        return "" if v is None else str(v)


class Branch(_Reference):
    """A physical location of the business."""

    pass


class Material(_Reference):
    """A raw or indirect material bought by the business."""

    unit: str | None = None
    unit_price: float | None = None
    minimum_stock: float | None = None

    @field_validator("unit_price", "minimum_stock", mode="before")
    @classmethod
    def coerce_numbers(cls, v: Any) -> float | None:
        return optional_number(v)


class Product(_Reference):
    """A finished product sold at the counter."""

    unit: str | None = None
    price: float | None = None

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, v: Any) -> float | None:
        return optional_number(v)


class RecipeMaterial(BaseModel):
    """One material line of a recipe."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    material_id: str
    quantity: float = 0.0

    @field_validator("material_id", mode="before")
    @classmethod
    def stringify_material(cls, v: Any) -> Any:
        return None if v is None else str(v)

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, v: Any) -> float:
        return safe_number(v)


class Recipe(_Reference):
    """How a product is made, with its stored costing."""

    product_id: str
    yield_quantity: float = Field(default=0.0, alias="yield")
    unit_cost: float | None = None
    selling_price: float | None = None
    material_cost: float | None = None
    materials: list[RecipeMaterial] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    @field_validator("product_id", mode="before")
    @classmethod
    def stringify_product(cls, v: Any) -> Any:
        return None if v is None else str(v)

    @field_validator("yield_quantity", mode="before")
    @classmethod
    def coerce_yield(cls, v: Any) -> float:
        return safe_number(v)

    @field_validator("unit_cost", "selling_price", "material_cost", mode="before")
    @classmethod
    def coerce_money(cls, v: Any) -> float | None:
        return optional_number(v)
