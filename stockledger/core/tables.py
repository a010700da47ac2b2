"""
Table registry.

Maps each backend table to the ledger category it feeds and turns raw rows
into typed records. Stores refuse any table not listed here.
"""

from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from stockledger.config import get_logger
from stockledger.core.entities import (
    SNAPSHOT_CATEGORIES,
    Category,
    CostRecord,
    CostSource,
    EntityKind,
    MovementRecord,
    Sale,
    parse_movement,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class MovementTable:
    """A movement table and how its rows map onto records."""

    name: str
    category: Category
    kind: EntityKind
    # First non-null column wins
    quantity_columns: tuple[str, ...] = ("quantity",)

    @property
    def entity_column(self) -> str:
        return "material_id" if self.kind is EntityKind.MATERIAL else "product_id"

    @property
    def is_snapshot(self) -> bool:
        return self.category in SNAPSHOT_CATEGORIES

    def to_record(self, row: dict[str, Any]) -> MovementRecord | None:
        """Typed record for a row, or None when the row has no usable identity."""
        quantity = next(
            (row[c] for c in self.quantity_columns if row.get(c) is not None), None
        )
        data: dict[str, Any] = {
            "category": self.category,
            "id": row.get("id"),
            "entity_id": row.get(self.entity_column),
            "entity_kind": self.kind,
            "branch_id": row.get("branch_id"),
            "quantity": quantity,
            "cost": row.get("cost"),
            "created_at": row.get("created_at"),
        }
        if self.is_snapshot:
            data["opening_stock"] = row.get("opening_stock")
        else:
            data["running_balance"] = row.get("running_balance")

        if data["entity_id"] is None or data["branch_id"] is None:
            logger.warning("movement_row_skipped", table=self.name, row_id=row.get("id"))
            return None
        try:
            return parse_movement(data)
        except PydanticValidationError as e:
            logger.warning(
                "movement_row_skipped",
                table=self.name,
                row_id=row.get("id"),
                error=str(e).splitlines()[0],
            )
            return None


def _tables(*tables: MovementTable) -> dict[str, MovementTable]:
    return {table.name: table for table in tables}


MOVEMENT_TABLES: dict[str, MovementTable] = _tables(
    # Materials
    MovementTable("inventory", Category.OPENING, EntityKind.MATERIAL),
    MovementTable("material_closing_stock", Category.CLOSING, EntityKind.MATERIAL),
    MovementTable("procurement_supplied", Category.PROCUREMENT_IN, EntityKind.MATERIAL),
    MovementTable("material_transfers_in", Category.TRANSFER_IN, EntityKind.MATERIAL),
    MovementTable("material_transfers_out", Category.TRANSFER_OUT, EntityKind.MATERIAL),
    MovementTable("material_usage", Category.USAGE_OUT, EntityKind.MATERIAL),
    MovementTable("damaged_materials", Category.DAMAGE_OUT, EntityKind.MATERIAL),
    # Products
    MovementTable("product_inventory", Category.OPENING, EntityKind.PRODUCT),
    MovementTable("product_closing_stock", Category.CLOSING, EntityKind.PRODUCT),
    MovementTable(
        "production", Category.PRODUCTION_IN, EntityKind.PRODUCT, ("yield", "quantity")
    ),
    MovementTable("product_transfers_in", Category.TRANSFER_IN, EntityKind.PRODUCT),
    MovementTable("product_transfers_out", Category.TRANSFER_OUT, EntityKind.PRODUCT),
    MovementTable("product_damages", Category.DAMAGE_OUT, EntityKind.PRODUCT),
    MovementTable("complimentary_products", Category.COMPLIMENTARY_OUT, EntityKind.PRODUCT),
)

# Tables whose `cost` column feeds the profit metrics
COST_TABLES: dict[str, CostSource] = {
    "complimentary_products": CostSource.COMPLIMENTARY,
    "product_damages": CostSource.PRODUCT_DAMAGE,
    "damaged_materials": CostSource.MATERIAL_DAMAGE,
    "imprest_supplied": CostSource.IMPREST,
    "material_usage": CostSource.INDIRECT_MATERIAL,
}

REFERENCE_TABLES = frozenset({"branches", "materials", "products", "product_recipes"})

SALES_TABLE = "sales"
SALE_ITEMS_TABLE = "sale_items"

KNOWN_TABLES = frozenset(
    set(MOVEMENT_TABLES) | set(COST_TABLES) | REFERENCE_TABLES | {SALES_TABLE, SALE_ITEMS_TABLE}
)


def movement_tables(kind: EntityKind | None = None) -> list[MovementTable]:
    """Registered movement tables, optionally of one entity kind."""
    return [t for t in MOVEMENT_TABLES.values() if kind is None or t.kind is kind]


def to_cost_record(row: dict[str, Any], source: CostSource) -> CostRecord | None:
    """Typed cost record for a row, or None when the row does not parse."""
    try:
        return CostRecord(
            id=row.get("id"),
            branch_id=row.get("branch_id"),
            created_at=row.get("created_at"),
            cost=row.get("cost"),
            source=source,
        )
    except PydanticValidationError as e:
        logger.warning(
            "cost_row_skipped",
            source=source.value,
            row_id=row.get("id"),
            error=str(e).splitlines()[0],
        )
        return None


def to_sale(row: dict[str, Any], lines: list[dict[str, Any]]) -> Sale | None:
    """Typed sale with its lines, or None when the row does not parse."""
    try:
        return Sale.model_validate({**row, "items": lines})
    except PydanticValidationError as e:
        logger.warning(
            "sale_row_skipped",
            row_id=row.get("id"),
            error=str(e).splitlines()[0],
        )
        return None
