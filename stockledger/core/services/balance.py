"""
Balance accumulator.

The one place the signed balance formula lives. Every screen that needs a
"current quantity" goes through accumulate() with a category-sign map.
"""

from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping
from types import MappingProxyType

from stockledger.core.entities import (
    Category,
    EntityKind,
    Material,
    MovementRecord,
    OutflowRecord,
    Sale,
)
from stockledger.core.exceptions import InsufficientStockError, ValidationError

# Fixed business rule. Closing snapshots carry no sign.
DEFAULT_SIGNS: Mapping[Category, int] = MappingProxyType(
    {
        Category.OPENING: 1,
        Category.PROCUREMENT_IN: 1,
        Category.TRANSFER_IN: 1,
        Category.PRODUCTION_IN: 1,
        Category.TRANSFER_OUT: -1,
        Category.USAGE_OUT: -1,
        Category.DAMAGE_OUT: -1,
        Category.SALES_OUT: -1,
        Category.COMPLIMENTARY_OUT: -1,
    }
)


def magnitudes(*categories: Category) -> Mapping[Category, int]:
    """Sign map that counts the given categories as plain positive quantities."""
    return MappingProxyType({category: 1 for category in categories})


def accumulate(
    records: Iterable[MovementRecord],
    category_sign: Mapping[Category, int] = DEFAULT_SIGNS,
) -> float:
    """
    Sum sign(category) * quantity over the records.

    No date filtering happens here; callers pre-filter. Categories missing
    from the sign map contribute nothing.
    """
    total = 0.0
    for record in records:
        sign = category_sign.get(record.category, 0)
        if sign:
            total += sign * record.quantity
    return total


def current_quantities(
    records: Iterable[MovementRecord],
    kind: EntityKind | None = None,
    branch_id: str | None = None,
) -> dict[str, float]:
    """Current quantity per entity id, optionally scoped to one kind and branch."""
    grouped: dict[str, list[MovementRecord]] = defaultdict(list)
    for record in records:
        if kind is not None and record.entity_kind != kind:
            continue
        if branch_id is not None and record.branch_id != branch_id:
            continue
        grouped[record.entity_id].append(record)
    return {entity_id: accumulate(rows) for entity_id, rows in grouped.items()}


def sales_to_movements(sales: Iterable[Sale]) -> list[OutflowRecord]:
    """Turn sale lines into sales_out movements of their products."""
    movements = []
    for sale in sales:
        if sale.branch_id is None:
            continue
        for line in sale.items:
            if line.product_id is None:
                continue
            movements.append(
                OutflowRecord(
                    category=Category.SALES_OUT,
                    entity_id=line.product_id,
                    entity_kind=EntityKind.PRODUCT,
                    branch_id=sale.branch_id,
                    quantity=line.quantity,
                    cost=line.total_cost,
                    created_at=sale.created_at,
                )
            )
    return movements


def ensure_available(
    entity_id: str,
    available: float,
    requested: float,
    branch_id: str | None = None,
) -> None:
    """Reject a withdrawal that is not positive or exceeds what is on hand."""
    if requested <= 0:
        raise ValidationError("quantity", "Enter a valid quantity", requested)
    if requested > available:
        raise InsufficientStockError(entity_id, available, requested, branch_id)


def low_stock(quantities: Mapping[str, float], materials: Iterable[Material]) -> list[str]:
    """
    Ids of materials at or below their minimum stock.

    Every material is checked, moved or not. A quantity of exactly zero is
    never low stock; a missing minimum counts as 0.
    """
    low = []
    for material in materials:
        quantity = quantities.get(material.id, 0.0)
        if quantity != 0 and quantity <= (material.minimum_stock or 0.0):
            low.append(material.id)
    return low


def stock_value(quantities: Mapping[str, float], price: Callable[[str], float]) -> float:
    """Sum of unit price times current quantity. Negative quantities count."""
    return sum(price(entity_id) * quantity for entity_id, quantity in quantities.items())
