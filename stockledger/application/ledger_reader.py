"""
Ledger reader.

Issues the concurrent store fetches a report needs and maps raw rows into
typed records through the table registry. Any failed fetch fails the whole
read; partial data never reaches the engine.
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import time

from stockledger.config import get_logger
from stockledger.core.entities import (
    ALL_BRANCHES,
    Branch,
    Category,
    CostRecord,
    CostSource,
    EntityKind,
    Material,
    MovementRecord,
    Product,
    Recipe,
    ReportWindow,
    Sale,
)
from stockledger.core.interfaces import IMovementStore, IReferenceStore, QueryFilters, Row
from stockledger.core.services import PriceResolver
from stockledger.core.tables import (
    COST_TABLES,
    SALE_ITEMS_TABLE,
    SALES_TABLE,
    MovementTable,
    movement_tables,
    to_cost_record,
    to_sale,
)

logger = get_logger(__name__)


@dataclass
class ReferenceData:
    """Reference tables of one report run."""

    branches: list[Branch] = field(default_factory=list)
    materials: list[Material] = field(default_factory=list)
    products: list[Product] = field(default_factory=list)
    recipes: list[Recipe] = field(default_factory=list)

    def resolver(self) -> PriceResolver:
        return PriceResolver(self.materials, self.products, self.recipes)

    def branch_named(self, name: str) -> Branch | None:
        wanted = name.strip().casefold()
        return next((b for b in self.branches if b.name.strip().casefold() == wanted), None)

    def product_names(self) -> dict[str, str]:
        return {p.id: p.name for p in self.products}

    def scope(self, branch_filter: str, head_office: str) -> str:
        """The head-office branch sees every branch."""
        if branch_filter == ALL_BRANCHES:
            return branch_filter
        office = self.branch_named(head_office)
        if office is not None and office.id == branch_filter:
            return ALL_BRANCHES
        return branch_filter


def window_filters(
    window: ReportWindow,
    branch_filter: str = ALL_BRANCHES,
    upper_only: bool = False,
) -> QueryFilters:
    """
    Store predicates for a window and branch.

    Bounds are ISO strings: the lower bound is the bare start date so that
    date-only timestamps of the first day still match.
    """
    eq = {} if branch_filter == ALL_BRANCHES else {"branch_id": branch_filter}
    gte = {}
    lte = {}
    if not window.is_unbounded:
        lte["created_at"] = f"{window.last_day.isoformat()}T{time.max.isoformat()}"
        if not upper_only:
            gte["created_at"] = window.start.isoformat()
    return QueryFilters(eq=eq, gte=gte, lte=lte)


class LedgerReader:
    """Concurrent fetch-and-map over the movement and reference stores."""

    def __init__(self, movement_store: IMovementStore, reference_store: IReferenceStore):
        self._movements = movement_store
        self._references = reference_store

    async def movements(
        self,
        window: ReportWindow,
        branch_filter: str = ALL_BRANCHES,
        kind: EntityKind | None = None,
        categories: frozenset[Category] | None = None,
    ) -> list[MovementRecord]:
        """
        Every movement record relevant to a window.

        Snapshot tables are read with only the upper bound so that history
        before the window stays visible to the opening lookup.
        """
        tables = [
            table
            for table in movement_tables(kind)
            if categories is None or table.category in categories
        ]
        results = await asyncio.gather(
            *(
                self._movements.fetch(
                    table.name,
                    window_filters(window, branch_filter, upper_only=table.is_snapshot),
                )
                for table in tables
            )
        )
        records: list[MovementRecord] = []
        for table, rows in zip(tables, results):
            records.extend(self._map(table, rows))

        logger.debug(
            "movements_loaded",
            tables=len(tables),
            records=len(records),
            branch_filter=branch_filter,
        )
        return records

    @staticmethod
    def _map(table: MovementTable, rows: list[Row]) -> list[MovementRecord]:
        records = []
        for row in rows:
            record = table.to_record(row)
            if record is not None:
                records.append(record)
        return records

    async def references(self) -> ReferenceData:
        """Branches, materials, products and recipes."""
        branches, materials, products, recipes = await asyncio.gather(
            self._references.fetch_all("branches"),
            self._references.fetch_all("materials"),
            self._references.fetch_all("products"),
            self._references.fetch_all("product_recipes"),
        )
        return ReferenceData(
            branches=[Branch.model_validate(r) for r in branches if r.get("id") is not None],
            materials=[Material.model_validate(r) for r in materials if r.get("id") is not None],
            products=[Product.model_validate(r) for r in products if r.get("id") is not None],
            recipes=[
                Recipe.model_validate(r)
                for r in recipes
                if r.get("id") is not None and r.get("product_id") is not None
            ],
        )

    async def sales(
        self,
        window: ReportWindow,
        branch_filter: str = ALL_BRANCHES,
        product_names: dict[str, str] | None = None,
    ) -> list[Sale]:
        """Sales in a window with their lines attached."""
        sale_rows = await self._movements.fetch(SALES_TABLE, window_filters(window, branch_filter))
        sale_ids = [row["id"] for row in sale_rows if row.get("id") is not None]
        item_rows = []
        if sale_ids:
            item_rows = await self._movements.fetch(
                SALE_ITEMS_TABLE, QueryFilters(isin={"sale_id": sale_ids})
            )

        names = product_names or {}
        lines: dict[str, list[Row]] = defaultdict(list)
        for item in item_rows:
            if item.get("sale_id") is None:
                continue
            product_id = item.get("product_id")
            line = dict(item)
            if line.get("product_name") is None and product_id is not None:
                line["product_name"] = names.get(str(product_id))
            lines[str(item["sale_id"])].append(line)

        sales = (to_sale(row, lines.get(str(row.get("id")), [])) for row in sale_rows)
        return [sale for sale in sales if sale is not None]

    async def costs(
        self,
        window: ReportWindow,
        branch_filter: str = ALL_BRANCHES,
        sources: tuple[CostSource, ...] | None = None,
    ) -> dict[CostSource, list[CostRecord]]:
        """Cost-only records per source for a window."""
        tables = [
            (name, source)
            for name, source in COST_TABLES.items()
            if sources is None or source in sources
        ]
        results = await asyncio.gather(
            *(
                self._movements.fetch(name, window_filters(window, branch_filter))
                for name, _ in tables
            )
        )
        buckets: dict[CostSource, list[CostRecord]] = {}
        for (_, source), rows in zip(tables, results):
            records = (to_cost_record(row, source) for row in rows)
            buckets[source] = [r for r in records if r is not None]
        return buckets
