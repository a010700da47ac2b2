"""
Range aggregator.

Builds the date-ranged stock movement table: one RangeSummary per
(entity, branch) pair found in the opening-balance category, with opening
and closing balances at the window boundaries and flow buckets summed over
the window, valued at the resolved unit price.
"""

from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence

from stockledger.config import get_logger
from stockledger.core.entities import (
    ALL_BRANCHES,
    BalanceMode,
    Category,
    EntityKind,
    MovementRecord,
    RangeSummary,
    RangeTotals,
    ReportWindow,
    ValueTotals,
)
from stockledger.core.services.balance import accumulate, magnitudes
from stockledger.core.services.point_in_time import GroupKey, PointInTimeResolver

logger = get_logger(__name__)

PriceLookup = Callable[[str, EntityKind], float]

STOCK_IN_SIGNS = magnitudes(
    Category.PROCUREMENT_IN, Category.TRANSFER_IN, Category.PRODUCTION_IN
)
DAMAGE_SIGNS = magnitudes(Category.DAMAGE_OUT)
TRANSFER_OUT_SIGNS = magnitudes(Category.TRANSFER_OUT)


def _no_price(entity_id: str, kind: EntityKind) -> float:
    return 0.0


def _partition(
    records: Iterable[MovementRecord], branch_filter: str
) -> dict[Category, dict[GroupKey, list[MovementRecord]]]:
    tables: dict[Category, dict[GroupKey, list[MovementRecord]]] = defaultdict(
        lambda: defaultdict(list)
    )
    for record in records:
        if branch_filter != ALL_BRANCHES and record.branch_id != branch_filter:
            continue
        tables[record.category][record.group_key].append(record)
    return tables


def _closing_history(
    tables: dict[Category, dict[GroupKey, list[MovementRecord]]], pair: GroupKey
) -> list[MovementRecord]:
    closing = tables[Category.CLOSING].get(pair)
    if closing:
        return closing
    # No closing view for the pair: fall back to every balance-bearing row
    history = []
    for category, groups in tables.items():
        if category is Category.CLOSING:
            continue
        history.extend(r for r in groups.get(pair, ()) if r.carries_balance)
    return history


def aggregate_range(
    records: Iterable[MovementRecord],
    branch_filter: str = ALL_BRANCHES,
    window: ReportWindow | None = None,
    price_of: PriceLookup | None = None,
    resolver: PointInTimeResolver | None = None,
) -> list[RangeSummary]:
    """
    One summary per (kind, entity, branch) pair with opening-category rows.

    Pairs without any opening-category row are not reported, even when they
    have damages or transfers.
    """
    window = window or ReportWindow()
    price_of = price_of or _no_price
    resolver = resolver or PointInTimeResolver()
    tables = _partition(records, branch_filter)

    anchors = tables[Category.OPENING]
    summaries = []
    for pair in sorted(anchors):
        kind, entity_id, branch_id = pair

        opening = resolver.snapshot(
            pair, anchors[pair], window.start, BalanceMode.OPENING
        ).quantity
        closing = resolver.snapshot(
            pair, _closing_history(tables, pair), window.last_day, BalanceMode.CLOSING
        ).quantity

        def in_window(*categories: Category) -> list[MovementRecord]:
            return [
                r
                for category in categories
                for r in tables[category].get(pair, ())
                if window.contains(r.created_at)
            ]

        damages = accumulate(in_window(Category.DAMAGE_OUT), DAMAGE_SIGNS)
        stock_in = accumulate(
            in_window(Category.PROCUREMENT_IN, Category.TRANSFER_IN, Category.PRODUCTION_IN),
            STOCK_IN_SIGNS,
        )
        transfers_out = accumulate(in_window(Category.TRANSFER_OUT), TRANSFER_OUT_SIGNS)

        unit_price = price_of(entity_id, kind)
        summaries.append(
            RangeSummary(
                entity_id=entity_id,
                entity_kind=kind,
                branch_id=branch_id,
                opening=opening,
                closing=closing,
                damages=damages,
                stock_in=stock_in,
                transfers_out=transfers_out,
                unit_price=unit_price,
                opening_value=opening * unit_price,
                closing_value=closing * unit_price,
                damages_value=damages * unit_price,
                stock_in_value=stock_in * unit_price,
                transfers_out_value=transfers_out * unit_price,
            )
        )

    logger.debug(
        "range_aggregated",
        branch_filter=branch_filter,
        pairs=len(summaries),
        memo_hits=resolver.hits,
    )
    return summaries


def _values(summary: RangeSummary) -> ValueTotals:
    return ValueTotals(
        opening=summary.opening_value,
        closing=summary.closing_value,
        damages=summary.damages_value,
        stock_in=summary.stock_in_value,
        transfers_out=summary.transfers_out_value,
    )


def summarize_totals(summaries: Iterable[RangeSummary]) -> RangeTotals:
    """Per-kind and overall monetary totals."""
    material = ValueTotals()
    product = ValueTotals()
    for summary in summaries:
        if summary.entity_kind is EntityKind.MATERIAL:
            material = material + _values(summary)
        else:
            product = product + _values(summary)
    return RangeTotals(material=material, product=product, total=material + product)


def merge_branches(summaries: Sequence[RangeSummary]) -> list[RangeSummary]:
    """Collapse per-branch summaries into one branch-agnostic summary per entity."""
    merged: dict[tuple[EntityKind, str], dict[str, float]] = {}
    fields = (
        "opening",
        "closing",
        "damages",
        "stock_in",
        "transfers_out",
        "opening_value",
        "closing_value",
        "damages_value",
        "stock_in_value",
        "transfers_out_value",
    )
    prices: dict[tuple[EntityKind, str], float] = {}
    for summary in summaries:
        key = (summary.entity_kind, summary.entity_id)
        bucket = merged.setdefault(key, dict.fromkeys(fields, 0.0))
        for field in fields:
            bucket[field] += getattr(summary, field)
        prices.setdefault(key, summary.unit_price)

    return [
        RangeSummary(
            entity_id=entity_id,
            entity_kind=kind,
            branch_id=None,
            unit_price=prices[(kind, entity_id)],
            **merged[(kind, entity_id)],
        )
        for kind, entity_id in sorted(merged)
    ]
