"""
Point-in-time resolver.

Resolves the stock of one (entity, branch) group as of an instant by
reading the stored stock level of the latest qualifying record. It trusts
the running balance maintained by the write side and never recomputes it
from deltas.
"""

from collections.abc import Sequence
from datetime import date, datetime, time
from typing import Any

from stockledger.core.entities import (
    BalanceMode,
    BalanceSnapshot,
    EntityKind,
    MovementRecord,
    StockSnapshotRecord,
    naive_utc,
)

GroupKey = tuple[EntityKind, str, str]


def _id_order(row_id: Any) -> tuple[int, int, str]:
    if isinstance(row_id, int) and not isinstance(row_id, bool):
        return (0, row_id, "")
    if row_id is None:
        return (2, 0, "")
    return (1, 0, str(row_id))


def chronological(records: Sequence[MovementRecord]) -> list[MovementRecord]:
    """
    Order dated records oldest first.

    Ties on created_at break by row id (integers numerically, before string
    ids), then by input position. Undated records are dropped.
    """
    indexed = [
        (record.created_at, _id_order(record.id), position, record)
        for position, record in enumerate(records)
        if record.created_at is not None
    ]
    indexed.sort(key=lambda item: item[:3])
    return [item[3] for item in indexed]


def _bound(instant: date | datetime, mode: BalanceMode) -> datetime:
    if isinstance(instant, datetime):
        return naive_utc(instant)
    if mode is BalanceMode.CLOSING:
        return datetime.combine(instant, time.max)
    return datetime.combine(instant, time.min)


def _opening_fallback(record: MovementRecord) -> float:
    if isinstance(record, StockSnapshotRecord) and record.opening_stock is not None:
        return record.opening_stock
    return record.stock_level


def resolve_at(
    records: Sequence[MovementRecord],
    instant: date | datetime | None,
    mode: BalanceMode | str = BalanceMode.CLOSING,
) -> float:
    """
    Quantity of one group as of an instant.

    - No instant: stock level of the most recent record.
    - Closing: stock level of the latest record at or before the instant
      (a date means the end of that day); 0 if none.
    - Opening: stock level of the latest record strictly before the instant
      (a date means the start of that day). With no earlier record, the
      opening_stock of the earliest record on or after the instant.
    """
    mode = BalanceMode(mode)
    ordered = chronological(records)
    if not ordered:
        return 0.0

    if instant is None:
        return ordered[-1].stock_level

    bound = _bound(instant, mode)

    if mode is BalanceMode.CLOSING:
        before = [r for r in ordered if r.created_at <= bound]
        return before[-1].stock_level if before else 0.0

    before = [r for r in ordered if r.created_at < bound]
    if before:
        return before[-1].stock_level
    after = [r for r in ordered if r.created_at >= bound]
    if after:
        return _opening_fallback(after[0])
    return 0.0


def _fingerprint(records: Sequence[MovementRecord]) -> tuple:
    return tuple((r.category, r.id, r.created_at, r.stock_level) for r in records)


class PointInTimeResolver:
    """
    Memoizing resolver for a single report computation.

    Snapshots are cached per group, record set, as_of and mode, so a
    group resolved against different records is computed again.
    """

    def __init__(self) -> None:
        self._cache: dict[tuple[GroupKey, tuple, Any, BalanceMode], BalanceSnapshot] = {}
        self.hits = 0

    def snapshot(
        self,
        group: GroupKey,
        records: Sequence[MovementRecord],
        instant: date | datetime | None,
        mode: BalanceMode | str,
    ) -> BalanceSnapshot:
        mode = BalanceMode(mode)
        key = (group, _fingerprint(records), instant, mode)
        cached = self._cache.get(key)
        if cached is not None:
            self.hits += 1
            return cached

        kind, entity_id, branch_id = group
        as_of = _bound(instant, mode) if instant is not None else None
        snapshot = BalanceSnapshot(
            entity_id=entity_id,
            entity_kind=kind,
            branch_id=branch_id,
            as_of=as_of,
            mode=mode,
            quantity=resolve_at(records, instant, mode),
        )
        self._cache[key] = snapshot
        return snapshot

    def clear(self) -> None:
        self._cache.clear()
        self.hits = 0
