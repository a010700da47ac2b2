"""SQLite implementation of the Movement Record Store and Reference Store."""

import re
from collections.abc import Iterable

import aiosqlite

from stockledger.config import get_logger
from stockledger.core.exceptions import (
    BackendFetchError,
    DatabaseError,
    UnknownTableError,
    ValidationError,
)
from stockledger.core.interfaces import IMovementStore, IReferenceStore, QueryFilters, Row
from stockledger.core.tables import KNOWN_TABLES
from stockledger.infrastructure.storage.sqlite.connection import reader, writer

logger = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _check_table(table: str) -> None:
    if table not in KNOWN_TABLES:
        raise UnknownTableError(table)


def _quote(column: str) -> str:
    if not _IDENTIFIER.match(column):
        raise ValidationError("column", "Invalid column name", column)
    return f'"{column}"'


def _select_list(columns: str) -> str:
    if columns.strip() == "*":
        return "*"
    return ", ".join(_quote(c.strip()) for c in columns.split(",") if c.strip())


def build_select(table: str, filters: QueryFilters | None, columns: str = "*") -> tuple[str, list]:
    """SELECT statement and parameters for a filtered, ordered table read."""
    _check_table(table)
    filters = filters or QueryFilters()

    clauses = []
    params: list = []
    for column, value in filters.eq.items():
        clauses.append(f"{_quote(column)} = ?")
        params.append(value)
    for column, values in filters.isin.items():
        if not values:
            clauses.append("0")
            continue
        clauses.append(f"{_quote(column)} IN ({', '.join('?' for _ in values)})")
        params.extend(values)
    for operator, predicates in ((">=", filters.gte), ("<=", filters.lte)):
        for column, value in predicates.items():
            clauses.append(f"{_quote(column)} {operator} ?")
            params.append(value)

    sql = f'SELECT {_select_list(columns)} FROM "{table}"'
    if clauses:
        sql += " WHERE " + " AND ".join(clauses)
    sql += " ORDER BY created_at, id"
    return sql, params


class SQLiteLedgerStore(IMovementStore, IReferenceStore):
    """Reads ledger tables from a local SQLite database."""

    async def fetch(
        self,
        table: str,
        filters: QueryFilters | None = None,
        columns: str = "*",
    ) -> list[Row]:
        sql, params = build_select(table, filters, columns)
        try:
            async with reader() as conn:
                cursor = await conn.execute(sql, params)
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error("ledger_fetch_failed", table=table, error=str(e))
            raise BackendFetchError(table, str(e)) from e

        logger.debug("ledger_fetched", table=table, rows=len(rows))
        return [dict(row) for row in rows]

    async def fetch_all(self, table: str) -> list[Row]:
        return await self.fetch(table)

    async def insert(self, table: str, rows: Iterable[Row]) -> int:
        """
        Insert rows into a ledger table, e.g. when seeding a local copy.

        Returns:
            Number of rows inserted
        """
        _check_table(table)
        count = 0
        try:
            async with writer() as conn:
                for row in rows:
                    columns = list(row)
                    placeholders = ", ".join("?" for _ in columns)
                    await conn.execute(
                        f'INSERT INTO "{table}" ({", ".join(_quote(c) for c in columns)}) '
                        f"VALUES ({placeholders})",
                        [row[c] for c in columns],
                    )
                    count += 1
        except aiosqlite.Error as e:
            raise DatabaseError(f"insert into {table}", str(e)) from e

        logger.info("ledger_rows_inserted", table=table, rows=count)
        return count
