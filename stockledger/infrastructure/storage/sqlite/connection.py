"""
Async SQLite access for the ledger with aiosqlite.

Report reads go through a set of query-only connections so that nothing on
the read path can change the ledger. Seeding a local database goes through
one writer connection, serialized by a lock.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

import aiosqlite

from stockledger.config import get_logger, get_settings

logger = get_logger(__name__)


class LedgerPool:
    """Query-only reader connections plus a single writer."""

    def __init__(
        self,
        db_path: Path,
        readers: int = 5,
        busy_timeout: int = 30000,
    ):
        self.db_path = db_path
        self.readers = max(1, readers)
        self.busy_timeout = busy_timeout

        self._idle: asyncio.Queue[aiosqlite.Connection] = asyncio.Queue()
        self._open_readers: list[aiosqlite.Connection] = []
        self._writer: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()
        self._open_lock = asyncio.Lock()

    @property
    def is_open(self) -> bool:
        return self._writer is not None

    async def open(self) -> None:
        """Open the writer, which creates the file and sets WAL, then the readers."""
        async with self._open_lock:
            if self.is_open:
                return

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            primary = await aiosqlite.connect(self.db_path)
            await primary.execute("PRAGMA journal_mode=WAL")
            await primary.execute("PRAGMA synchronous=NORMAL")
            await primary.execute("PRAGMA foreign_keys=ON")
            await self._tune(primary)

            for _ in range(self.readers):
                conn = await aiosqlite.connect(self.db_path)
                await conn.execute("PRAGMA query_only=ON")
                await self._tune(conn)
                self._open_readers.append(conn)
                self._idle.put_nowait(conn)

            self._writer = primary
            logger.info("ledger_pool_opened", db_path=str(self.db_path), readers=self.readers)

    async def _tune(self, conn: aiosqlite.Connection) -> None:
        await conn.execute(f"PRAGMA busy_timeout={self.busy_timeout}")
        conn.row_factory = aiosqlite.Row

    @asynccontextmanager
    async def read(self) -> AsyncIterator[aiosqlite.Connection]:
        """Borrow a query-only connection until the block exits."""
        await self.open()
        conn = await self._idle.get()
        try:
            yield conn
        finally:
            # A reader must not keep a stale snapshot open
            if conn.in_transaction:
                await conn.rollback()
            self._idle.put_nowait(conn)

    @asynccontextmanager
    async def write(self) -> AsyncIterator[aiosqlite.Connection]:
        """The writer inside a transaction: committed on success, rolled back on error."""
        await self.open()
        async with self._write_lock:
            try:
                yield self._writer
                await self._writer.commit()
            except Exception:
                await self._writer.rollback()
                raise

    async def close(self) -> None:
        async with self._open_lock:
            for conn in self._open_readers:
                await conn.close()
            self._open_readers.clear()
            self._idle = asyncio.Queue()
            if self._writer is not None:
                await self._writer.close()
                self._writer = None
            logger.info("ledger_pool_closed", db_path=str(self.db_path))


_pool: LedgerPool | None = None


async def get_pool() -> LedgerPool:
    """The process-wide pool over the configured ledger database."""
    global _pool
    if _pool is None:
        storage = get_settings().storage
        _pool = LedgerPool(
            db_path=storage.db_path,
            readers=storage.reader_connections,
            busy_timeout=storage.busy_timeout,
        )
        await _pool.open()
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None


@asynccontextmanager
async def reader() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.read() as conn:
        yield conn


@asynccontextmanager
async def writer() -> AsyncIterator[aiosqlite.Connection]:
    pool = await get_pool()
    async with pool.write() as conn:
        yield conn
