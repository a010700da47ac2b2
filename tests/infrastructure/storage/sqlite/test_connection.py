"""Unit tests for the SQLite ledger pool."""

from pathlib import Path
from unittest.mock import patch

import aiosqlite
import pytest

import stockledger.infrastructure.storage.sqlite.connection as conn_module
from stockledger.infrastructure.storage.sqlite.connection import (
    LedgerPool,
    close_pool,
    get_pool,
    reader,
    writer,
)


async def _scalar(conn: aiosqlite.Connection, sql: str):
    cursor = await conn.execute(sql)
    return (await cursor.fetchone())[0]


class TestLedgerPoolInit:
    def test_defaults(self, temp_db_path: Path):
        pool = LedgerPool(temp_db_path)
        assert pool.db_path == temp_db_path
        assert pool.readers == 5
        assert pool.busy_timeout == 30000
        assert pool.is_open is False

    def test_at_least_one_reader(self, temp_db_path: Path):
        assert LedgerPool(temp_db_path, readers=0).readers == 1


class TestLedgerPoolLifecycle:
    async def test_open_creates_directory(self, tmp_path: Path):
        db_path = tmp_path / "subdir" / "nested" / "ledger.db"
        pool = LedgerPool(db_path, readers=1)

        await pool.open()
        assert db_path.exists()
        await pool.close()

    async def test_open_idempotent(self, temp_db_path: Path):
        pool = LedgerPool(temp_db_path, readers=2)

        await pool.open()
        await pool.open()

        assert len(pool._open_readers) == 2
        assert pool._idle.qsize() == 2
        await pool.close()

    async def test_close_resets(self, temp_db_path: Path):
        pool = LedgerPool(temp_db_path, readers=2)
        await pool.open()
        await pool.close()

        assert pool.is_open is False
        assert pool._open_readers == []
        assert pool._idle.qsize() == 0


class TestReadersAndWriter:
    async def test_reader_pragmas(self, temp_db_path: Path):
        pool = LedgerPool(temp_db_path, readers=1, busy_timeout=1234)
        async with pool.read() as conn:
            assert await _scalar(conn, "PRAGMA query_only") == 1
            assert await _scalar(conn, "PRAGMA journal_mode") == "wal"
            assert await _scalar(conn, "PRAGMA busy_timeout") == 1234
            assert conn.row_factory is aiosqlite.Row
        await pool.close()

    async def test_writer_pragmas(self, temp_db_path: Path):
        pool = LedgerPool(temp_db_path, readers=1)
        async with pool.write() as conn:
            assert await _scalar(conn, "PRAGMA query_only") == 0
            assert await _scalar(conn, "PRAGMA foreign_keys") == 1
        await pool.close()

    async def test_reader_refuses_writes(self, temp_db_path: Path):
        pool = LedgerPool(temp_db_path, readers=1)
        async with pool.write() as conn:
            await conn.execute("CREATE TABLE t (x INTEGER)")

        with pytest.raises(aiosqlite.OperationalError):
            async with pool.read() as conn:
                await conn.execute("INSERT INTO t VALUES (1)")
        # Connection returned to the pool after the failure
        assert pool._idle.qsize() == 1
        await pool.close()

    async def test_read_borrows_and_returns(self, temp_db_path: Path):
        pool = LedgerPool(temp_db_path, readers=1)
        async with pool.read() as conn:
            assert pool._idle.qsize() == 0
            assert isinstance(conn, aiosqlite.Connection)
        assert pool._idle.qsize() == 1
        await pool.close()

    async def test_write_commits_for_readers(self, temp_db_path: Path):
        pool = LedgerPool(temp_db_path, readers=1)
        async with pool.write() as conn:
            await conn.execute("CREATE TABLE t (x INTEGER)")
            await conn.execute("INSERT INTO t VALUES (1)")

        async with pool.read() as conn:
            assert await _scalar(conn, "SELECT COUNT(*) FROM t") == 1
        await pool.close()

    async def test_write_rolls_back_on_error(self, temp_db_path: Path):
        pool = LedgerPool(temp_db_path, readers=1)
        async with pool.write() as conn:
            await conn.execute("CREATE TABLE t (x INTEGER)")

        with pytest.raises(RuntimeError):
            async with pool.write() as conn:
                await conn.execute("INSERT INTO t VALUES (1)")
                raise RuntimeError("boom")

        async with pool.read() as conn:
            assert await _scalar(conn, "SELECT COUNT(*) FROM t") == 0
        assert not pool._write_lock.locked()
        await pool.close()


class TestGlobalPool:
    async def test_get_pool_from_settings(self, mock_settings):
        conn_module._pool = None
        with patch.object(conn_module, "get_settings", return_value=mock_settings):
            try:
                pool = await get_pool()
                assert pool.readers == 2
                assert pool.busy_timeout == 5000
                assert await get_pool() is pool
            finally:
                await close_pool()
        assert conn_module._pool is None

    async def test_close_pool_safe_when_none(self):
        conn_module._pool = None
        await close_pool()

    async def test_module_reader_and_writer(self, mock_settings):
        conn_module._pool = None
        with patch.object(conn_module, "get_settings", return_value=mock_settings):
            try:
                async with writer() as conn:
                    await conn.execute("CREATE TABLE t (x INTEGER)")
                    await conn.execute("INSERT INTO t VALUES (7)")
                async with reader() as conn:
                    cursor = await conn.execute("SELECT x FROM t")
                    row = await cursor.fetchone()
                    assert row["x"] == 7
            finally:
                await close_pool()
