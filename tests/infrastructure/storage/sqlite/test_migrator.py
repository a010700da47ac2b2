"""Tests for the ledger schema migrator."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import aiosqlite
import pytest

from stockledger.core.exceptions import DatabaseError
from stockledger.core.tables import KNOWN_TABLES
from stockledger.infrastructure.storage.sqlite.migrations.migrator import (
    MigrationInfo,
    MigrationResult,
    discover_migrations,
    get_applied_migrations,
    get_migration_status,
    initialize_database,
)

MIGRATOR = "stockledger.infrastructure.storage.sqlite.migrations.migrator"


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        path = tmp_path / "v007_add_waste.sql"
        path.write_text("SELECT 1;")

        info = MigrationInfo.from_file(path)

        assert info.version == "007"
        assert info.name == "add_waste"
        assert len(info.checksum) == 16

    def test_checksum_tracks_content(self, tmp_path: Path):
        first = tmp_path / "v001_a.sql"
        second = tmp_path / "v002_a.sql"
        first.write_text("SELECT 1;")
        second.write_text("SELECT 2;")

        assert MigrationInfo.from_file(first).checksum != MigrationInfo.from_file(second).checksum

    def test_invalid_filename_raises(self, tmp_path: Path):
        path = tmp_path / "ledger.sql"
        path.write_text("SELECT 1;")
        with pytest.raises(ValueError):
            MigrationInfo.from_file(path)


class TestDiscoverMigrations:
    def test_ships_ledger_schema(self):
        versions = [m.version for m in discover_migrations()]
        assert versions[0] == "001"
        assert versions == sorted(versions)

    def test_skips_invalid_filenames(self, tmp_path: Path):
        (tmp_path / "v002_b.sql").write_text("SELECT 1;")
        (tmp_path / "v001_a.sql").write_text("SELECT 1;")
        (tmp_path / "vbad.sql").write_text("SELECT 1;")

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", tmp_path):
            migrations = discover_migrations()

        assert [m.version for m in migrations] == ["001", "002"]


class TestGetAppliedMigrations:
    async def test_returns_empty_when_no_table(self, tmp_path: Path):
        async with aiosqlite.connect(tmp_path / "test.db") as conn:
            assert await get_applied_migrations(conn) == {}


class TestInitializeDatabase:
    async def test_creates_every_ledger_table(self, tmp_path: Path):
        db_path = tmp_path / "nested" / "ledger.db"

        results = await initialize_database(db_path)

        assert [(r.version, r.success) for r in results] == [("001", True), ("002", True)]
        async with aiosqlite.connect(db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
        assert KNOWN_TABLES <= tables

    async def test_idempotent(self, temp_db_path: Path):
        await initialize_database(temp_db_path)
        assert await initialize_database(temp_db_path) == []

    async def test_defaults_to_settings_path(self, temp_db_path: Path):
        mock_settings = MagicMock()
        mock_settings.storage.db_path = temp_db_path

        with patch(f"{MIGRATOR}.get_settings", return_value=mock_settings):
            await initialize_database()

        assert temp_db_path.exists()

    async def test_materials_carry_minimum_stock(self, migrated_db: Path):
        async with aiosqlite.connect(migrated_db) as conn:
            cursor = await conn.execute("PRAGMA table_info(materials)")
            columns = {row[1] for row in await cursor.fetchall()}
        assert "minimum_stock" in columns

    async def test_failed_migration_raises(self, tmp_path: Path):
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        (migrations_dir / "v001_broken.sql").write_text("CREATE TABLE (;")

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", migrations_dir):
            with pytest.raises(DatabaseError) as exc_info:
                await initialize_database(tmp_path / "test.db")

        assert exc_info.value.code == "DATABASE_ERROR"

    async def test_changed_migration_not_reapplied(self, tmp_path: Path):
        migrations_dir = tmp_path / "migrations"
        migrations_dir.mkdir()
        script = migrations_dir / "v001_init.sql"
        script.write_text(
            "CREATE TABLE IF NOT EXISTS schema_migrations ("
            "version TEXT PRIMARY KEY, name TEXT, checksum TEXT, execution_time_ms INTEGER);"
        )
        db_path = tmp_path / "test.db"

        with patch(f"{MIGRATOR}.MIGRATIONS_DIR", migrations_dir):
            await initialize_database(db_path)
            script.write_text(script.read_text() + "\n-- edited")
            assert await initialize_database(db_path) == []


class TestMigrationStatus:
    async def test_missing_database(self, tmp_path: Path):
        status = await get_migration_status(tmp_path / "absent.db")

        assert status["exists"] is False
        assert status["pending_migrations"] == ["001", "002"]
        assert set(status["missing_tables"]) == KNOWN_TABLES

    async def test_migrated_database(self, migrated_db: Path):
        status = await get_migration_status(migrated_db)

        assert status["exists"] is True
        assert status["current_version"] == "002"
        assert status["pending_migrations"] == []
        assert status["missing_tables"] == []


class TestMigrationResult:
    def test_failed_result(self):
        result = MigrationResult(
            version="001", name="ledger", success=False, execution_time_ms=3, error="boom"
        )
        assert result.success is False
        assert result.error == "boom"
