"""Unit tests for database migrator."""

from pathlib import Path

import aiosqlite
import pytest

from batchflow.infrastructure.storage.sqlite.migrations.migrator import (
    IMMUTABILITY_TRIGGERS,
    REQUIRED_TABLES,
    MigrationInfo,
    create_backup,
    discover_migrations,
    get_current_version,
    get_migration_status,
    initialize_database,
    restore_backup,
    verify_schema_integrity,
)


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        migration_file = tmp_path / "v001_initial_schema.sql"
        migration_file.write_text("-- Test migration\nSELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "001"
        assert info.name == "initial_schema"
        assert info.path == migration_file
        assert len(info.checksum) == 16

    def test_different_content_different_checksum(self, tmp_path: Path):
        file1 = tmp_path / "v001_test1.sql"
        file1.write_text("SELECT 1;")
        file2 = tmp_path / "v002_test2.sql"
        file2.write_text("SELECT 2;")

        assert MigrationInfo.from_file(file1).checksum != MigrationInfo.from_file(file2).checksum

    def test_invalid_filename_raises(self, tmp_path: Path):
        invalid_file = tmp_path / "invalid_migration.sql"
        invalid_file.write_text("SELECT 1;")

        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(invalid_file)


def test_discover_migrations_finds_initial_schema():
    migrations = discover_migrations()
    assert migrations[0].version == "001"
    assert migrations[0].name == "initial_schema"


class TestInitializeDatabase:
    async def test_fresh_database(self, temp_db_path: Path):
        results = await initialize_database(temp_db_path, create_backup_before=False)

        assert results
        assert all(r.success for r in results)

        async with aiosqlite.connect(temp_db_path) as conn:
            cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type='table'")
            tables = {row[0] for row in await cursor.fetchall()}
            assert set(REQUIRED_TABLES) <= tables
            assert await get_current_version(conn) == "001"

    async def test_second_run_applies_nothing(self, migrated_db: Path):
        assert await initialize_database(migrated_db) == []
        assert not list(migrated_db.parent.glob("*.backup_*"))

    async def test_defaults_to_settings_path(self):
        from batchflow.config import get_settings

        await initialize_database(create_backup_before=False)
        assert get_settings().storage.db_path.exists()


class TestStatus:
    async def test_missing_database(self, temp_db_path: Path):
        status = await get_migration_status(temp_db_path)

        assert status["exists"] is False
        assert status["current_version"] is None
        assert "001" in status["pending_migrations"]

    async def test_migrated_database(self, migrated_db: Path):
        status = await get_migration_status(migrated_db)

        assert status["exists"] is True
        assert status["current_version"] == "001"
        assert status["applied_migrations"] == ["001"]
        assert status["pending_migrations"] == []
        assert status["total_migrations"] == len(discover_migrations())


class TestVerify:
    async def test_clean_database_passes(self, migrated_db: Path):
        checks = await verify_schema_integrity(migrated_db)

        assert {c["check"] for c in checks} == {
            "foreign_keys",
            "integrity",
            "required_tables",
            "immutability_triggers",
            "ledger_balance",
            "stage_history",
        }
        assert all(c["status"] == "PASS" for c in checks)

    async def test_detects_missing_trigger(self, migrated_db: Path):
        async with aiosqlite.connect(migrated_db) as conn:
            await conn.execute(f"DROP TRIGGER {IMMUTABILITY_TRIGGERS[0]}")
            await conn.commit()

        checks = {c["check"]: c for c in await verify_schema_integrity(migrated_db)}

        assert checks["immutability_triggers"]["status"] == "FAIL"
        assert checks["immutability_triggers"]["missing"] == [IMMUTABILITY_TRIGGERS[0]]

    async def test_detects_ledger_drift(self, migrated_db: Path, make_batch):
        batch = await make_batch(quantity=100)
        async with aiosqlite.connect(migrated_db) as conn:
            await conn.execute("UPDATE batches SET quantity = 999 WHERE id = ?", (batch.id,))
            await conn.commit()

        checks = {c["check"]: c for c in await verify_schema_integrity(migrated_db)}

        assert checks["ledger_balance"]["status"] == "FAIL"
        assert checks["ledger_balance"]["batches"] == [batch.id]


def test_backup_and_restore(tmp_path: Path):
    db_path = tmp_path / "data.db"
    db_path.write_bytes(b"original")

    backup = create_backup(db_path)
    db_path.write_bytes(b"damaged")
    restore_backup(db_path, backup)

    assert backup.exists()
    assert db_path.read_bytes() == b"original"


async def test_verify_detects_stage_drift(migrated_db: Path, make_batch):
    batch = await make_batch(quantity=10)
    async with aiosqlite.connect(migrated_db) as conn:
        await conn.execute("UPDATE batches SET stage = 'marketplace' WHERE id = ?", (batch.id,))
        await conn.commit()

    checks = {c["check"]: c for c in await verify_schema_integrity(migrated_db)}

    assert checks["stage_history"]["status"] == "FAIL"
    assert checks["stage_history"]["batches"] == [batch.id]
    assert checks["ledger_balance"]["status"] == "PASS"


async def test_verify_on_empty_file_reports_missing_tables(temp_db_path: Path):
    checks = {c["check"]: c for c in await verify_schema_integrity(temp_db_path)}

    assert checks["required_tables"]["status"] == "FAIL"
    assert checks["ledger_balance"]["status"] == "FAIL"
    assert checks["stage_history"]["error"] == "required tables missing"


async def test_changed_migration_is_not_reapplied(migrated_db: Path):
    async with aiosqlite.connect(migrated_db) as conn:
        await conn.execute("UPDATE schema_migrations SET checksum = 'stale' WHERE version = '001'")
        await conn.commit()

    assert await initialize_database(migrated_db, create_backup_before=False) == []
