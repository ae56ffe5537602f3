"""
Versioned SQL migrations for the BatchFlow database.

Migration files live next to this module as ``vNNN_<name>.sql`` and are
applied in version order. Each applied file is recorded in
``schema_migrations`` with a content checksum; a file whose checksum no
longer matches its recorded one stops the run rather than being re-applied.

A copy of the database is taken before migrating and restored if anything
goes wrong. ``verify_schema_integrity`` checks what the ledger relies on:
tables, append-only triggers, and that batch quantities and stages agree
with the ledger and stage history.
"""

import hashlib
import re
import shutil
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import aiosqlite

from batchflow.config import get_logger, get_settings

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).parent
_FILENAME_RE = re.compile(r"v(\d+)_(.+)\.sql")

REQUIRED_TABLES = [
    "batches",
    "batch_stage_history",
    "stock_ledger_entries",
    "allocations",
    "purchase_orders",
    "po_line_items",
    "po_status_history",
    "reconciliations",
    "attachments",
    "schema_migrations",
]

IMMUTABILITY_TRIGGERS = [
    "trg_stock_ledger_no_update",
    "trg_stock_ledger_no_delete",
    "trg_batch_stage_history_no_update",
    "trg_batch_stage_history_no_delete",
    "trg_po_status_history_no_update",
    "trg_po_status_history_no_delete",
    "trg_batches_no_delete",
]


@dataclass
class MigrationInfo:
    version: str
    name: str
    path: Path
    checksum: str

    @classmethod
    def from_file(cls, path: Path) -> "MigrationInfo":
        match = _FILENAME_RE.fullmatch(path.name)
        if not match:
            raise ValueError(f"Invalid migration filename: {path.name}")
        checksum = hashlib.sha256(path.read_bytes()).hexdigest()[:16]
        return cls(version=match.group(1), name=match.group(2), path=path, checksum=checksum)


@dataclass
class MigrationResult:
    version: str
    name: str
    success: bool
    execution_time_ms: int
    error: str | None = None


def _resolve(db_path: Path | None) -> Path:
    return db_path or get_settings().storage.db_path


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


async def get_applied_migrations(conn: aiosqlite.Connection) -> dict[str, str]:
    """Map of applied version -> checksum; empty before the first migration."""
    try:
        cursor = await conn.execute("SELECT version, checksum FROM schema_migrations ORDER BY version")
    except aiosqlite.OperationalError:
        return {}
    return {row[0]: row[1] for row in await cursor.fetchall()}


async def get_current_version(conn: aiosqlite.Connection) -> str | None:
    applied = await get_applied_migrations(conn)
    return max(applied) if applied else None


def discover_migrations() -> list[MigrationInfo]:
    migrations = []
    for path in sorted(MIGRATIONS_DIR.glob("v*.sql")):
        try:
            migrations.append(MigrationInfo.from_file(path))
        except ValueError as e:
            logger.warning("skipping_invalid_migration", path=str(path), error=str(e))
    return migrations


async def apply_migration(conn: aiosqlite.Connection, migration: MigrationInfo) -> MigrationResult:
    """Run one migration script and record it in ``schema_migrations``."""
    logger.info("migration_started", version=migration.version, name=migration.name)
    started = time.perf_counter()

    try:
        await conn.executescript(migration.path.read_text(encoding="utf-8"))
        await conn.execute(
            "INSERT INTO schema_migrations (version, name, checksum, execution_time_ms) "
            "VALUES (?, ?, ?, ?)",
            (migration.version, migration.name, migration.checksum, _elapsed_ms(started)),
        )
        await conn.commit()
    except aiosqlite.Error as e:
        await conn.rollback()
        logger.error("migration_failed", version=migration.version, error=str(e))
        return MigrationResult(
            migration.version, migration.name, False, _elapsed_ms(started), str(e)
        )

    elapsed = _elapsed_ms(started)
    logger.info("migration_complete", version=migration.version, execution_time_ms=elapsed)
    return MigrationResult(migration.version, migration.name, True, elapsed)


def create_backup(db_path: Path) -> Path:
    """Copy the database file aside before migrating."""
    backup_path = db_path.with_suffix(f".backup_{datetime.now():%Y%m%d_%H%M%S}.db")
    shutil.copy2(db_path, backup_path)
    logger.info("database_backup_created", backup_path=str(backup_path))
    return backup_path


def restore_backup(db_path: Path, backup_path: Path) -> None:
    shutil.copy2(backup_path, db_path)
    logger.warning("database_restored_from_backup", backup_path=str(backup_path))


async def initialize_database(
    db_path: Path | None = None,
    create_backup_before: bool = True,
) -> list[MigrationResult]:
    """
    Apply every pending migration.

    Args:
        db_path: Database file (default from settings)
        create_backup_before: Copy an existing database aside first; the copy
            is removed again when every migration succeeds

    Returns:
        One result per migration attempted; empty when already up to date
    """
    db_path = _resolve(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    backup_path = create_backup(db_path) if create_backup_before and db_path.exists() else None

    results: list[MigrationResult] = []
    try:
        async with aiosqlite.connect(db_path) as conn:
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            applied = await get_applied_migrations(conn)

            for migration in discover_migrations():
                recorded = applied.get(migration.version)
                if recorded == migration.checksum:
                    continue
                if recorded is not None:
                    logger.error(
                        "migration_checksum_mismatch",
                        version=migration.version,
                        recorded=recorded,
                        on_disk=migration.checksum,
                    )
                    break

                result = await apply_migration(conn, migration)
                results.append(result)
                if not result.success:
                    break

        if backup_path and all(r.success for r in results):
            backup_path.unlink()
    except Exception as e:
        logger.error("database_initialization_failed", db_path=str(db_path), error=str(e))
        if backup_path and backup_path.exists():
            restore_backup(db_path, backup_path)
        raise

    logger.info("database_initialized", db_path=str(db_path), applied=len(results))
    return results


async def get_migration_status(db_path: Path | None = None) -> dict:
    db_path = _resolve(db_path)
    discovered = discover_migrations()

    if not db_path.exists():
        return {
            "exists": False,
            "current_version": None,
            "applied_migrations": [],
            "pending_migrations": [m.version for m in discovered],
        }

    async with aiosqlite.connect(db_path) as conn:
        applied = await get_applied_migrations(conn)

    return {
        "exists": True,
        "current_version": max(applied) if applied else None,
        "applied_migrations": list(applied),
        "pending_migrations": [m.version for m in discovered if m.version not in applied],
        "total_migrations": len(discovered),
    }


# ---------------------------------------------------------------------------
# Integrity checks
# ---------------------------------------------------------------------------

IntegrityCheck = Callable[[aiosqlite.Connection], Awaitable[dict]]


def _result(name: str, failures: list, key: str) -> dict:
    return {"check": name, "status": "FAIL" if failures else "PASS", key: failures}


async def _sqlite_names(conn: aiosqlite.Connection, kind: str) -> set[str]:
    cursor = await conn.execute("SELECT name FROM sqlite_master WHERE type = ?", (kind,))
    return {row[0] for row in await cursor.fetchall()}


async def _check_foreign_keys(conn: aiosqlite.Connection) -> dict:
    cursor = await conn.execute("PRAGMA foreign_key_check")
    violations = await cursor.fetchall()
    return {
        "check": "foreign_keys",
        "status": "FAIL" if violations else "PASS",
        "violations": len(violations),
    }


async def _check_integrity(conn: aiosqlite.Connection) -> dict:
    cursor = await conn.execute("PRAGMA integrity_check")
    outcome = (await cursor.fetchone())[0]
    return {"check": "integrity", "status": "PASS" if outcome == "ok" else "FAIL", "result": outcome}


async def _check_tables(conn: aiosqlite.Connection) -> dict:
    existing = await _sqlite_names(conn, "table")
    return _result("required_tables", [t for t in REQUIRED_TABLES if t not in existing], "missing")


async def _check_triggers(conn: aiosqlite.Connection) -> dict:
    existing = await _sqlite_names(conn, "trigger")
    missing = [t for t in IMMUTABILITY_TRIGGERS if t not in existing]
    return _result("immutability_triggers", missing, "missing")


async def _check_ledger_balance(conn: aiosqlite.Connection) -> dict:
    """Every batch quantity equals the sum of its ledger entries."""
    cursor = await conn.execute(
        """
        SELECT b.id
        FROM batches b
        LEFT JOIN (
            SELECT batch_id, SUM(quantity) AS qty
            FROM stock_ledger_entries GROUP BY batch_id
        ) l ON l.batch_id = b.id
        WHERE b.quantity != COALESCE(l.qty, 0)
        ORDER BY b.id
        """
    )
    return _result("ledger_balance", [row[0] for row in await cursor.fetchall()], "batches")


async def _check_stage_history(conn: aiosqlite.Connection) -> dict:
    """Every batch has history and its latest history row is its current stage."""
    cursor = await conn.execute(
        """
        SELECT b.id
        FROM batches b
        LEFT JOIN batch_stage_history h ON h.id = (
            SELECT MAX(id) FROM batch_stage_history WHERE batch_id = b.id
        )
        WHERE h.stage IS NULL OR h.stage != b.stage
        ORDER BY b.id
        """
    )
    return _result("stage_history", [row[0] for row in await cursor.fetchall()], "batches")


# Ledger checks assume the tables exist; they run only when required_tables passes
SCHEMA_CHECKS: list[IntegrityCheck] = [
    _check_foreign_keys,
    _check_integrity,
    _check_tables,
    _check_triggers,
]
LEDGER_CHECKS: list[IntegrityCheck] = [_check_ledger_balance, _check_stage_history]


async def verify_schema_integrity(db_path: Path | None = None) -> list[dict]:
    """
    Run every integrity check against the database.

    Returns:
        One dict per check with ``check``, ``status`` ("PASS"/"FAIL") and
        the offending items
    """
    checks: list[dict] = []
    async with aiosqlite.connect(_resolve(db_path)) as conn:
        for check in SCHEMA_CHECKS:
            checks.append(await check(conn))

        tables_ok = next(c for c in checks if c["check"] == "required_tables")["status"] == "PASS"
        for check in LEDGER_CHECKS:
            if tables_ok:
                checks.append(await check(conn))
            else:
                name = check.__name__.removeprefix("_check_")
                checks.append({"check": name, "status": "FAIL", "error": "required tables missing"})

    failed = [c["check"] for c in checks if c["status"] != "PASS"]
    if failed:
        logger.warning("schema_integrity_failed", failed=failed)
    return checks
