"""SQLite implementation of the append-only stock ledger."""

from datetime import datetime

import aiosqlite

from batchflow.config import get_logger
from batchflow.core.entities import MovementType, StockLedgerEntry
from batchflow.core.interfaces import ILedgerStore

logger = get_logger(__name__)


class SQLiteLedgerStore(ILedgerStore):
    """Ledger persistence. Rows are never updated or deleted (enforced by triggers)."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def append(self, entry: StockLedgerEntry) -> StockLedgerEntry:
        await self._conn.execute(
            """
            INSERT INTO stock_ledger_entries (
                id, batch_id, location_id, movement_type, quantity,
                reason, reference, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                entry.id,
                entry.batch_id,
                entry.location_id,
                entry.movement_type.value,
                entry.quantity,
                entry.reason,
                entry.reference,
                entry.created_at.isoformat(),
            ),
        )
        logger.info(
            "ledger_entry_recorded",
            entry_id=entry.id,
            batch_id=entry.batch_id,
            type=entry.movement_type.value,
            qty=entry.quantity,
        )
        return entry

    async def entries(self, batch_id: str) -> list[StockLedgerEntry]:
        cursor = await self._conn.execute(
            "SELECT * FROM stock_ledger_entries WHERE batch_id = ? ORDER BY rowid",
            (batch_id,),
        )
        return [self._row_to_entry(row) for row in await cursor.fetchall()]

    async def balance(self, batch_id: str) -> int:
        cursor = await self._conn.execute(
            "SELECT COALESCE(SUM(quantity), 0) FROM stock_ledger_entries WHERE batch_id = ?",
            (batch_id,),
        )
        row = await cursor.fetchone()
        return int(row[0])

    async def balance_by_location(self, batch_id: str) -> dict[str, int]:
        cursor = await self._conn.execute(
            """
            SELECT location_id, SUM(quantity) AS qty
            FROM stock_ledger_entries
            WHERE batch_id = ?
            GROUP BY location_id
            HAVING SUM(quantity) != 0
            ORDER BY location_id
            """,
            (batch_id,),
        )
        return {row["location_id"]: int(row["qty"]) for row in await cursor.fetchall()}

    def _row_to_entry(self, row: aiosqlite.Row) -> StockLedgerEntry:
        return StockLedgerEntry(
            id=row["id"],
            batch_id=row["batch_id"],
            location_id=row["location_id"],
            movement_type=MovementType(row["movement_type"]),
            quantity=row["quantity"],
            reason=row["reason"],
            reference=row["reference"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
