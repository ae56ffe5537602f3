"""SQLite implementation of batch and stage history storage."""

import json
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import aiosqlite

from batchflow.config import get_logger
from batchflow.core.entities import Batch, BatchStage, StageHistoryEntry
from batchflow.core.interfaces import IBatchStore

logger = get_logger(__name__)


def _date_or_none(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


class SQLiteBatchStore(IBatchStore):
    """Batch persistence bound to a unit of work's connection."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def create(self, batch: Batch) -> Batch:
        """Insert batch row and its seeded history."""
        await self._conn.execute(
            """
            INSERT INTO batches (
                id, batch_number, sku, product_name, quantity, unit_cost,
                total_cost, stage, po_id, supplier_id, ordered_date,
                expected_arrival, actual_arrival, notes, lineage_of, active,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                batch.id,
                batch.batch_number,
                batch.sku,
                batch.product_name,
                batch.quantity,
                str(batch.unit_cost),
                str(batch.total_cost),
                batch.stage.value,
                batch.po_id,
                batch.supplier_id,
                batch.ordered_date.isoformat(),
                batch.expected_arrival.isoformat() if batch.expected_arrival else None,
                batch.actual_arrival.isoformat() if batch.actual_arrival else None,
                batch.notes,
                json.dumps(batch.lineage_of),
                int(batch.active),
                batch.created_at.isoformat(),
                batch.updated_at.isoformat(),
            ),
        )
        for entry in batch.stage_history:
            entry.batch_id = batch.id
            await self.add_stage_entry(entry)

        logger.info(
            "batch_created",
            batch_id=batch.id,
            batch_number=batch.batch_number,
            sku=batch.sku,
        )
        return batch

    async def get(self, batch_id: str) -> Batch | None:
        cursor = await self._conn.execute("SELECT * FROM batches WHERE id = ?", (batch_id,))
        row = await cursor.fetchone()
        if row is None:
            return None
        return self._row_to_batch(row, await self._history(batch_id))

    async def update(self, batch: Batch) -> Batch:
        await self._conn.execute(
            """
            UPDATE batches SET
                quantity = ?,
                unit_cost = ?,
                total_cost = ?,
                stage = ?,
                actual_arrival = ?,
                notes = ?,
                active = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                batch.quantity,
                str(batch.unit_cost),
                str(batch.total_cost),
                batch.stage.value,
                batch.actual_arrival.isoformat() if batch.actual_arrival else None,
                batch.notes,
                int(batch.active),
                batch.updated_at.isoformat(),
                batch.id,
            ),
        )
        return batch

    async def add_stage_entry(self, entry: StageHistoryEntry) -> StageHistoryEntry:
        cursor = await self._conn.execute(
            """
            INSERT INTO batch_stage_history (batch_id, stage, note, timestamp)
            VALUES (?, ?, ?, ?)
            """,
            (entry.batch_id, entry.stage.value, entry.note, entry.timestamp.isoformat()),
        )
        entry.id = cursor.lastrowid
        return entry

    async def list_batches(
        self,
        stage: BatchStage | None = None,
        active_only: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Batch]:
        clauses: list[str] = []
        params: list[Any] = []
        if stage is not None:
            clauses.append("stage = ?")
            params.append(stage.value)
        if active_only:
            clauses.append("active = 1")
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        cursor = await self._conn.execute(
            f"""
            SELECT * FROM batches {where}
            ORDER BY created_at DESC, rowid DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        )
        rows = await cursor.fetchall()
        return [self._row_to_batch(row, await self._history(row["id"])) for row in rows]

    async def list_by_po(self, po_id: str) -> list[Batch]:
        cursor = await self._conn.execute(
            "SELECT * FROM batches WHERE po_id = ? ORDER BY created_at, rowid",
            (po_id,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_batch(row, await self._history(row["id"])) for row in rows]

    async def stage_summary(self) -> dict[str, dict[str, Any]]:
        # Costs are decimal strings, so value is summed here rather than in SQL
        cursor = await self._conn.execute(
            "SELECT stage, quantity, total_cost FROM batches WHERE active = 1"
        )
        summary: dict[str, dict[str, Any]] = {}
        for row in await cursor.fetchall():
            bucket = summary.setdefault(
                row["stage"], {"count": 0, "units": 0, "value": Decimal("0.00")}
            )
            bucket["count"] += 1
            bucket["units"] += row["quantity"]
            bucket["value"] += Decimal(row["total_cost"])
        return summary

    async def last_number(self, prefix: str) -> str | None:
        cursor = await self._conn.execute(
            """
            SELECT batch_number FROM batches
            WHERE batch_number LIKE ? || '%'
            ORDER BY length(batch_number) DESC, batch_number DESC
            LIMIT 1
            """,
            (prefix,),
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def _history(self, batch_id: str) -> list[StageHistoryEntry]:
        cursor = await self._conn.execute(
            "SELECT * FROM batch_stage_history WHERE batch_id = ? ORDER BY id",
            (batch_id,),
        )
        return [
            StageHistoryEntry(
                id=row["id"],
                batch_id=row["batch_id"],
                stage=BatchStage(row["stage"]),
                note=row["note"],
                timestamp=datetime.fromisoformat(row["timestamp"]),
            )
            for row in await cursor.fetchall()
        ]

    def _row_to_batch(self, row: aiosqlite.Row, history: list[StageHistoryEntry]) -> Batch:
        """Convert database row to Batch entity."""
        return Batch(
            id=row["id"],
            batch_number=row["batch_number"],
            sku=row["sku"],
            product_name=row["product_name"],
            quantity=row["quantity"],
            unit_cost=Decimal(row["unit_cost"]),
            total_cost=Decimal(row["total_cost"]),
            stage=BatchStage(row["stage"]),
            stage_history=history,
            po_id=row["po_id"],
            supplier_id=row["supplier_id"],
            ordered_date=date.fromisoformat(row["ordered_date"]),
            expected_arrival=_date_or_none(row["expected_arrival"]),
            actual_arrival=_date_or_none(row["actual_arrival"]),
            notes=row["notes"],
            lineage_of=json.loads(row["lineage_of"]),
            active=bool(row["active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
