"""SQLite implementation of reconciliation storage."""

from datetime import datetime

import aiosqlite

from batchflow.core.entities import Reconciliation, ReconciliationStatus
from batchflow.core.interfaces import IReconciliationStore


class SQLiteReconciliationStore(IReconciliationStore):
    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def add(self, reconciliation: Reconciliation) -> Reconciliation:
        r = reconciliation
        await self._conn.execute(
            """
            INSERT INTO reconciliations (
                id, batch_id, sku, expected_quantity, reported_quantity,
                discrepancy, status, notes, reconciled_at, resolved,
                resolved_at, adjustment_entry_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                r.id,
                r.batch_id,
                r.sku,
                r.expected_quantity,
                r.reported_quantity,
                r.discrepancy,
                r.status.value,
                r.notes,
                r.reconciled_at.isoformat(),
                int(r.resolved),
                r.resolved_at.isoformat() if r.resolved_at else None,
                r.adjustment_entry_id,
            ),
        )
        return reconciliation

    async def get(self, reconciliation_id: str) -> Reconciliation | None:
        cursor = await self._conn.execute(
            "SELECT * FROM reconciliations WHERE id = ?", (reconciliation_id,)
        )
        row = await cursor.fetchone()
        return self._row_to_reconciliation(row) if row else None

    async def mark_resolved(self, reconciliation: Reconciliation) -> Reconciliation:
        await self._conn.execute(
            """
            UPDATE reconciliations SET
                resolved = ?,
                resolved_at = ?,
                adjustment_entry_id = ?
            WHERE id = ?
            """,
            (
                int(reconciliation.resolved),
                reconciliation.resolved_at.isoformat() if reconciliation.resolved_at else None,
                reconciliation.adjustment_entry_id,
                reconciliation.id,
            ),
        )
        return reconciliation

    async def list_for_batch(self, batch_id: str) -> list[Reconciliation]:
        cursor = await self._conn.execute(
            "SELECT * FROM reconciliations WHERE batch_id = ? ORDER BY reconciled_at, rowid",
            (batch_id,),
        )
        return [self._row_to_reconciliation(row) for row in await cursor.fetchall()]

    async def open_discrepancies(self, batch_id: str) -> list[Reconciliation]:
        cursor = await self._conn.execute(
            """
            SELECT * FROM reconciliations
            WHERE batch_id = ? AND status = 'discrepancy' AND resolved = 0
            ORDER BY reconciled_at, rowid
            """,
            (batch_id,),
        )
        return [self._row_to_reconciliation(row) for row in await cursor.fetchall()]

    def _row_to_reconciliation(self, row: aiosqlite.Row) -> Reconciliation:
        return Reconciliation(
            id=row["id"],
            batch_id=row["batch_id"],
            sku=row["sku"],
            expected_quantity=row["expected_quantity"],
            reported_quantity=row["reported_quantity"],
            discrepancy=row["discrepancy"],
            status=ReconciliationStatus(row["status"]),
            notes=row["notes"],
            reconciled_at=datetime.fromisoformat(row["reconciled_at"]),
            resolved=bool(row["resolved"]),
            resolved_at=datetime.fromisoformat(row["resolved_at"]) if row["resolved_at"] else None,
            adjustment_entry_id=row["adjustment_entry_id"],
        )
