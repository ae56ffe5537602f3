"""SQLite implementation of draft allocation storage."""

from datetime import datetime

import aiosqlite

from batchflow.core.entities import Allocation
from batchflow.core.interfaces import IAllocationStore


class SQLiteAllocationStore(IAllocationStore):
    """Open allocations. Committed or released rows are deleted."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def add(self, allocation: Allocation) -> Allocation:
        await self._conn.execute(
            """
            INSERT INTO allocations (
                id, batch_id, transfer_draft_id, allocated_quantity,
                location_id, created_at
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                allocation.id,
                allocation.batch_id,
                allocation.transfer_draft_id,
                allocation.allocated_quantity,
                allocation.location_id,
                allocation.created_at.isoformat(),
            ),
        )
        return allocation

    async def get(self, allocation_id: str) -> Allocation | None:
        cursor = await self._conn.execute(
            "SELECT * FROM allocations WHERE id = ?", (allocation_id,)
        )
        row = await cursor.fetchone()
        return self._row_to_allocation(row) if row else None

    async def delete(self, allocation_id: str) -> bool:
        cursor = await self._conn.execute(
            "DELETE FROM allocations WHERE id = ?", (allocation_id,)
        )
        return cursor.rowcount > 0

    async def total_open(self, batch_id: str) -> int:
        cursor = await self._conn.execute(
            "SELECT COALESCE(SUM(allocated_quantity), 0) FROM allocations WHERE batch_id = ?",
            (batch_id,),
        )
        row = await cursor.fetchone()
        return int(row[0])

    async def list_for_batch(self, batch_id: str) -> list[Allocation]:
        cursor = await self._conn.execute(
            "SELECT * FROM allocations WHERE batch_id = ? ORDER BY created_at, rowid",
            (batch_id,),
        )
        return [self._row_to_allocation(row) for row in await cursor.fetchall()]

    async def list_for_transfer(self, transfer_draft_id: str) -> list[Allocation]:
        cursor = await self._conn.execute(
            "SELECT * FROM allocations WHERE transfer_draft_id = ? ORDER BY created_at, rowid",
            (transfer_draft_id,),
        )
        return [self._row_to_allocation(row) for row in await cursor.fetchall()]

    def _row_to_allocation(self, row: aiosqlite.Row) -> Allocation:
        return Allocation(
            id=row["id"],
            batch_id=row["batch_id"],
            transfer_draft_id=row["transfer_draft_id"],
            allocated_quantity=row["allocated_quantity"],
            location_id=row["location_id"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
