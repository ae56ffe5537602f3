"""SQLite implementation of purchase order storage."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

import aiosqlite

from batchflow.config import get_logger
from batchflow.core.entities import (
    POLineItem,
    POStatus,
    PurchaseOrder,
    StatusHistoryEntry,
)
from batchflow.core.interfaces import IPurchaseOrderStore

logger = get_logger(__name__)


class SQLitePurchaseOrderStore(IPurchaseOrderStore):
    """Purchase orders with line items and insert-only status history."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def create(self, po: PurchaseOrder) -> PurchaseOrder:
        await self._conn.execute(
            """
            INSERT INTO purchase_orders (
                id, po_number, supplier_id, status, subtotal, total,
                order_date, expected_date, notes, sent_to_supplier_at,
                created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                po.id,
                po.po_number,
                po.supplier_id,
                po.status.value,
                str(po.subtotal),
                str(po.total),
                po.order_date.isoformat(),
                po.expected_date.isoformat() if po.expected_date else None,
                po.notes,
                po.sent_to_supplier_at.isoformat() if po.sent_to_supplier_at else None,
                po.created_at.isoformat(),
                po.updated_at.isoformat(),
            ),
        )

        for line_no, item in enumerate(po.line_items, start=1):
            cursor = await self._conn.execute(
                """
                INSERT INTO po_line_items (
                    po_id, line_no, sku, product_name, quantity, unit_cost, subtotal
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    po.id,
                    line_no,
                    item.sku,
                    item.product_name,
                    item.quantity,
                    str(item.unit_cost),
                    str(item.subtotal),
                ),
            )
            item.id = cursor.lastrowid
            item.po_id = po.id

        for entry in po.status_history:
            entry.po_id = po.id
            await self.add_status_entry(entry)

        logger.info("purchase_order_created", po_id=po.id, po_number=po.po_number)
        return po

    async def get(self, po_id: str) -> PurchaseOrder | None:
        cursor = await self._conn.execute(
            "SELECT * FROM purchase_orders WHERE id = ?", (po_id,)
        )
        row = await cursor.fetchone()
        if row is None:
            return None
        return await self._hydrate(row)

    async def update(self, po: PurchaseOrder) -> PurchaseOrder:
        await self._conn.execute(
            """
            UPDATE purchase_orders SET
                status = ?,
                notes = ?,
                expected_date = ?,
                sent_to_supplier_at = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                po.status.value,
                po.notes,
                po.expected_date.isoformat() if po.expected_date else None,
                po.sent_to_supplier_at.isoformat() if po.sent_to_supplier_at else None,
                po.updated_at.isoformat(),
                po.id,
            ),
        )
        return po

    async def add_status_entry(self, entry: StatusHistoryEntry) -> StatusHistoryEntry:
        cursor = await self._conn.execute(
            """
            INSERT INTO po_status_history (po_id, status, note, timestamp)
            VALUES (?, ?, ?, ?)
            """,
            (entry.po_id, entry.status.value, entry.note, entry.timestamp.isoformat()),
        )
        entry.id = cursor.lastrowid
        return entry

    async def list_orders(
        self,
        status: POStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PurchaseOrder]:
        params: list[Any] = []
        where = ""
        if status is not None:
            where = "WHERE status = ?"
            params.append(status.value)
        cursor = await self._conn.execute(
            f"""
            SELECT * FROM purchase_orders {where}
            ORDER BY created_at DESC, rowid DESC
            LIMIT ? OFFSET ?
            """,
            (*params, limit, offset),
        )
        return [await self._hydrate(row) for row in await cursor.fetchall()]

    async def last_number(self, prefix: str) -> str | None:
        cursor = await self._conn.execute(
            """
            SELECT po_number FROM purchase_orders
            WHERE po_number LIKE ? || '%'
            ORDER BY length(po_number) DESC, po_number DESC
            LIMIT 1
            """,
            (prefix,),
        )
        row = await cursor.fetchone()
        return row[0] if row else None

    async def _hydrate(self, row: aiosqlite.Row) -> PurchaseOrder:
        po_id = row["id"]

        cursor = await self._conn.execute(
            "SELECT * FROM po_line_items WHERE po_id = ? ORDER BY line_no", (po_id,)
        )
        items = [
            POLineItem(
                id=item["id"],
                po_id=po_id,
                sku=item["sku"],
                product_name=item["product_name"],
                quantity=item["quantity"],
                unit_cost=Decimal(item["unit_cost"]),
            )
            for item in await cursor.fetchall()
        ]

        cursor = await self._conn.execute(
            "SELECT * FROM po_status_history WHERE po_id = ? ORDER BY id", (po_id,)
        )
        history = [
            StatusHistoryEntry(
                id=h["id"],
                po_id=po_id,
                status=POStatus(h["status"]),
                note=h["note"],
                timestamp=datetime.fromisoformat(h["timestamp"]),
            )
            for h in await cursor.fetchall()
        ]

        return PurchaseOrder(
            id=po_id,
            po_number=row["po_number"],
            supplier_id=row["supplier_id"],
            status=POStatus(row["status"]),
            status_history=history,
            line_items=items,
            order_date=date.fromisoformat(row["order_date"]),
            expected_date=date.fromisoformat(row["expected_date"]) if row["expected_date"] else None,
            notes=row["notes"],
            sent_to_supplier_at=(
                datetime.fromisoformat(row["sent_to_supplier_at"])
                if row["sent_to_supplier_at"]
                else None
            ),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
