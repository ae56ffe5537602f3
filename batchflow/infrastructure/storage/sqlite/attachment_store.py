"""SQLite implementation of attachment metadata storage."""

from datetime import datetime

import aiosqlite

from batchflow.core.entities import Attachment, AttachmentOwner
from batchflow.core.interfaces import IAttachmentStore


class SQLiteAttachmentStore(IAttachmentStore):
    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def add(self, attachment: Attachment) -> Attachment:
        await self._conn.execute(
            """
            INSERT INTO attachments (id, owner_type, owner_id, name, kind, created_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                attachment.id,
                attachment.owner_type.value,
                attachment.owner_id,
                attachment.name,
                attachment.kind,
                attachment.created_at.isoformat(),
            ),
        )
        return attachment

    async def get(self, attachment_id: str) -> Attachment | None:
        cursor = await self._conn.execute(
            "SELECT * FROM attachments WHERE id = ?", (attachment_id,)
        )
        row = await cursor.fetchone()
        return self._row_to_attachment(row) if row else None

    async def delete(self, attachment_id: str) -> bool:
        cursor = await self._conn.execute(
            "DELETE FROM attachments WHERE id = ?", (attachment_id,)
        )
        return cursor.rowcount > 0

    async def list_for_owner(
        self, owner_type: AttachmentOwner, owner_id: str
    ) -> list[Attachment]:
        cursor = await self._conn.execute(
            """
            SELECT * FROM attachments
            WHERE owner_type = ? AND owner_id = ?
            ORDER BY created_at, rowid
            """,
            (owner_type.value, owner_id),
        )
        return [self._row_to_attachment(row) for row in await cursor.fetchall()]

    def _row_to_attachment(self, row: aiosqlite.Row) -> Attachment:
        return Attachment(
            id=row["id"],
            owner_type=AttachmentOwner(row["owner_type"]),
            owner_id=row["owner_id"],
            name=row["name"],
            kind=row["kind"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )
