"""The ledger and both history tables refuse UPDATE and DELETE."""

import sqlite3

import aiosqlite
import pytest

from batchflow.core.entities import POStatus


async def test_ledger_rows_cannot_change(raw_conn: aiosqlite.Connection, make_batch):
    await make_batch(quantity=100)

    with pytest.raises(sqlite3.DatabaseError, match="append-only"):
        await raw_conn.execute("UPDATE stock_ledger_entries SET quantity = 1")
    with pytest.raises(sqlite3.DatabaseError, match="append-only"):
        await raw_conn.execute("DELETE FROM stock_ledger_entries")

    cursor = await raw_conn.execute("SELECT SUM(quantity) FROM stock_ledger_entries")
    assert (await cursor.fetchone())[0] == 100


async def test_stage_history_is_append_only(raw_conn: aiosqlite.Connection, make_batch):
    await make_batch()

    with pytest.raises(sqlite3.DatabaseError):
        await raw_conn.execute("UPDATE batch_stage_history SET note = 'edited'")
    with pytest.raises(sqlite3.DatabaseError):
        await raw_conn.execute("DELETE FROM batch_stage_history")


async def test_po_history_is_append_only(raw_conn: aiosqlite.Connection, make_po):
    await make_po(POStatus.SENT)

    with pytest.raises(sqlite3.DatabaseError):
        await raw_conn.execute("UPDATE po_status_history SET status = 'received'")
    with pytest.raises(sqlite3.DatabaseError):
        await raw_conn.execute("DELETE FROM po_status_history")


async def test_batches_are_never_deleted(raw_conn: aiosqlite.Connection, make_batch):
    batch = await make_batch()

    with pytest.raises(sqlite3.DatabaseError, match="never deleted"):
        await raw_conn.execute("DELETE FROM batches WHERE id = ?", (batch.id,))
