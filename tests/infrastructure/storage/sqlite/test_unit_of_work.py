"""Unit tests for the SQLite unit of work."""

from decimal import Decimal
from uuid import uuid4

import pytest

from batchflow.core.entities import Batch, MovementType, StockLedgerEntry
from batchflow.core.exceptions import DatabaseError


def _batch(**kwargs) -> Batch:
    kwargs.setdefault("unit_cost", "2.50")
    return Batch(
        batch_number=f"B-TEST-{uuid4().hex[:8]}", sku="SKU-001", product_name="Mug", **kwargs
    )


async def test_commit_on_clean_exit(uow_factory):
    batch = _batch()
    async with uow_factory() as uow:
        await uow.batches.create(batch)

    async with uow_factory(write=False) as uow:
        assert await uow.batches.get(batch.id) is not None


async def test_rollback_on_error(uow_factory):
    batch = _batch()

    with pytest.raises(RuntimeError):
        async with uow_factory() as uow:
            await uow.batches.create(batch)
            raise RuntimeError("boom")

    async with uow_factory(write=False) as uow:
        assert await uow.batches.get(batch.id) is None


async def test_partial_multi_store_write_rolls_back(uow_factory):
    batch = _batch(quantity=5)

    with pytest.raises(DatabaseError):
        async with uow_factory() as uow:
            await uow.batches.create(batch)
            # Ledger row for an unknown batch violates the foreign key
            await uow.ledger.append(
                StockLedgerEntry(
                    batch_id="missing",
                    location_id="factory",
                    movement_type=MovementType.RECEIPT,
                    quantity=5,
                    reason="bad",
                )
            )

    async with uow_factory(write=False) as uow:
        assert await uow.batches.get(batch.id) is None


async def test_trigger_violation_becomes_database_error(uow_factory, make_batch):
    await make_batch()

    with pytest.raises(DatabaseError) as exc_info:
        async with uow_factory() as uow:
            await uow._conn.execute("DELETE FROM stock_ledger_entries")

    assert exc_info.value.details["operation"] == "transaction"


async def test_connections_return_to_pool(uow_factory, pool):
    for _ in range(pool.pool_size + 2):
        async with uow_factory(write=False) as uow:
            await uow.ledger.balance("nothing")
    assert pool._pool.qsize() == pool.pool_size


async def test_money_round_trips_exactly(uow_factory):
    batch = _batch(quantity=3, unit_cost="0.3333")
    batch.recompute_total()
    async with uow_factory() as uow:
        await uow.batches.create(batch)

    async with uow_factory(write=False) as uow:
        stored = await uow.batches.get(batch.id)

    assert stored.unit_cost == Decimal("0.3333")
    assert stored.total_cost == Decimal("1.00")
    assert str(stored.total_cost) == "1.00"
