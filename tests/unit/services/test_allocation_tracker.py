"""Tests for draft allocations."""

import asyncio

import pytest

from batchflow.core.entities import MovementType
from batchflow.core.exceptions import (
    AllocationNotFoundError,
    InactiveBatchError,
    InsufficientAvailableError,
    InvalidMovementError,
)


class TestAllocate:
    async def test_allocate_reduces_available_not_quantity(self, make_batch, tracker, registry):
        batch = await make_batch(quantity=300)

        allocation = await tracker.allocate(batch.id, "TD-1", 100)

        assert allocation.allocated_quantity == 100
        assert await tracker.available(batch.id) == 200
        assert (await registry.get(batch.id)).quantity == 300

    async def test_over_allocation_rejected(self, make_batch, tracker):
        batch = await make_batch(quantity=300)
        await tracker.allocate(batch.id, "TD-1", 100)

        with pytest.raises(InsufficientAvailableError) as exc_info:
            await tracker.allocate(batch.id, "TD-2", 250)

        assert exc_info.value.details["available"] == 200
        assert await tracker.available(batch.id) == 200

    @pytest.mark.parametrize("quantity", [0, -5])
    async def test_non_positive_quantity(self, make_batch, tracker, quantity):
        batch = await make_batch(quantity=300)
        with pytest.raises(InvalidMovementError):
            await tracker.allocate(batch.id, "TD-1", quantity)

    async def test_inactive_batch(self, make_batch, tracker, split_merge):
        a = await make_batch(quantity=10)
        b = await make_batch(quantity=10)
        await split_merge.merge([a.id, b.id])

        with pytest.raises(InactiveBatchError):
            await tracker.allocate(a.id, "TD-1", 1)

    async def test_concurrent_allocations_never_oversubscribe(self, make_batch, tracker):
        batch = await make_batch(quantity=300)

        results = await asyncio.gather(
            tracker.allocate(batch.id, "TD-1", 200),
            tracker.allocate(batch.id, "TD-2", 200),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, InsufficientAvailableError)]
        assert len(failures) == 1
        assert await tracker.available(batch.id) == 100


class TestRelease:
    async def test_release_restores_available(self, make_batch, tracker, ledger):
        batch = await make_batch(quantity=300)
        allocation = await tracker.allocate(batch.id, "TD-1", 100)

        await tracker.release(allocation.id)

        assert await tracker.available(batch.id) == 300
        assert len(await ledger.entries(batch.id)) == 1

    async def test_release_twice(self, make_batch, tracker):
        batch = await make_batch(quantity=300)
        allocation = await tracker.allocate(batch.id, "TD-1", 100)
        await tracker.release(allocation.id)

        with pytest.raises(AllocationNotFoundError):
            await tracker.release(allocation.id)


class TestCommit:
    async def test_commit_writes_transfer_out(self, make_batch, tracker, ledger, registry):
        batch = await make_batch(quantity=300, unit_cost="2.00")
        allocation = await tracker.allocate(batch.id, "TD-9", 100)

        [entry] = await tracker.commit(allocation.id)

        assert entry.movement_type == MovementType.TRANSFER_OUT
        assert entry.quantity == -100
        assert entry.reference == "TD-9"
        assert entry.location_id == "factory"

        updated = await registry.get(batch.id)
        assert updated.quantity == 200
        assert str(updated.total_cost) == "400.00"
        assert await tracker.available(batch.id) == 200
        assert await tracker.allocations_for_batch(batch.id) == []

    async def test_commit_twice(self, make_batch, tracker):
        batch = await make_batch(quantity=300)
        allocation = await tracker.allocate(batch.id, "TD-1", 100)
        await tracker.commit(allocation.id)

        with pytest.raises(AllocationNotFoundError):
            await tracker.commit(allocation.id)

    async def test_commit_uses_allocation_location(self, make_batch, tracker, ledger):
        batch = await make_batch(quantity=100)
        await ledger.record(batch.id, "hub-dxb", "transfer_in", 50, "Consolidation")
        allocation = await tracker.allocate(batch.id, "TD-1", 30, location_id="hub-dxb")

        [entry] = await tracker.commit(allocation.id)

        assert entry.location_id == "hub-dxb"
        assert await ledger.balance_by_location(batch.id) == {"factory": 100, "hub-dxb": 20}

    async def test_commit_draws_across_locations(self, make_batch, tracker, ledger, registry):
        batch = await make_batch(quantity=100)
        await ledger.record(batch.id, "warehouse", "adjustment", 50, "Found on recount")
        allocation = await tracker.allocate(batch.id, "TD-1", 120)

        entries = await tracker.commit(allocation.id)

        assert [(e.location_id, e.quantity) for e in entries] == [
            ("factory", -100),
            ("warehouse", -20),
        ]
        assert all(e.reference == "TD-1" for e in entries)
        assert await ledger.balance_by_location(batch.id) == {"warehouse": 30}
        assert (await registry.get(batch.id)).quantity == 30

    async def test_commit_rejects_short_location(self, make_batch, tracker, ledger, registry):
        batch = await make_batch(quantity=100)
        await ledger.record(batch.id, "hub-dxb", "transfer_in", 10, "Consolidation")
        allocation = await tracker.allocate(batch.id, "TD-1", 30)

        with pytest.raises(InvalidMovementError):
            await tracker.commit(allocation.id, location_id="hub-dxb")

        assert (await registry.get(batch.id)).quantity == 110
        assert await ledger.balance_by_location(batch.id) == {"factory": 100, "hub-dxb": 10}
        assert [a.id for a in await tracker.allocations_for_batch(batch.id)] == [allocation.id]

    async def test_other_reservations_survive_commit(self, make_batch, tracker):
        batch = await make_batch(quantity=300)
        first = await tracker.allocate(batch.id, "TD-1", 100)
        await tracker.allocate(batch.id, "TD-2", 150)

        await tracker.commit(first.id)

        assert await tracker.available(batch.id) == 50


class TestQueries:
    async def test_allocations_for_transfer(self, make_batch, tracker):
        a = await make_batch(quantity=100)
        b = await make_batch(quantity=100, sku="SKU-002")
        await tracker.allocate(a.id, "TD-1", 10)
        await tracker.allocate(b.id, "TD-1", 20)
        await tracker.allocate(b.id, "TD-2", 5)

        allocations = await tracker.allocations_for_transfer("TD-1")

        assert sorted(x.allocated_quantity for x in allocations) == [10, 20]
