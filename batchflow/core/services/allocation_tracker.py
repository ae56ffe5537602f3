"""
Allocation tracker.

Reserves batch stock for pending outbound transfers. Reservations never
change a batch's nominal quantity; only committing one writes to the
ledger.
"""

from batchflow.config import get_logger
from batchflow.core.entities import Allocation, Batch, MovementType, StockLedgerEntry
from batchflow.core.exceptions import (
    AllocationNotFoundError,
    InactiveBatchError,
    InsufficientAvailableError,
    InvalidMovementError,
)
from batchflow.core.interfaces import IUnitOfWork, UnitOfWorkFactory
from batchflow.core.services.locking import KeyedLockRegistry, batch_key
from batchflow.core.services.stock_ledger import (
    apply_movement,
    draw_from_locations,
    require_batch,
)

logger = get_logger(__name__)


async def available_quantity(uow: IUnitOfWork, batch: Batch) -> int:
    """quantity - open allocations, computed inside the caller's transaction."""
    reserved = await uow.allocations.total_open(batch.id)
    return max(batch.quantity - reserved, 0)


class AllocationTracker:
    """Draft reservations against pending transfers."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        locks: KeyedLockRegistry,
        default_location_id: str = "factory",
    ):
        self._uow_factory = uow_factory
        self._locks = locks
        self._default_location_id = default_location_id

    async def allocate(
        self,
        batch_id: str,
        transfer_draft_id: str,
        quantity: int,
        location_id: str | None = None,
    ) -> Allocation:
        """
        Reserve quantity from a batch for a transfer draft.

        Raises:
            InvalidMovementError: quantity is not positive.
            InactiveBatchError: Batch was consumed by a split or merge.
            InsufficientAvailableError: quantity exceeds what is unreserved.
        """
        if quantity <= 0:
            raise InvalidMovementError(
                batch_id, "allocation", quantity, "allocated quantity must be positive"
            )

        logger.info(
            "allocate_started",
            batch_id=batch_id,
            transfer_draft_id=transfer_draft_id,
            quantity=quantity,
        )

        async with self._locks.hold(batch_key(batch_id)):
            async with self._uow_factory() as uow:
                batch = await require_batch(uow, batch_id)
                if not batch.active:
                    raise InactiveBatchError(batch_id, "allocate")

                available = await available_quantity(uow, batch)
                if quantity > available:
                    raise InsufficientAvailableError(batch_id, quantity, available)

                allocation = await uow.allocations.add(
                    Allocation(
                        batch_id=batch_id,
                        transfer_draft_id=transfer_draft_id,
                        allocated_quantity=quantity,
                        location_id=location_id,
                    )
                )

        logger.info(
            "allocate_complete",
            allocation_id=allocation.id,
            batch_id=batch_id,
            available=available - quantity,
        )
        return allocation

    async def release(self, allocation_id: str) -> None:
        """Drop a reservation without touching the ledger."""
        batch_id = await self._batch_of(allocation_id)
        logger.info("release_started", allocation_id=allocation_id, batch_id=batch_id)

        async with self._locks.hold(batch_key(batch_id)):
            async with self._uow_factory() as uow:
                if not await uow.allocations.delete(allocation_id):
                    raise AllocationNotFoundError(allocation_id)

        logger.info("release_complete", allocation_id=allocation_id)

    async def commit(
        self, allocation_id: str, location_id: str | None = None
    ) -> list[StockLedgerEntry]:
        """
        Turn a reservation into transfer_out ledger entries.

        The allocation is removed and the batch quantity decremented in the
        same transaction. An explicit location, or else the allocation's
        own, must hold the whole reservation. Without either, units are
        drawn across the batch's locations in ascending id order with one
        entry per location.

        Raises:
            AllocationNotFoundError: No such open allocation.
            InvalidMovementError: The named location holds less than the
                allocated quantity.
        """
        batch_id = await self._batch_of(allocation_id)
        logger.info("commit_started", allocation_id=allocation_id, batch_id=batch_id)

        async with self._locks.hold(batch_key(batch_id)):
            async with self._uow_factory() as uow:
                allocation = await uow.allocations.get(allocation_id)
                if allocation is None:
                    raise AllocationNotFoundError(allocation_id)
                batch = await require_batch(uow, allocation.batch_id)

                quantity = allocation.allocated_quantity
                source = location_id or allocation.location_id
                if source is not None:
                    draws = [(source, quantity)]
                else:
                    balances = await uow.ledger.balance_by_location(batch.id)
                    draws = draw_from_locations(balances, quantity, self._default_location_id)

                # Drop the reservation first so it does not count against itself
                await uow.allocations.delete(allocation_id)
                entries = [
                    await apply_movement(
                        uow,
                        batch,
                        draw_location,
                        MovementType.TRANSFER_OUT,
                        -units,
                        reason=f"Transfer {allocation.transfer_draft_id}",
                        reference=allocation.transfer_draft_id,
                    )
                    for draw_location, units in draws
                ]

        logger.info(
            "commit_complete",
            allocation_id=allocation_id,
            entry_ids=[e.id for e in entries],
            batch_quantity=batch.quantity,
        )
        return entries

    async def available(self, batch_id: str) -> int:
        async with self._uow_factory(write=False) as uow:
            batch = await require_batch(uow, batch_id)
            return await available_quantity(uow, batch)

    async def allocations_for_batch(self, batch_id: str) -> list[Allocation]:
        async with self._uow_factory(write=False) as uow:
            await require_batch(uow, batch_id)
            return await uow.allocations.list_for_batch(batch_id)

    async def allocations_for_transfer(self, transfer_draft_id: str) -> list[Allocation]:
        async with self._uow_factory(write=False) as uow:
            return await uow.allocations.list_for_transfer(transfer_draft_id)

    async def _batch_of(self, allocation_id: str) -> str:
        async with self._uow_factory(write=False) as uow:
            allocation = await uow.allocations.get(allocation_id)
        if allocation is None:
            raise AllocationNotFoundError(allocation_id)
        return allocation.batch_id

