"""
Stock ledger service.

Append-only log of signed quantity movements. Every write goes through
`apply_movement`, which validates the movement, appends the entry and
brings the batch's quantity and total cost in line, all on the caller's
unit of work so the whole operation commits or rolls back together.
"""

from batchflow.config import get_logger
from batchflow.core.entities import Batch, MovementType, StockLedgerEntry
from batchflow.core.entities.common import utc_now
from batchflow.core.exceptions import (
    BatchNotFoundError,
    InactiveBatchError,
    InvalidMovementError,
)
from batchflow.core.interfaces import IUnitOfWork, UnitOfWorkFactory
from batchflow.core.services.locking import KeyedLockRegistry, batch_key

logger = get_logger(__name__)


async def require_batch(uow: IUnitOfWork, batch_id: str) -> Batch:
    """Load a batch inside the unit of work or raise BatchNotFoundError."""
    batch = await uow.batches.get(batch_id)
    if batch is None:
        raise BatchNotFoundError(batch_id)
    return batch


def coerce_movement_type(batch_id: str, movement_type: MovementType | str, quantity: int) -> MovementType:
    try:
        return MovementType(movement_type)
    except ValueError:
        raise InvalidMovementError(
            batch_id,
            str(movement_type),
            quantity,
            f"unknown movement type; expected one of {', '.join(m.value for m in MovementType)}",
        ) from None


def validate_movement(
    batch: Batch, movement_type: MovementType, quantity: int, reserved: int = 0
) -> None:
    """Check a movement against the sign rules, the balance and open reservations."""
    if not batch.active:
        raise InactiveBatchError(batch.id, f"record {movement_type.value}")
    if quantity == 0:
        raise InvalidMovementError(batch.id, movement_type.value, quantity, "quantity must be non-zero")

    sign = movement_type.required_sign
    if sign > 0 and quantity < 0:
        raise InvalidMovementError(batch.id, movement_type.value, quantity, "quantity must be positive")
    if sign < 0 and quantity > 0:
        raise InvalidMovementError(batch.id, movement_type.value, quantity, "quantity must be negative")

    if batch.quantity + quantity < 0:
        raise InvalidMovementError(
            batch.id,
            movement_type.value,
            quantity,
            f"balance would go negative (current {batch.quantity})",
        )
    if quantity < 0 and batch.quantity + quantity < reserved:
        raise InvalidMovementError(
            batch.id,
            movement_type.value,
            quantity,
            f"would leave less than the {reserved} units reserved by open allocations",
        )


def draw_from_locations(
    balances: dict[str, int], quantity: int, fallback_location: str
) -> list[tuple[str, int]]:
    """
    Pick (location, units) pairs covering quantity.

    Locations are drained in ascending id order. Anything the ledger
    cannot place is drawn from the fallback location.
    """
    draws: list[tuple[str, int]] = []
    remaining = quantity
    for location_id in sorted(balances):
        if remaining == 0:
            break
        held = balances[location_id]
        if held <= 0:
            continue
        take = min(held, remaining)
        draws.append((location_id, take))
        remaining -= take
    if remaining > 0:
        draws.append((fallback_location, remaining))
    return draws


async def apply_movement(
    uow: IUnitOfWork,
    batch: Batch,
    location_id: str,
    movement_type: MovementType,
    quantity: int,
    reason: str,
    reference: str | None = None,
    *,
    recompute_total: bool = True,
) -> StockLedgerEntry:
    """
    Append a ledger entry and update the batch on the same unit of work.

    A negative movement may not take a location below zero, so the stock
    it draws must already be booked at location_id.

    With recompute_total=False the caller owns batch.total_cost (split sets
    it from the cost it conserves).
    """
    reserved = await uow.allocations.total_open(batch.id) if quantity < 0 else 0
    validate_movement(batch, movement_type, quantity, reserved)
    if quantity < 0:
        held = (await uow.ledger.balance_by_location(batch.id)).get(location_id, 0)
        if held + quantity < 0:
            raise InvalidMovementError(
                batch.id,
                movement_type.value,
                quantity,
                f"location {location_id} holds only {held}",
            )

    entry = StockLedgerEntry(
        batch_id=batch.id,
        location_id=location_id,
        movement_type=movement_type,
        quantity=quantity,
        reason=reason,
        reference=reference,
    )
    await uow.ledger.append(entry)

    batch.quantity += quantity
    if recompute_total:
        batch.recompute_total()
    batch.updated_at = utc_now()
    await uow.batches.update(batch)
    return entry


class StockLedger:
    """Records movements and derives balances for batches."""

    def __init__(self, uow_factory: UnitOfWorkFactory, locks: KeyedLockRegistry):
        self._uow_factory = uow_factory
        self._locks = locks

    async def record(
        self,
        batch_id: str,
        location_id: str,
        movement_type: MovementType | str,
        quantity: int,
        reason: str,
        reference: str | None = None,
    ) -> StockLedgerEntry:
        """
        Append a movement and update the batch atomically.

        Raises:
            BatchNotFoundError: Unknown batch.
            InactiveBatchError: Batch was consumed by a split or merge.
            InvalidMovementError: Zero quantity, wrong sign for the type,
                a negative resulting balance, or more units drawn from
                location_id than it holds.
        """
        movement = coerce_movement_type(batch_id, movement_type, quantity)
        logger.info(
            "ledger_record_started",
            batch_id=batch_id,
            movement_type=movement.value,
            quantity=quantity,
        )

        async with self._locks.hold(batch_key(batch_id)):
            async with self._uow_factory() as uow:
                batch = await require_batch(uow, batch_id)
                entry = await apply_movement(
                    uow, batch, location_id, movement, quantity, reason, reference
                )

        logger.info(
            "ledger_record_complete",
            batch_id=batch_id,
            entry_id=entry.id,
            balance=batch.quantity,
        )
        return entry

    async def balance(self, batch_id: str) -> int:
        """Sum of signed entries for the batch."""
        async with self._uow_factory(write=False) as uow:
            await require_batch(uow, batch_id)
            return await uow.ledger.balance(batch_id)

    async def balance_by_location(self, batch_id: str) -> dict[str, int]:
        async with self._uow_factory(write=False) as uow:
            await require_batch(uow, batch_id)
            return await uow.ledger.balance_by_location(batch_id)

    async def entries(self, batch_id: str) -> list[StockLedgerEntry]:
        """Ledger entries for the batch, oldest first."""
        async with self._uow_factory(write=False) as uow:
            await require_batch(uow, batch_id)
            return await uow.ledger.entries(batch_id)
