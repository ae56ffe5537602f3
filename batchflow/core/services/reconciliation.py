"""
Reconciliation engine.

Compares the quantity a marketplace reports as received against what
was shipped. Recording a reconciliation never changes the batch or the
ledger; a discrepancy is only booked when it is explicitly resolved.
"""

from batchflow.config import get_logger
from batchflow.core.entities import (
    BatchStage,
    MovementType,
    Reconciliation,
    ReconciliationStatus,
)
from batchflow.core.entities.common import utc_now
from batchflow.core.exceptions import (
    InactiveBatchError,
    ReconciliationAlreadyResolvedError,
    ReconciliationNotAllowedError,
    ReconciliationNotFoundError,
    ValidationError,
)
from batchflow.core.interfaces import UnitOfWorkFactory
from batchflow.core.services.locking import KeyedLockRegistry, batch_key
from batchflow.core.services.stock_ledger import apply_movement, require_batch

logger = get_logger(__name__)


def compute_reconciliation(expected: int, reported: int) -> tuple[ReconciliationStatus, int]:
    """Return (status, reported - expected)."""
    discrepancy = reported - expected
    if discrepancy == 0:
        return ReconciliationStatus.MATCHED, 0
    return ReconciliationStatus.DISCREPANCY, discrepancy


class ReconciliationEngine:
    """Records and resolves marketplace receipt reconciliations."""

    def __init__(self, uow_factory: UnitOfWorkFactory, locks: KeyedLockRegistry):
        self._uow_factory = uow_factory
        self._locks = locks

    async def reconcile(
        self,
        batch_id: str,
        expected_quantity: int | None,
        reported_quantity: int,
        notes: str | None = None,
    ) -> Reconciliation:
        """
        Persist a reconciliation for a batch at the marketplace stage.

        expected_quantity defaults to the batch's current quantity.

        Raises:
            BatchNotFoundError: Unknown batch.
            ReconciliationNotAllowedError: Batch is not at the marketplace.
            ValidationError: Negative quantities.
        """
        if reported_quantity < 0:
            raise ValidationError("reported_quantity", "must be >= 0", reported_quantity)
        if expected_quantity is not None and expected_quantity < 0:
            raise ValidationError("expected_quantity", "must be >= 0", expected_quantity)

        logger.info(
            "reconcile_started",
            batch_id=batch_id,
            expected=expected_quantity,
            reported=reported_quantity,
        )

        async with self._locks.hold(batch_key(batch_id)):
            async with self._uow_factory() as uow:
                batch = await require_batch(uow, batch_id)
                if not batch.active:
                    raise InactiveBatchError(batch_id, "reconcile")
                if batch.stage != BatchStage.MARKETPLACE:
                    raise ReconciliationNotAllowedError(batch_id, batch.stage.value)

                expected = batch.quantity if expected_quantity is None else expected_quantity
                status, discrepancy = compute_reconciliation(expected, reported_quantity)
                record = await uow.reconciliations.add(
                    Reconciliation(
                        batch_id=batch.id,
                        sku=batch.sku,
                        expected_quantity=expected,
                        reported_quantity=reported_quantity,
                        discrepancy=discrepancy,
                        status=status,
                        notes=notes,
                    )
                )

        logger.info(
            "reconcile_complete",
            reconciliation_id=record.id,
            batch_id=batch_id,
            status=record.status.value,
            discrepancy=record.discrepancy,
        )
        return record

    async def resolve(
        self,
        reconciliation_id: str,
        location_id: str,
        reason: str | None = None,
    ) -> Reconciliation:
        """
        Close a reconciliation.

        A discrepancy is booked as an adjustment of `discrepancy` units at
        location_id; matched records close without a ledger entry.
        """
        async with self._uow_factory(write=False) as uow:
            peek = await uow.reconciliations.get(reconciliation_id)
        if peek is None:
            raise ReconciliationNotFoundError(reconciliation_id)

        logger.info(
            "resolve_reconciliation_started",
            reconciliation_id=reconciliation_id,
            batch_id=peek.batch_id,
        )

        async with self._locks.hold(batch_key(peek.batch_id)):
            async with self._uow_factory() as uow:
                record = await uow.reconciliations.get(reconciliation_id)
                if record is None:
                    raise ReconciliationNotFoundError(reconciliation_id)
                if record.resolved:
                    raise ReconciliationAlreadyResolvedError(reconciliation_id)

                if record.status == ReconciliationStatus.DISCREPANCY:
                    batch = await require_batch(uow, record.batch_id)
                    entry = await apply_movement(
                        uow,
                        batch,
                        location_id,
                        MovementType.ADJUSTMENT,
                        record.discrepancy,
                        reason or f"Marketplace reconciliation {record.id}",
                        reference=record.id,
                    )
                    record.adjustment_entry_id = entry.id

                record.resolved = True
                record.resolved_at = utc_now()
                await uow.reconciliations.mark_resolved(record)

        logger.info(
            "resolve_reconciliation_complete",
            reconciliation_id=reconciliation_id,
            adjustment_entry_id=record.adjustment_entry_id,
        )
        return record

    async def open_discrepancies(self, batch_id: str) -> list[Reconciliation]:
        async with self._uow_factory(write=False) as uow:
            await require_batch(uow, batch_id)
            return await uow.reconciliations.open_discrepancies(batch_id)

    async def list_for_batch(self, batch_id: str) -> list[Reconciliation]:
        async with self._uow_factory(write=False) as uow:
            await require_batch(uow, batch_id)
            return await uow.reconciliations.list_for_batch(batch_id)
