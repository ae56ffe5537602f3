"""
Batch registry.

Receives new batches (optionally against a purchase order), answers
batch queries and keeps attachment metadata for batches and POs.
"""

from datetime import date
from decimal import Decimal
from typing import Any

from batchflow.config import get_logger
from batchflow.core.entities import (
    Attachment,
    AttachmentOwner,
    Batch,
    BatchStage,
    MovementType,
)
from batchflow.core.exceptions import (
    AttachmentNotFoundError,
    BatchCreationNotAllowedError,
    ValidationError,
)
from batchflow.core.interfaces import IUnitOfWork, UnitOfWorkFactory
from batchflow.core.services.locking import KeyedLockRegistry, po_key
from batchflow.core.services.numbering import next_batch_number
from batchflow.core.services.purchase_order_workflow import (
    batch_creation_allowed,
    require_po,
)
from batchflow.core.services.stage_transition import parse_stage
from batchflow.core.services.stock_ledger import apply_movement, require_batch

logger = get_logger(__name__)


class BatchRegistry:
    """Batch creation, lookup and attachment metadata."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        locks: KeyedLockRegistry,
        batch_number_prefix: str = "B",
        default_location_id: str = "factory",
    ):
        self._uow_factory = uow_factory
        self._locks = locks
        self._prefix = batch_number_prefix
        self._default_location_id = default_location_id

    async def create_batch(
        self,
        sku: str,
        product_name: str,
        quantity: int,
        unit_cost: Decimal | str | float,
        stage: BatchStage | str = BatchStage.ORDERED,
        po_id: str | None = None,
        supplier_id: str | None = None,
        location_id: str | None = None,
        ordered_date: date | None = None,
        expected_arrival: date | None = None,
        notes: str | None = None,
    ) -> Batch:
        """
        Receive a new batch.

        The batch, its first stage history row and its opening receipt
        entry are written in one transaction. With a po_id, the PO must be
        at production_complete or later and its supplier is the default.

        Raises:
            PurchaseOrderNotFoundError: po_id does not exist.
            BatchCreationNotAllowedError: PO status does not permit batches yet.
            UnknownStageError: stage is not a pipeline stage.
            ValidationError: Negative quantity.
        """
        if quantity < 0:
            raise ValidationError("quantity", "must be >= 0", quantity)
        initial_stage = parse_stage(stage)

        logger.info(
            "create_batch_started",
            sku=sku,
            quantity=quantity,
            po_id=po_id,
            stage=initial_stage.value,
        )

        lock_keys = (po_key(po_id),) if po_id else ()
        async with self._locks.hold(*lock_keys):
            async with self._uow_factory() as uow:
                if po_id:
                    po = await require_po(uow, po_id)
                    if not batch_creation_allowed(po.status):
                        raise BatchCreationNotAllowedError(po_id, po.status.value)
                    supplier_id = supplier_id or po.supplier_id

                batch = Batch(
                    batch_number=await next_batch_number(uow, self._prefix),
                    sku=sku,
                    product_name=product_name,
                    unit_cost=unit_cost,
                    stage=initial_stage,
                    po_id=po_id,
                    supplier_id=supplier_id,
                    ordered_date=ordered_date or date.today(),
                    expected_arrival=expected_arrival,
                    notes=notes,
                )
                batch.append_stage(initial_stage, "Batch created")
                await uow.batches.create(batch)

                if quantity > 0:
                    await apply_movement(
                        uow,
                        batch,
                        location_id or self._default_location_id,
                        MovementType.RECEIPT,
                        quantity,
                        reason="Initial receipt",
                        reference=po_id,
                    )

        logger.info(
            "create_batch_complete",
            batch_id=batch.id,
            batch_number=batch.batch_number,
            total_cost=str(batch.total_cost),
        )
        return batch

    async def get(self, batch_id: str) -> Batch:
        async with self._uow_factory(write=False) as uow:
            return await require_batch(uow, batch_id)

    async def list_batches(
        self,
        stage: BatchStage | str | None = None,
        active_only: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Batch]:
        stage_filter = parse_stage(stage) if stage is not None else None
        async with self._uow_factory(write=False) as uow:
            return await uow.batches.list_batches(
                stage=stage_filter, active_only=active_only, limit=limit, offset=offset
            )

    async def list_by_po(self, po_id: str) -> list[Batch]:
        async with self._uow_factory(write=False) as uow:
            await require_po(uow, po_id)
            return await uow.batches.list_by_po(po_id)

    async def stage_summary(self) -> dict[str, dict[str, Any]]:
        """
        Count, units and value of active batches per stage.

        Every stage is present, in pipeline order, even when empty.
        """
        async with self._uow_factory(write=False) as uow:
            found = await uow.batches.stage_summary()
        return {
            stage: found.get(stage, {"count": 0, "units": 0, "value": Decimal("0.00")})
            for stage in BatchStage.values()
        }

    # Attachments

    async def add_attachment(
        self,
        owner_type: AttachmentOwner | str,
        owner_id: str,
        name: str,
        kind: str = "document",
    ) -> Attachment:
        owner = AttachmentOwner(owner_type)
        async with self._uow_factory() as uow:
            await self._require_owner(uow, owner, owner_id)
            attachment = await uow.attachments.add(
                Attachment(owner_type=owner, owner_id=owner_id, name=name, kind=kind)
            )
        logger.info(
            "attachment_added",
            attachment_id=attachment.id,
            owner_type=owner.value,
            owner_id=owner_id,
        )
        return attachment

    async def list_attachments(
        self, owner_type: AttachmentOwner | str, owner_id: str
    ) -> list[Attachment]:
        owner = AttachmentOwner(owner_type)
        async with self._uow_factory(write=False) as uow:
            await self._require_owner(uow, owner, owner_id)
            return await uow.attachments.list_for_owner(owner, owner_id)

    async def remove_attachment(self, attachment_id: str) -> None:
        async with self._uow_factory() as uow:
            if not await uow.attachments.delete(attachment_id):
                raise AttachmentNotFoundError(attachment_id)
        logger.info("attachment_removed", attachment_id=attachment_id)

    async def _require_owner(
        self, uow: IUnitOfWork, owner: AttachmentOwner, owner_id: str
    ) -> None:
        if owner == AttachmentOwner.BATCH:
            await require_batch(uow, owner_id)
        else:
            await require_po(uow, owner_id)
