"""
Purchase order workflow.

The PO status state machine. Only the edges declared in TRANSITIONS are
legal; each successful change appends to the PO's status history in the
same transaction as the status update.
"""

from datetime import date

from batchflow.config import get_logger
from batchflow.core.entities import (
    POLineItem,
    POStatus,
    PurchaseOrder,
    Transition,
    TransitionKind,
)
from batchflow.core.entities.common import utc_now
from batchflow.core.exceptions import (
    IllegalTransitionError,
    PurchaseOrderNotFoundError,
    ValidationError,
)
from batchflow.core.interfaces import IUnitOfWork, UnitOfWorkFactory
from batchflow.core.services.locking import KeyedLockRegistry, po_key
from batchflow.core.services.numbering import next_po_number

logger = get_logger(__name__)

_F, _B, _C = TransitionKind.FORWARD, TransitionKind.BACK, TransitionKind.CANCEL
_CANCEL = Transition(target=POStatus.CANCELLED, kind=_C, label="Cancel Order")

TRANSITIONS: dict[POStatus, list[Transition]] = {
    # Leaving draft for sent goes through send_to_supplier, which stamps the send time
    POStatus.DRAFT: [_CANCEL],
    POStatus.SENT: [
        Transition(target=POStatus.AWAITING_INVOICE, kind=_F, label="Awaiting Invoice"),
        Transition(target=POStatus.DRAFT, kind=_B, label="Back to Draft"),
        _CANCEL,
    ],
    POStatus.AWAITING_INVOICE: [
        Transition(target=POStatus.INVOICE_RECEIVED, kind=_F, label="Invoice Received"),
        Transition(target=POStatus.SENT, kind=_B, label="Back to Sent"),
        _CANCEL,
    ],
    POStatus.INVOICE_RECEIVED: [
        Transition(target=POStatus.CONFIRMED, kind=_F, label="Confirm Order"),
        Transition(target=POStatus.AWAITING_INVOICE, kind=_B, label="Back to Awaiting"),
        _CANCEL,
    ],
    POStatus.CONFIRMED: [
        Transition(target=POStatus.PRODUCTION_COMPLETE, kind=_F, label="Production Complete"),
        Transition(target=POStatus.INVOICE_RECEIVED, kind=_B, label="Back to Invoice Received"),
        _CANCEL,
    ],
    POStatus.PRODUCTION_COMPLETE: [
        Transition(target=POStatus.READY_TO_SHIP, kind=_F, label="Ready to Ship"),
        Transition(target=POStatus.CONFIRMED, kind=_B, label="Back to Confirmed"),
    ],
    POStatus.READY_TO_SHIP: [
        Transition(target=POStatus.RECEIVED, kind=_F, label="Mark as Received"),
        Transition(target=POStatus.PARTIALLY_RECEIVED, kind=_F, label="Partial Receipt"),
        Transition(
            target=POStatus.PRODUCTION_COMPLETE, kind=_B, label="Back to Production Complete"
        ),
    ],
    POStatus.PARTIALLY_RECEIVED: [
        Transition(target=POStatus.RECEIVED, kind=_F, label="Mark as Received"),
        Transition(
            target=POStatus.PRODUCTION_COMPLETE, kind=_B, label="Back to Production Complete"
        ),
    ],
    POStatus.RECEIVED: [
        Transition(
            target=POStatus.PRODUCTION_COMPLETE, kind=_B, label="Revert to Production Complete"
        ),
        Transition(target=POStatus.PARTIALLY_RECEIVED, kind=_B, label="Revert to Partial"),
    ],
    POStatus.CANCELLED: [
        Transition(target=POStatus.DRAFT, kind=_B, label="Reopen as Draft"),
    ],
}

# Goods exist from production_complete onward
BATCH_CREATION_STATUSES = frozenset(
    {
        POStatus.PRODUCTION_COMPLETE,
        POStatus.READY_TO_SHIP,
        POStatus.PARTIALLY_RECEIVED,
        POStatus.RECEIVED,
    }
)


def allowed_transitions(status: POStatus | str) -> list[Transition]:
    """Declared edges out of a status, in display order."""
    try:
        return list(TRANSITIONS[POStatus(status)])
    except ValueError:
        return []


def is_legal(current: POStatus, target: POStatus) -> bool:
    return any(t.target == target for t in TRANSITIONS[current])


def batch_creation_allowed(status: POStatus | str) -> bool:
    try:
        return POStatus(status) in BATCH_CREATION_STATUSES
    except ValueError:
        return False


def can_send_to_supplier(status: POStatus | str) -> bool:
    return status == POStatus.DRAFT


def can_resend_to_supplier(status: POStatus | str) -> bool:
    return status == POStatus.AWAITING_INVOICE


async def require_po(uow: IUnitOfWork, po_id: str) -> PurchaseOrder:
    po = await uow.purchase_orders.get(po_id)
    if po is None:
        raise PurchaseOrderNotFoundError(po_id)
    return po


class PurchaseOrderWorkflow:
    """Creates purchase orders and drives them through their statuses."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        locks: KeyedLockRegistry,
        po_number_prefix: str = "PO",
    ):
        self._uow_factory = uow_factory
        self._locks = locks
        self._prefix = po_number_prefix

    async def create(
        self,
        supplier_id: str,
        line_items: list[POLineItem],
        order_date: date | None = None,
        expected_date: date | None = None,
        notes: str | None = None,
    ) -> PurchaseOrder:
        """Create a draft PO with a fresh number and computed totals."""
        if not line_items:
            raise ValidationError("line_items", "a purchase order needs at least one line")

        logger.info("create_po_started", supplier_id=supplier_id, lines=len(line_items))

        po = PurchaseOrder(
            supplier_id=supplier_id,
            line_items=line_items,
            order_date=order_date or date.today(),
            expected_date=expected_date,
            notes=notes,
        )
        po.append_status(POStatus.DRAFT, "Purchase order created")

        async with self._uow_factory() as uow:
            po.po_number = await next_po_number(uow, self._prefix, po.order_date)
            await uow.purchase_orders.create(po)

        logger.info(
            "create_po_complete",
            po_id=po.id,
            po_number=po.po_number,
            total=str(po.total),
        )
        return po

    async def get(self, po_id: str) -> PurchaseOrder:
        async with self._uow_factory(write=False) as uow:
            return await require_po(uow, po_id)

    async def list_orders(
        self, status: POStatus | None = None, limit: int = 100, offset: int = 0
    ) -> list[PurchaseOrder]:
        async with self._uow_factory(write=False) as uow:
            return await uow.purchase_orders.list_orders(status=status, limit=limit, offset=offset)

    async def apply(
        self, po_id: str, target_status: POStatus | str, note: str | None = None
    ) -> PurchaseOrder:
        """
        Move a PO along a declared edge.

        Raises:
            PurchaseOrderNotFoundError: Unknown PO.
            IllegalTransitionError: Unknown target or undeclared edge.
        """
        logger.info(
            "po_transition_started",
            po_id=po_id,
            target_status=getattr(target_status, "value", target_status),
        )

        async with self._locks.hold(po_key(po_id)):
            async with self._uow_factory() as uow:
                po = await require_po(uow, po_id)
                previous = po.status
                target = self._validate_target(po, target_status)
                await self._record_status(uow, po, target, note)

        logger.info(
            "po_transition_complete",
            po_id=po_id,
            from_status=previous.value,
            to_status=po.status.value,
        )
        return po

    async def send_to_supplier(self, po_id: str, note: str | None = None) -> PurchaseOrder:
        """
        Mark a draft PO as sent and stamp sent_to_supplier_at.

        Delivering the document to the supplier happens elsewhere.
        """
        logger.info("send_po_started", po_id=po_id)

        async with self._locks.hold(po_key(po_id)):
            async with self._uow_factory() as uow:
                po = await require_po(uow, po_id)
                if not can_send_to_supplier(po.status):
                    raise IllegalTransitionError(
                        po_id, po.status.value, POStatus.SENT.value, [POStatus.DRAFT.value]
                    )
                po.sent_to_supplier_at = utc_now()
                await self._record_status(uow, po, POStatus.SENT, note or "Sent to supplier")

        logger.info("send_po_complete", po_id=po_id, po_number=po.po_number)
        return po

    async def resend_to_supplier(self, po_id: str, note: str | None = None) -> PurchaseOrder:
        """Re-stamp sent_to_supplier_at while awaiting the supplier's invoice."""
        logger.info("resend_po_started", po_id=po_id)

        async with self._locks.hold(po_key(po_id)):
            async with self._uow_factory() as uow:
                po = await require_po(uow, po_id)
                if not can_resend_to_supplier(po.status):
                    raise IllegalTransitionError(
                        po_id,
                        po.status.value,
                        POStatus.AWAITING_INVOICE.value,
                        [POStatus.AWAITING_INVOICE.value],
                    )
                po.sent_to_supplier_at = utc_now()
                # Status is unchanged; the history row records the resend
                await self._record_status(uow, po, po.status, note or "Resent to supplier")

        logger.info("resend_po_complete", po_id=po_id)
        return po

    def _validate_target(self, po: PurchaseOrder, target_status: POStatus | str) -> POStatus:
        allowed = [t.target.value for t in TRANSITIONS[po.status]]
        try:
            target = POStatus(target_status)
        except ValueError:
            raise IllegalTransitionError(
                po.id, po.status.value, str(target_status), allowed
            ) from None
        if not is_legal(po.status, target):
            raise IllegalTransitionError(po.id, po.status.value, target.value, allowed)
        return target

    async def _record_status(
        self, uow: IUnitOfWork, po: PurchaseOrder, status: POStatus, note: str | None
    ) -> None:
        entry = po.append_status(status, note)
        await uow.purchase_orders.add_status_entry(entry)
        await uow.purchase_orders.update(po)
