"""Update PO Status Use Case: workflow transitions and supplier sends."""

from batchflow.application.dto.requests import POStatusChangeRequest, SendPurchaseOrderRequest
from batchflow.application.dto.responses import (
    PurchaseOrderResponse,
    TransitionListResponse,
    TransitionResponse,
)
from batchflow.core.entities import PurchaseOrder
from batchflow.core.services import (
    PurchaseOrderWorkflow,
    allowed_transitions,
    batch_creation_allowed,
)


class UpdatePOStatusUseCase:
    """Move a purchase order through its workflow."""

    def __init__(self, workflow: PurchaseOrderWorkflow | None = None):
        self._workflow = workflow

    def _get_workflow(self) -> PurchaseOrderWorkflow:
        if self._workflow is None:
            from batchflow.application.services import get_purchase_order_workflow

            self._workflow = get_purchase_order_workflow()
        return self._workflow

    async def execute(self, po_id: str, request: POStatusChangeRequest) -> PurchaseOrder:
        return await self._get_workflow().apply(po_id, request.status, request.note)

    async def send(self, po_id: str, request: SendPurchaseOrderRequest) -> PurchaseOrder:
        """Send a draft, or resend while awaiting the supplier's invoice."""
        workflow = self._get_workflow()
        if request.resend:
            return await workflow.resend_to_supplier(po_id, request.note)
        return await workflow.send_to_supplier(po_id, request.note)

    async def transitions(self, po_id: str) -> TransitionListResponse:
        po = await self._get_workflow().get(po_id)
        return TransitionListResponse(
            po_id=po.id,
            status=po.status.value,
            transitions=[
                TransitionResponse.from_entity(t) for t in allowed_transitions(po.status)
            ],
        )

    def to_response(self, result: PurchaseOrder) -> PurchaseOrderResponse:
        return PurchaseOrderResponse.from_entity(
            result, batch_creation_allowed=batch_creation_allowed(result.status)
        )
