"""Create Purchase Order Use Case."""

from batchflow.application.dto.requests import CreatePurchaseOrderRequest
from batchflow.application.dto.responses import PurchaseOrderResponse
from batchflow.core.entities import POLineItem, PurchaseOrder
from batchflow.core.services import PurchaseOrderWorkflow, batch_creation_allowed


class CreatePurchaseOrderUseCase:
    """Create a draft PO with numbered header and computed totals."""

    def __init__(self, workflow: PurchaseOrderWorkflow | None = None):
        self._workflow = workflow

    def _get_workflow(self) -> PurchaseOrderWorkflow:
        if self._workflow is None:
            from batchflow.application.services import get_purchase_order_workflow

            self._workflow = get_purchase_order_workflow()
        return self._workflow

    async def execute(self, request: CreatePurchaseOrderRequest) -> PurchaseOrder:
        line_items = [
            POLineItem(
                sku=line.sku,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_cost=line.unit_cost,
            )
            for line in request.line_items
        ]
        return await self._get_workflow().create(
            supplier_id=request.supplier_id,
            line_items=line_items,
            order_date=request.order_date,
            expected_date=request.expected_date,
            notes=request.notes,
        )

    def to_response(self, result: PurchaseOrder) -> PurchaseOrderResponse:
        return PurchaseOrderResponse.from_entity(
            result, batch_creation_allowed=batch_creation_allowed(result.status)
        )
