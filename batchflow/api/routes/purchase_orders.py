"""Purchase order endpoints."""

from fastapi import APIRouter, Depends, Query, status

from batchflow.api.dependencies import (
    get_create_po_use_case,
    get_po_workflow,
    get_registry,
    get_update_po_status_use_case,
)
from batchflow.application.dto.requests import (
    AttachmentRequest,
    CreatePurchaseOrderRequest,
    POStatusChangeRequest,
    SendPurchaseOrderRequest,
)
from batchflow.application.dto.responses import (
    AttachmentResponse,
    BatchResponse,
    ErrorResponse,
    PurchaseOrderListResponse,
    PurchaseOrderResponse,
    TransitionListResponse,
)
from batchflow.application.use_cases import (
    CreatePurchaseOrderUseCase,
    UpdatePOStatusUseCase,
)
from batchflow.core.entities import AttachmentOwner, POStatus
from batchflow.core.services import BatchRegistry, PurchaseOrderWorkflow, batch_creation_allowed

router = APIRouter(prefix="/api/purchase-orders", tags=["purchase-orders"])

NOT_FOUND = {404: {"model": ErrorResponse}}
CONFLICT = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


def _to_response(po) -> PurchaseOrderResponse:
    return PurchaseOrderResponse.from_entity(
        po, batch_creation_allowed=batch_creation_allowed(po.status)
    )


@router.post(
    "",
    response_model=PurchaseOrderResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorResponse}},
)
async def create_purchase_order(
    request: CreatePurchaseOrderRequest,
    use_case: CreatePurchaseOrderUseCase = Depends(get_create_po_use_case),
) -> PurchaseOrderResponse:
    """Create a draft purchase order."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=PurchaseOrderListResponse)
async def list_purchase_orders(
    status_filter: POStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    workflow: PurchaseOrderWorkflow = Depends(get_po_workflow),
) -> PurchaseOrderListResponse:
    orders = await workflow.list_orders(status=status_filter, limit=limit, offset=offset)
    return PurchaseOrderListResponse(
        purchase_orders=[_to_response(po) for po in orders],
        total=len(orders),
    )


@router.get("/{po_id}", response_model=PurchaseOrderResponse, responses=NOT_FOUND)
async def get_purchase_order(
    po_id: str,
    workflow: PurchaseOrderWorkflow = Depends(get_po_workflow),
) -> PurchaseOrderResponse:
    return _to_response(await workflow.get(po_id))


@router.get(
    "/{po_id}/transitions",
    response_model=TransitionListResponse,
    responses=NOT_FOUND,
)
async def list_transitions(
    po_id: str,
    use_case: UpdatePOStatusUseCase = Depends(get_update_po_status_use_case),
) -> TransitionListResponse:
    """Moves allowed from the PO's current status."""
    return await use_case.transitions(po_id)


@router.post("/{po_id}/status", response_model=PurchaseOrderResponse, responses=CONFLICT)
async def change_status(
    po_id: str,
    request: POStatusChangeRequest,
    use_case: UpdatePOStatusUseCase = Depends(get_update_po_status_use_case),
) -> PurchaseOrderResponse:
    """Apply a workflow transition."""
    result = await use_case.execute(po_id, request)
    return use_case.to_response(result)


@router.post("/{po_id}/send", response_model=PurchaseOrderResponse, responses=CONFLICT)
async def send_to_supplier(
    po_id: str,
    request: SendPurchaseOrderRequest | None = None,
    use_case: UpdatePOStatusUseCase = Depends(get_update_po_status_use_case),
) -> PurchaseOrderResponse:
    """Mark the PO as sent to its supplier."""
    result = await use_case.send(po_id, request or SendPurchaseOrderRequest())
    return use_case.to_response(result)


@router.get(
    "/{po_id}/batches",
    response_model=list[BatchResponse],
    responses=NOT_FOUND,
)
async def list_po_batches(
    po_id: str,
    registry: BatchRegistry = Depends(get_registry),
) -> list[BatchResponse]:
    """Batches received against the PO."""
    batches = await registry.list_by_po(po_id)
    return [BatchResponse.from_entity(b) for b in batches]


@router.get(
    "/{po_id}/attachments",
    response_model=list[AttachmentResponse],
    responses=NOT_FOUND,
)
async def list_attachments(
    po_id: str,
    registry: BatchRegistry = Depends(get_registry),
) -> list[AttachmentResponse]:
    attachments = await registry.list_attachments(AttachmentOwner.PURCHASE_ORDER, po_id)
    return [AttachmentResponse.from_entity(a) for a in attachments]


@router.post(
    "/{po_id}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND,
)
async def add_attachment(
    po_id: str,
    request: AttachmentRequest,
    registry: BatchRegistry = Depends(get_registry),
) -> AttachmentResponse:
    attachment = await registry.add_attachment(
        AttachmentOwner.PURCHASE_ORDER, po_id, request.name, request.kind
    )
    return AttachmentResponse.from_entity(attachment)
