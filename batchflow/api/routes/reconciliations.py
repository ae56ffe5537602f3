"""Marketplace reconciliation endpoints."""

from fastapi import APIRouter, Depends, status

from batchflow.api.dependencies import get_reconcile_use_case
from batchflow.application.dto.requests import ReconcileRequest, ResolveReconciliationRequest
from batchflow.application.dto.responses import ErrorResponse, ReconciliationResponse
from batchflow.application.use_cases import ReconcileBatchUseCase

router = APIRouter(prefix="/api/reconciliations", tags=["reconciliations"])

CONFLICT = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=ReconciliationResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
async def reconcile(
    request: ReconcileRequest,
    use_case: ReconcileBatchUseCase = Depends(get_reconcile_use_case),
) -> ReconciliationResponse:
    """Record marketplace-reported receipts against a batch."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.post(
    "/{reconciliation_id}/resolve",
    response_model=ReconciliationResponse,
    responses=CONFLICT,
)
async def resolve(
    reconciliation_id: str,
    request: ResolveReconciliationRequest,
    use_case: ReconcileBatchUseCase = Depends(get_reconcile_use_case),
) -> ReconciliationResponse:
    """Close a reconciliation, booking any discrepancy as an adjustment."""
    result = await use_case.resolve(reconciliation_id, request)
    return use_case.to_response(result)
