"""Allocation endpoints used by the transfer subsystem."""

from fastapi import APIRouter, Depends, Response, status

from batchflow.api.dependencies import get_allocations_use_case, get_tracker
from batchflow.application.dto.requests import AllocateRequest, CommitAllocationRequest
from batchflow.application.dto.responses import (
    AllocateResponse,
    AllocationResponse,
    CommitAllocationResponse,
    ErrorResponse,
)
from batchflow.application.use_cases import ManageAllocationsUseCase
from batchflow.core.services import AllocationTracker

router = APIRouter(prefix="/api/allocations", tags=["allocations"])

CONFLICT = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=AllocateResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
async def allocate(
    request: AllocateRequest,
    use_case: ManageAllocationsUseCase = Depends(get_allocations_use_case),
) -> AllocateResponse:
    """Reserve batch quantity for a transfer draft."""
    result = await use_case.allocate(request)
    return use_case.to_allocate_response(result)


@router.get("", response_model=list[AllocationResponse])
async def list_for_transfer(
    transfer_draft_id: str,
    tracker: AllocationTracker = Depends(get_tracker),
) -> list[AllocationResponse]:
    """Open allocations held for a transfer draft."""
    allocations = await tracker.allocations_for_transfer(transfer_draft_id)
    return [AllocationResponse.from_entity(a) for a in allocations]


@router.delete(
    "/{allocation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
)
async def release(
    allocation_id: str,
    use_case: ManageAllocationsUseCase = Depends(get_allocations_use_case),
) -> Response:
    """Drop a reservation; the ledger is untouched."""
    await use_case.release(allocation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{allocation_id}/commit",
    response_model=CommitAllocationResponse,
    responses=CONFLICT,
)
async def commit(
    allocation_id: str,
    request: CommitAllocationRequest | None = None,
    use_case: ManageAllocationsUseCase = Depends(get_allocations_use_case),
) -> CommitAllocationResponse:
    """Turn a reservation into transfer_out ledger entries, one per location drawn."""
    result = await use_case.commit(allocation_id, request)
    return use_case.to_commit_response(result)
