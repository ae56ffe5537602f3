"""Batch endpoints: receiving, lifecycle, ledger and lineage operations."""

from fastapi import APIRouter, Depends, Query, status

from batchflow.api.dependencies import (
    get_adjust_stock_use_case,
    get_change_stage_use_case,
    get_create_batch_use_case,
    get_ledger,
    get_merge_batches_use_case,
    get_reconciliations,
    get_registry,
    get_split_batch_use_case,
    get_tracker,
)
from batchflow.application.dto.requests import (
    AdjustStockRequest,
    AttachmentRequest,
    CreateBatchRequest,
    MergeBatchesRequest,
    SplitBatchRequest,
    StageChangeRequest,
)
from batchflow.application.dto.responses import (
    AdjustStockResponse,
    AllocationResponse,
    AttachmentResponse,
    BalanceResponse,
    BatchListResponse,
    BatchResponse,
    ErrorResponse,
    LedgerEntryResponse,
    MergeBatchesResponse,
    ReconciliationResponse,
    SplitBatchResponse,
    StageSummaryItemResponse,
    StageSummaryResponse,
)
from batchflow.application.use_cases import (
    AdjustStockUseCase,
    ChangeStageUseCase,
    CreateBatchUseCase,
    MergeBatchesUseCase,
    SplitBatchUseCase,
)
from batchflow.core.entities import AttachmentOwner
from batchflow.core.services import (
    AllocationTracker,
    BatchRegistry,
    ReconciliationEngine,
    StockLedger,
)

router = APIRouter(prefix="/api/batches", tags=["batches"])

NOT_FOUND = {404: {"model": ErrorResponse}}
CONFLICT = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}


@router.post(
    "",
    response_model=BatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
async def create_batch(
    request: CreateBatchRequest,
    use_case: CreateBatchUseCase = Depends(get_create_batch_use_case),
) -> BatchResponse:
    """Receive a new batch, optionally against a purchase order."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=BatchListResponse)
async def list_batches(
    stage: str | None = None,
    active_only: bool = True,
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    registry: BatchRegistry = Depends(get_registry),
) -> BatchListResponse:
    """List batches, newest first."""
    batches = await registry.list_batches(
        stage=stage, active_only=active_only, limit=limit, offset=offset
    )
    return BatchListResponse(
        batches=[BatchResponse.from_entity(b) for b in batches],
        total=len(batches),
        limit=limit,
        offset=offset,
    )


@router.get("/summary", response_model=StageSummaryResponse)
async def stage_summary(
    registry: BatchRegistry = Depends(get_registry),
) -> StageSummaryResponse:
    """Count, units and value of active batches per stage."""
    summary = await registry.stage_summary()
    return StageSummaryResponse(
        stages=[StageSummaryItemResponse(stage=stage, **totals) for stage, totals in summary.items()]
    )


@router.post(
    "/merge",
    response_model=MergeBatchesResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
async def merge_batches(
    request: MergeBatchesRequest,
    use_case: MergeBatchesUseCase = Depends(get_merge_batches_use_case),
) -> MergeBatchesResponse:
    """Combine batches of one SKU and stage into a new batch."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("/{batch_id}", response_model=BatchResponse, responses=NOT_FOUND)
async def get_batch(
    batch_id: str,
    registry: BatchRegistry = Depends(get_registry),
) -> BatchResponse:
    """Get a batch with its stage history."""
    return BatchResponse.from_entity(await registry.get(batch_id))


@router.post("/{batch_id}/stage", response_model=BatchResponse, responses=CONFLICT)
async def change_stage(
    batch_id: str,
    request: StageChangeRequest,
    use_case: ChangeStageUseCase = Depends(get_change_stage_use_case),
) -> BatchResponse:
    """Move a batch to another pipeline stage."""
    result = await use_case.execute(batch_id, request)
    return use_case.to_response(result)


@router.post(
    "/{batch_id}/split",
    response_model=SplitBatchResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
async def split_batch(
    batch_id: str,
    request: SplitBatchRequest,
    use_case: SplitBatchUseCase = Depends(get_split_batch_use_case),
) -> SplitBatchResponse:
    """Carve units off a batch into a new batch."""
    result = await use_case.execute(batch_id, request)
    return use_case.to_response(result)


@router.get(
    "/{batch_id}/ledger",
    response_model=list[LedgerEntryResponse],
    responses=NOT_FOUND,
)
async def get_ledger_entries(
    batch_id: str,
    ledger: StockLedger = Depends(get_ledger),
) -> list[LedgerEntryResponse]:
    """Ledger entries for a batch, oldest first."""
    entries = await ledger.entries(batch_id)
    return [LedgerEntryResponse.from_entity(e) for e in entries]


@router.get("/{batch_id}/balance", response_model=BalanceResponse, responses=NOT_FOUND)
async def get_balance(
    batch_id: str,
    ledger: StockLedger = Depends(get_ledger),
    tracker: AllocationTracker = Depends(get_tracker),
) -> BalanceResponse:
    """Ledger balance, available quantity and per-location split."""
    return BalanceResponse(
        batch_id=batch_id,
        balance=await ledger.balance(batch_id),
        available=await tracker.available(batch_id),
        by_location=await ledger.balance_by_location(batch_id),
    )


@router.post(
    "/{batch_id}/adjustments",
    response_model=AdjustStockResponse,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT,
)
async def adjust_stock(
    batch_id: str,
    request: AdjustStockRequest,
    use_case: AdjustStockUseCase = Depends(get_adjust_stock_use_case),
) -> AdjustStockResponse:
    """Record a manual movement against a batch."""
    result = await use_case.execute(batch_id, request)
    return use_case.to_response(result)


@router.get(
    "/{batch_id}/allocations",
    response_model=list[AllocationResponse],
    responses=NOT_FOUND,
)
async def list_allocations(
    batch_id: str,
    tracker: AllocationTracker = Depends(get_tracker),
) -> list[AllocationResponse]:
    """Open allocations against a batch."""
    allocations = await tracker.allocations_for_batch(batch_id)
    return [AllocationResponse.from_entity(a) for a in allocations]


@router.get(
    "/{batch_id}/reconciliations",
    response_model=list[ReconciliationResponse],
    responses=NOT_FOUND,
)
async def list_reconciliations(
    batch_id: str,
    engine: ReconciliationEngine = Depends(get_reconciliations),
) -> list[ReconciliationResponse]:
    """Reconciliation records for a batch, oldest first."""
    records = await engine.list_for_batch(batch_id)
    return [ReconciliationResponse.from_entity(r) for r in records]


@router.get(
    "/{batch_id}/attachments",
    response_model=list[AttachmentResponse],
    responses=NOT_FOUND,
)
async def list_attachments(
    batch_id: str,
    registry: BatchRegistry = Depends(get_registry),
) -> list[AttachmentResponse]:
    attachments = await registry.list_attachments(AttachmentOwner.BATCH, batch_id)
    return [AttachmentResponse.from_entity(a) for a in attachments]


@router.post(
    "/{batch_id}/attachments",
    response_model=AttachmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses=NOT_FOUND,
)
async def add_attachment(
    batch_id: str,
    request: AttachmentRequest,
    registry: BatchRegistry = Depends(get_registry),
) -> AttachmentResponse:
    """Attach document metadata to a batch."""
    attachment = await registry.add_attachment(
        AttachmentOwner.BATCH, batch_id, request.name, request.kind
    )
    return AttachmentResponse.from_entity(attachment)
