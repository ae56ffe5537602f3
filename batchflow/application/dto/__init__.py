"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from batchflow.application.dto.requests import (
    AdjustStockRequest,
    AllocateRequest,
    AttachmentRequest,
    CommitAllocationRequest,
    CreateBatchRequest,
    CreatePurchaseOrderRequest,
    MergeBatchesRequest,
    POLineItemRequest,
    POStatusChangeRequest,
    ReconcileRequest,
    ResolveReconciliationRequest,
    SendPurchaseOrderRequest,
    SplitBatchRequest,
    StageChangeRequest,
)
from batchflow.application.dto.responses import (
    AdjustStockResponse,
    AllocateResponse,
    AllocationResponse,
    AttachmentResponse,
    BalanceResponse,
    BatchListResponse,
    BatchResponse,
    CommitAllocationResponse,
    ErrorResponse,
    HealthResponse,
    LedgerEntryResponse,
    MergeBatchesResponse,
    PurchaseOrderListResponse,
    PurchaseOrderResponse,
    ReconciliationResponse,
    SplitBatchResponse,
    StageSummaryItemResponse,
    StageSummaryResponse,
    TransitionListResponse,
    TransitionResponse,
)

__all__ = [
    # Requests
    "AdjustStockRequest",
    "AllocateRequest",
    "AttachmentRequest",
    "CommitAllocationRequest",
    "CreateBatchRequest",
    "CreatePurchaseOrderRequest",
    "MergeBatchesRequest",
    "POLineItemRequest",
    "POStatusChangeRequest",
    "ReconcileRequest",
    "ResolveReconciliationRequest",
    "SendPurchaseOrderRequest",
    "SplitBatchRequest",
    "StageChangeRequest",
    # Responses
    "AdjustStockResponse",
    "AllocateResponse",
    "AllocationResponse",
    "AttachmentResponse",
    "BalanceResponse",
    "BatchListResponse",
    "BatchResponse",
    "CommitAllocationResponse",
    "ErrorResponse",
    "HealthResponse",
    "LedgerEntryResponse",
    "MergeBatchesResponse",
    "PurchaseOrderListResponse",
    "PurchaseOrderResponse",
    "ReconciliationResponse",
    "SplitBatchResponse",
    "StageSummaryItemResponse",
    "StageSummaryResponse",
    "TransitionListResponse",
    "TransitionResponse",
]
