"""
Application layer - Use cases, DTOs, and service factories.

This layer orchestrates business logic by:
1. Defining request/response DTOs for API contracts
2. Implementing use cases that coordinate core services
3. Providing factory functions for dependency injection

Use cases are the entry point for API handlers that change state.
"""

from batchflow.application.dto.requests import (
    AdjustStockRequest,
    AllocateRequest,
    CreateBatchRequest,
    CreatePurchaseOrderRequest,
    MergeBatchesRequest,
    POStatusChangeRequest,
    ReconcileRequest,
    SplitBatchRequest,
    StageChangeRequest,
)
from batchflow.application.dto.responses import (
    BatchResponse,
    ErrorResponse,
    HealthResponse,
    PurchaseOrderResponse,
    ReconciliationResponse,
)
from batchflow.application.services import (
    get_allocation_tracker,
    get_batch_registry,
    get_lock_registry,
    get_purchase_order_workflow,
    get_reconciliation_engine,
    get_split_merge_engine,
    get_stage_transition_engine,
    get_stock_ledger,
    get_uow_factory,
    reset_services,
)
from batchflow.application.use_cases import (
    AdjustStockUseCase,
    ChangeStageUseCase,
    CreateBatchUseCase,
    CreatePurchaseOrderUseCase,
    ManageAllocationsUseCase,
    MergeBatchesUseCase,
    ReconcileBatchUseCase,
    SplitBatchUseCase,
    UpdatePOStatusUseCase,
)

__all__ = [
    # Request DTOs
    "CreateBatchRequest",
    "StageChangeRequest",
    "SplitBatchRequest",
    "MergeBatchesRequest",
    "AdjustStockRequest",
    "AllocateRequest",
    "CreatePurchaseOrderRequest",
    "POStatusChangeRequest",
    "ReconcileRequest",
    # Response DTOs
    "BatchResponse",
    "PurchaseOrderResponse",
    "ReconciliationResponse",
    "HealthResponse",
    "ErrorResponse",
    # Use Cases
    "CreateBatchUseCase",
    "ChangeStageUseCase",
    "SplitBatchUseCase",
    "MergeBatchesUseCase",
    "AdjustStockUseCase",
    "ManageAllocationsUseCase",
    "ReconcileBatchUseCase",
    "CreatePurchaseOrderUseCase",
    "UpdatePOStatusUseCase",
    # Service factories
    "get_lock_registry",
    "get_uow_factory",
    "get_stock_ledger",
    "get_allocation_tracker",
    "get_split_merge_engine",
    "get_stage_transition_engine",
    "get_reconciliation_engine",
    "get_purchase_order_workflow",
    "get_batch_registry",
    "reset_services",
]
