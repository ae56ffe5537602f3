"""
Dependency injection container for FastAPI.

Provides service and use case instances to route handlers.
Tests swap any of these through app.dependency_overrides.
"""

from functools import lru_cache

from batchflow.application.services import (
    get_allocation_tracker,
    get_batch_registry,
    get_purchase_order_workflow,
    get_reconciliation_engine,
    get_stock_ledger,
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
from batchflow.config import Settings, get_settings
from batchflow.core.services import (
    AllocationTracker,
    BatchRegistry,
    PurchaseOrderWorkflow,
    ReconciliationEngine,
    StockLedger,
)


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Service dependencies (read paths)
def get_registry() -> BatchRegistry:
    """Get batch registry."""
    return get_batch_registry()


def get_ledger() -> StockLedger:
    """Get stock ledger."""
    return get_stock_ledger()


def get_tracker() -> AllocationTracker:
    """Get allocation tracker."""
    return get_allocation_tracker()


def get_reconciliations() -> ReconciliationEngine:
    """Get reconciliation engine."""
    return get_reconciliation_engine()


def get_po_workflow() -> PurchaseOrderWorkflow:
    """Get purchase order workflow."""
    return get_purchase_order_workflow()


# Use case dependencies
def get_create_batch_use_case() -> CreateBatchUseCase:
    return CreateBatchUseCase()


def get_change_stage_use_case() -> ChangeStageUseCase:
    return ChangeStageUseCase()


def get_split_batch_use_case() -> SplitBatchUseCase:
    return SplitBatchUseCase()


def get_merge_batches_use_case() -> MergeBatchesUseCase:
    return MergeBatchesUseCase()


def get_adjust_stock_use_case() -> AdjustStockUseCase:
    return AdjustStockUseCase()


def get_allocations_use_case() -> ManageAllocationsUseCase:
    return ManageAllocationsUseCase()


def get_reconcile_use_case() -> ReconcileBatchUseCase:
    return ReconcileBatchUseCase()


def get_create_po_use_case() -> CreatePurchaseOrderUseCase:
    return CreatePurchaseOrderUseCase()


def get_update_po_status_use_case() -> UpdatePOStatusUseCase:
    return UpdatePOStatusUseCase()
