"""
Application use cases.

Each use case orchestrates one or more core services for a single
API-facing operation and converts its result to a response DTO.
"""

from batchflow.application.use_cases.adjust_stock import AdjustStockResult, AdjustStockUseCase
from batchflow.application.use_cases.change_stage import ChangeStageResult, ChangeStageUseCase
from batchflow.application.use_cases.create_batch import CreateBatchResult, CreateBatchUseCase
from batchflow.application.use_cases.create_purchase_order import CreatePurchaseOrderUseCase
from batchflow.application.use_cases.manage_allocations import (
    AllocateResult,
    CommitAllocationResult,
    ManageAllocationsUseCase,
)
from batchflow.application.use_cases.merge_batches import (
    MergeBatchesResult,
    MergeBatchesUseCase,
)
from batchflow.application.use_cases.reconcile_batch import ReconcileBatchUseCase
from batchflow.application.use_cases.split_batch import SplitBatchResult, SplitBatchUseCase
from batchflow.application.use_cases.update_po_status import UpdatePOStatusUseCase

__all__ = [
    "AdjustStockResult",
    "AdjustStockUseCase",
    "AllocateResult",
    "ChangeStageResult",
    "ChangeStageUseCase",
    "CommitAllocationResult",
    "CreateBatchResult",
    "CreateBatchUseCase",
    "CreatePurchaseOrderUseCase",
    "ManageAllocationsUseCase",
    "MergeBatchesResult",
    "MergeBatchesUseCase",
    "ReconcileBatchUseCase",
    "SplitBatchResult",
    "SplitBatchUseCase",
    "UpdatePOStatusUseCase",
]
