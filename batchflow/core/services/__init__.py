"""
Core business logic services.

Layer-pure services that depend only on:
- batchflow/core/entities/*
- batchflow/core/interfaces/*
- batchflow/core/exceptions.py

NO infrastructure imports. The unit of work factory and lock registry
are injected via constructor.
"""

from batchflow.core.services.allocation_tracker import AllocationTracker
from batchflow.core.services.batch_registry import BatchRegistry
from batchflow.core.services.locking import KeyedLockRegistry
from batchflow.core.services.purchase_order_workflow import (
    TRANSITIONS,
    PurchaseOrderWorkflow,
    allowed_transitions,
    batch_creation_allowed,
    can_resend_to_supplier,
    can_send_to_supplier,
)
from batchflow.core.services.reconciliation import (
    ReconciliationEngine,
    compute_reconciliation,
)
from batchflow.core.services.split_merge import SplitMergeEngine
from batchflow.core.services.stage_transition import StageTransitionEngine
from batchflow.core.services.stock_ledger import StockLedger

__all__ = [
    # Locking
    "KeyedLockRegistry",
    # Ledger
    "StockLedger",
    # Allocations
    "AllocationTracker",
    # Split / merge
    "SplitMergeEngine",
    # Stages
    "StageTransitionEngine",
    # Reconciliation
    "ReconciliationEngine",
    "compute_reconciliation",
    # Purchase orders
    "PurchaseOrderWorkflow",
    "TRANSITIONS",
    "allowed_transitions",
    "batch_creation_allowed",
    "can_send_to_supplier",
    "can_resend_to_supplier",
    # Batches
    "BatchRegistry",
]
