"""
Service factory functions for dependency injection.

This module provides factory functions that wire infrastructure
implementations to core services. Use cases should import from here.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from batchflow.config import get_settings
from batchflow.core.interfaces import UnitOfWorkFactory
from batchflow.core.services import (
    AllocationTracker,
    BatchRegistry,
    KeyedLockRegistry,
    PurchaseOrderWorkflow,
    ReconciliationEngine,
    SplitMergeEngine,
    StageTransitionEngine,
    StockLedger,
)

# Singleton service instances
_lock_registry: KeyedLockRegistry | None = None
_uow_factory: UnitOfWorkFactory | None = None
_stock_ledger: StockLedger | None = None
_allocation_tracker: AllocationTracker | None = None
_split_merge_engine: SplitMergeEngine | None = None
_stage_transition_engine: StageTransitionEngine | None = None
_reconciliation_engine: ReconciliationEngine | None = None
_purchase_order_workflow: PurchaseOrderWorkflow | None = None
_batch_registry: BatchRegistry | None = None


def get_lock_registry() -> KeyedLockRegistry:
    """
    Get the process-wide lock registry.

    Every engine must share one registry, otherwise two engines could
    mutate the same batch concurrently.
    """
    global _lock_registry
    if _lock_registry is None:
        _lock_registry = KeyedLockRegistry()
    return _lock_registry


def get_uow_factory() -> UnitOfWorkFactory:
    """Get unit of work factory bound to the global connection pool."""
    global _uow_factory
    if _uow_factory is None:
        # Lazy import infrastructure to avoid circular imports
        from batchflow.infrastructure.storage.sqlite import make_uow_factory

        _uow_factory = make_uow_factory()
    return _uow_factory


def get_stock_ledger() -> StockLedger:
    global _stock_ledger
    if _stock_ledger is None:
        _stock_ledger = StockLedger(get_uow_factory(), get_lock_registry())
    return _stock_ledger


def get_allocation_tracker() -> AllocationTracker:
    global _allocation_tracker
    if _allocation_tracker is None:
        _allocation_tracker = AllocationTracker(
            get_uow_factory(),
            get_lock_registry(),
            default_location_id=get_settings().inventory.default_location_id,
        )
    return _allocation_tracker


def get_split_merge_engine() -> SplitMergeEngine:
    global _split_merge_engine
    if _split_merge_engine is None:
        inventory = get_settings().inventory
        _split_merge_engine = SplitMergeEngine(
            get_uow_factory(),
            get_lock_registry(),
            batch_number_prefix=inventory.batch_number_prefix,
            default_location_id=inventory.default_location_id,
        )
    return _split_merge_engine


def get_stage_transition_engine() -> StageTransitionEngine:
    global _stage_transition_engine
    if _stage_transition_engine is None:
        _stage_transition_engine = StageTransitionEngine(get_uow_factory(), get_lock_registry())
    return _stage_transition_engine


def get_reconciliation_engine() -> ReconciliationEngine:
    global _reconciliation_engine
    if _reconciliation_engine is None:
        _reconciliation_engine = ReconciliationEngine(get_uow_factory(), get_lock_registry())
    return _reconciliation_engine


def get_purchase_order_workflow() -> PurchaseOrderWorkflow:
    global _purchase_order_workflow
    if _purchase_order_workflow is None:
        _purchase_order_workflow = PurchaseOrderWorkflow(
            get_uow_factory(),
            get_lock_registry(),
            po_number_prefix=get_settings().inventory.po_number_prefix,
        )
    return _purchase_order_workflow


def get_batch_registry() -> BatchRegistry:
    global _batch_registry
    if _batch_registry is None:
        inventory = get_settings().inventory
        _batch_registry = BatchRegistry(
            get_uow_factory(),
            get_lock_registry(),
            batch_number_prefix=inventory.batch_number_prefix,
            default_location_id=inventory.default_location_id,
        )
    return _batch_registry


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _lock_registry, _uow_factory, _stock_ledger, _allocation_tracker
    global _split_merge_engine, _stage_transition_engine, _reconciliation_engine
    global _purchase_order_workflow, _batch_registry

    _lock_registry = None
    _uow_factory = None
    _stock_ledger = None
    _allocation_tracker = None
    _split_merge_engine = None
    _stage_transition_engine = None
    _reconciliation_engine = None
    _purchase_order_workflow = None
    _batch_registry = None
