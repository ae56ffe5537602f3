"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from batchflow.config import reset_settings
from batchflow.core.entities import Batch, BatchStage, POLineItem, POStatus, PurchaseOrder
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
from batchflow.infrastructure.storage.sqlite import ConnectionPool, make_uow_factory
from batchflow.infrastructure.storage.sqlite.migrations import initialize_database


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Point settings at a throwaway data dir for every test."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path / "data"))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "batchflow_test.db"


@pytest.fixture
async def migrated_db(temp_db_path: Path) -> Path:
    """Temporary database with every migration applied."""
    await initialize_database(temp_db_path, create_backup_before=False)
    return temp_db_path


@pytest.fixture
async def pool(migrated_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    pool = ConnectionPool(migrated_db, pool_size=3, busy_timeout=5000)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def uow_factory(pool: ConnectionPool):
    return make_uow_factory(pool)


@pytest.fixture
def locks() -> KeyedLockRegistry:
    return KeyedLockRegistry()


@pytest.fixture
def ledger(uow_factory, locks) -> StockLedger:
    return StockLedger(uow_factory, locks)


@pytest.fixture
def tracker(uow_factory, locks) -> AllocationTracker:
    return AllocationTracker(uow_factory, locks)


@pytest.fixture
def split_merge(uow_factory, locks) -> SplitMergeEngine:
    return SplitMergeEngine(uow_factory, locks)


@pytest.fixture
def stages(uow_factory, locks) -> StageTransitionEngine:
    return StageTransitionEngine(uow_factory, locks)


@pytest.fixture
def reconciliations(uow_factory, locks) -> ReconciliationEngine:
    return ReconciliationEngine(uow_factory, locks)


@pytest.fixture
def workflow(uow_factory, locks) -> PurchaseOrderWorkflow:
    return PurchaseOrderWorkflow(uow_factory, locks)


@pytest.fixture
def registry(uow_factory, locks) -> BatchRegistry:
    return BatchRegistry(uow_factory, locks)


@pytest.fixture
def make_batch(registry: BatchRegistry):
    """Async factory receiving a batch through the registry."""

    async def _make(
        quantity: int = 1000,
        unit_cost: str = "2.50",
        sku: str = "SKU-001",
        stage: BatchStage | str = BatchStage.ORDERED,
        **kwargs,
    ) -> Batch:
        return await registry.create_batch(
            sku=sku,
            product_name=kwargs.pop("product_name", "Ceramic Mug 350ml"),
            quantity=quantity,
            unit_cost=unit_cost,
            stage=stage,
            **kwargs,
        )

    return _make


@pytest.fixture
def sample_line_items() -> list[POLineItem]:
    return [
        POLineItem(sku="SKU-001", product_name="Ceramic Mug 350ml", quantity=500, unit_cost="2.50"),
        POLineItem(sku="SKU-002", product_name="Glass Tumbler", quantity=200, unit_cost="1.25"),
    ]


@pytest.fixture
def make_po(workflow: PurchaseOrderWorkflow, sample_line_items):
    """Async factory creating a PO and walking it to the requested status."""
    path = [
        POStatus.AWAITING_INVOICE,
        POStatus.INVOICE_RECEIVED,
        POStatus.CONFIRMED,
        POStatus.PRODUCTION_COMPLETE,
        POStatus.READY_TO_SHIP,
        POStatus.RECEIVED,
    ]

    async def _make(status: POStatus = POStatus.DRAFT, supplier_id: str = "SUP-1") -> PurchaseOrder:
        po = await workflow.create(supplier_id, sample_line_items)
        if status == POStatus.DRAFT:
            return po
        po = await workflow.send_to_supplier(po.id)
        if status == POStatus.SENT:
            return po
        for step in path:
            po = await workflow.apply(po.id, step)
            if step == status:
                break
        return po

    return _make
