"""
Abstract interfaces for batch, ledger and purchase order persistence.

Stores are bound to a single unit of work, so every call made through
one `IUnitOfWork` shares its transaction.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from batchflow.core.entities import (
    Allocation,
    Attachment,
    AttachmentOwner,
    Batch,
    BatchStage,
    POStatus,
    PurchaseOrder,
    Reconciliation,
    StageHistoryEntry,
    StatusHistoryEntry,
    StockLedgerEntry,
)


class IBatchStore(ABC):
    """Interface for batch and stage history persistence."""

    @abstractmethod
    async def create(self, batch: Batch) -> Batch:
        """Insert a batch together with its seeded stage history."""
        pass

    @abstractmethod
    async def get(self, batch_id: str) -> Batch | None:
        """Get batch by ID, with stage history in order."""
        pass

    @abstractmethod
    async def update(self, batch: Batch) -> Batch:
        """Persist quantity, cost, stage, arrival and active flag."""
        pass

    @abstractmethod
    async def add_stage_entry(self, entry: StageHistoryEntry) -> StageHistoryEntry:
        """Append one stage history row. History is insert-only."""
        pass

    @abstractmethod
    async def list_batches(
        self,
        stage: BatchStage | None = None,
        active_only: bool = True,
        limit: int = 100,
        offset: int = 0,
    ) -> list[Batch]:
        """List batches, newest first."""
        pass

    @abstractmethod
    async def list_by_po(self, po_id: str) -> list[Batch]:
        """List every batch created against a purchase order."""
        pass

    @abstractmethod
    async def stage_summary(self) -> dict[str, dict[str, Any]]:
        """Per-stage count, units and value of active batches."""
        pass

    @abstractmethod
    async def last_number(self, prefix: str) -> str | None:
        """Highest batch number starting with prefix, if any."""
        pass


class ILedgerStore(ABC):
    """Interface for the append-only stock ledger."""

    @abstractmethod
    async def append(self, entry: StockLedgerEntry) -> StockLedgerEntry:
        """Append a ledger entry."""
        pass

    @abstractmethod
    async def entries(self, batch_id: str) -> list[StockLedgerEntry]:
        """Entries for a batch in chronological order."""
        pass

    @abstractmethod
    async def balance(self, batch_id: str) -> int:
        """Sum of signed entries for a batch."""
        pass

    @abstractmethod
    async def balance_by_location(self, batch_id: str) -> dict[str, int]:
        """Signed sums per location, omitting locations that net to zero."""
        pass


class IAllocationStore(ABC):
    """Interface for draft allocations."""

    @abstractmethod
    async def add(self, allocation: Allocation) -> Allocation:
        pass

    @abstractmethod
    async def get(self, allocation_id: str) -> Allocation | None:
        pass

    @abstractmethod
    async def delete(self, allocation_id: str) -> bool:
        """Remove an allocation. Returns False if it did not exist."""
        pass

    @abstractmethod
    async def total_open(self, batch_id: str) -> int:
        """Sum of open allocated quantity for a batch."""
        pass

    @abstractmethod
    async def list_for_batch(self, batch_id: str) -> list[Allocation]:
        pass

    @abstractmethod
    async def list_for_transfer(self, transfer_draft_id: str) -> list[Allocation]:
        pass


class IPurchaseOrderStore(ABC):
    """Interface for purchase orders, line items and status history."""

    @abstractmethod
    async def create(self, po: PurchaseOrder) -> PurchaseOrder:
        """Insert a PO with its line items and seeded history."""
        pass

    @abstractmethod
    async def get(self, po_id: str) -> PurchaseOrder | None:
        pass

    @abstractmethod
    async def update(self, po: PurchaseOrder) -> PurchaseOrder:
        """Persist status, sent timestamp and notes."""
        pass

    @abstractmethod
    async def add_status_entry(self, entry: StatusHistoryEntry) -> StatusHistoryEntry:
        """Append one status history row. History is insert-only."""
        pass

    @abstractmethod
    async def list_orders(
        self,
        status: POStatus | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[PurchaseOrder]:
        pass

    @abstractmethod
    async def last_number(self, prefix: str) -> str | None:
        """Highest PO number starting with prefix, if any."""
        pass


class IReconciliationStore(ABC):
    """Interface for persisted reconciliation records."""

    @abstractmethod
    async def add(self, reconciliation: Reconciliation) -> Reconciliation:
        pass

    @abstractmethod
    async def get(self, reconciliation_id: str) -> Reconciliation | None:
        pass

    @abstractmethod
    async def mark_resolved(self, reconciliation: Reconciliation) -> Reconciliation:
        """Persist resolution flag, timestamp and adjustment entry."""
        pass

    @abstractmethod
    async def list_for_batch(self, batch_id: str) -> list[Reconciliation]:
        pass

    @abstractmethod
    async def open_discrepancies(self, batch_id: str) -> list[Reconciliation]:
        """Unresolved records with status discrepancy."""
        pass


class IAttachmentStore(ABC):
    """Interface for attachment metadata."""

    @abstractmethod
    async def add(self, attachment: Attachment) -> Attachment:
        pass

    @abstractmethod
    async def get(self, attachment_id: str) -> Attachment | None:
        pass

    @abstractmethod
    async def delete(self, attachment_id: str) -> bool:
        pass

    @abstractmethod
    async def list_for_owner(self, owner_type: AttachmentOwner, owner_id: str) -> list[Attachment]:
        pass


class IUnitOfWork(ABC):
    """
    One database transaction and the stores bound to it.

    Usage:
        async with uow_factory() as uow:
            batch = await uow.batches.get(batch_id)
            ...

    Leaving the block normally commits; an exception rolls back.
    """

    batches: IBatchStore
    ledger: ILedgerStore
    allocations: IAllocationStore
    purchase_orders: IPurchaseOrderStore
    reconciliations: IReconciliationStore
    attachments: IAttachmentStore

    @abstractmethod
    async def __aenter__(self) -> "IUnitOfWork":
        pass

    @abstractmethod
    async def __aexit__(self, exc_type, exc, tb) -> None:
        pass


# Called with write=False for read-only work
UnitOfWorkFactory = Callable[..., IUnitOfWork]
