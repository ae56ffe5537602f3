"""Core interfaces (ports) for dependency injection."""

from batchflow.core.interfaces.storage import (
    IAllocationStore,
    IAttachmentStore,
    IBatchStore,
    ILedgerStore,
    IPurchaseOrderStore,
    IReconciliationStore,
    IUnitOfWork,
    UnitOfWorkFactory,
)

__all__ = [
    "IBatchStore",
    "ILedgerStore",
    "IAllocationStore",
    "IPurchaseOrderStore",
    "IReconciliationStore",
    "IAttachmentStore",
    "IUnitOfWork",
    "UnitOfWorkFactory",
]
