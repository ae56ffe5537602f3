"""Core domain entities."""

from batchflow.core.entities.allocation import Allocation
from batchflow.core.entities.attachment import Attachment, AttachmentOwner
from batchflow.core.entities.batch import (
    ARRIVAL_STAGES,
    Batch,
    BatchStage,
    StageHistoryEntry,
)
from batchflow.core.entities.ledger import (
    INBOUND_MOVEMENTS,
    OUTBOUND_MOVEMENTS,
    MovementType,
    StockLedgerEntry,
)
from batchflow.core.entities.purchase_order import (
    POLineItem,
    POStatus,
    PurchaseOrder,
    StatusHistoryEntry,
    Transition,
    TransitionKind,
)
from batchflow.core.entities.reconciliation import (
    Reconciliation,
    ReconciliationStatus,
)

__all__ = [
    # Batch entities
    "Batch",
    "BatchStage",
    "StageHistoryEntry",
    "ARRIVAL_STAGES",
    # Ledger entities
    "StockLedgerEntry",
    "MovementType",
    "INBOUND_MOVEMENTS",
    "OUTBOUND_MOVEMENTS",
    # Allocation entities
    "Allocation",
    # Purchase order entities
    "PurchaseOrder",
    "POLineItem",
    "POStatus",
    "StatusHistoryEntry",
    "Transition",
    "TransitionKind",
    # Reconciliation entities
    "Reconciliation",
    "ReconciliationStatus",
    # Attachment entities
    "Attachment",
    "AttachmentOwner",
]
