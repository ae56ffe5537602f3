"""SQLite storage implementations."""

from batchflow.infrastructure.storage.sqlite.allocation_store import SQLiteAllocationStore
from batchflow.infrastructure.storage.sqlite.attachment_store import SQLiteAttachmentStore
from batchflow.infrastructure.storage.sqlite.batch_store import SQLiteBatchStore
from batchflow.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_connection,
    get_pool,
)
from batchflow.infrastructure.storage.sqlite.ledger_store import SQLiteLedgerStore
from batchflow.infrastructure.storage.sqlite.purchase_order_store import (
    SQLitePurchaseOrderStore,
)
from batchflow.infrastructure.storage.sqlite.reconciliation_store import (
    SQLiteReconciliationStore,
)
from batchflow.infrastructure.storage.sqlite.unit_of_work import (
    SQLiteUnitOfWork,
    make_uow_factory,
)

__all__ = [
    # Connection
    "ConnectionPool",
    "get_pool",
    "close_pool",
    "get_connection",
    # Unit of work
    "SQLiteUnitOfWork",
    "make_uow_factory",
    # Store classes
    "SQLiteBatchStore",
    "SQLiteLedgerStore",
    "SQLiteAllocationStore",
    "SQLitePurchaseOrderStore",
    "SQLiteReconciliationStore",
    "SQLiteAttachmentStore",
]
