"""API route modules."""

from batchflow.api.routes.allocations import router as allocations_router
from batchflow.api.routes.attachments import router as attachments_router
from batchflow.api.routes.batches import router as batches_router
from batchflow.api.routes.health import router as health_router
from batchflow.api.routes.purchase_orders import router as purchase_orders_router
from batchflow.api.routes.reconciliations import router as reconciliations_router

__all__ = [
    "health_router",
    "batches_router",
    "allocations_router",
    "purchase_orders_router",
    "reconciliations_router",
    "attachments_router",
]
