"""Create Batch Use Case: receive a batch, optionally against a PO."""

from dataclasses import dataclass

from batchflow.application.dto.requests import CreateBatchRequest
from batchflow.application.dto.responses import BatchResponse
from batchflow.config import get_logger
from batchflow.core.entities import Batch
from batchflow.core.services import BatchRegistry

logger = get_logger(__name__)


@dataclass
class CreateBatchResult:
    """Result of receiving a batch."""

    batch: Batch


class CreateBatchUseCase:
    """Receive a new batch with its opening receipt entry."""

    def __init__(self, registry: BatchRegistry | None = None):
        self._registry = registry

    def _get_registry(self) -> BatchRegistry:
        if self._registry is None:
            from batchflow.application.services import get_batch_registry

            self._registry = get_batch_registry()
        return self._registry

    async def execute(self, request: CreateBatchRequest) -> CreateBatchResult:
        """Execute create batch use case."""
        batch = await self._get_registry().create_batch(
            sku=request.sku,
            product_name=request.product_name,
            quantity=request.quantity,
            unit_cost=request.unit_cost,
            stage=request.stage,
            po_id=request.po_id,
            supplier_id=request.supplier_id,
            location_id=request.location_id,
            ordered_date=request.ordered_date,
            expected_arrival=request.expected_arrival,
            notes=request.notes,
        )
        return CreateBatchResult(batch=batch)

    def to_response(self, result: CreateBatchResult) -> BatchResponse:
        """Convert result to API response."""
        return BatchResponse.from_entity(result.batch)
