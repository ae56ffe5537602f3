"""Split Batch Use Case: carve units off a batch into a new one."""

from dataclasses import dataclass

from batchflow.application.dto.requests import SplitBatchRequest
from batchflow.application.dto.responses import BatchResponse, SplitBatchResponse
from batchflow.config import get_logger
from batchflow.core.entities import Batch
from batchflow.core.services import BatchRegistry, SplitMergeEngine

logger = get_logger(__name__)


@dataclass
class SplitBatchResult:
    """Both sides of a split, re-read after commit."""

    source: Batch
    new_batch: Batch


class SplitBatchUseCase:
    """Split a batch and return both resulting batches."""

    def __init__(
        self,
        engine: SplitMergeEngine | None = None,
        registry: BatchRegistry | None = None,
    ):
        self._engine = engine
        self._registry = registry

    def _get_engine(self) -> SplitMergeEngine:
        if self._engine is None:
            from batchflow.application.services import get_split_merge_engine

            self._engine = get_split_merge_engine()
        return self._engine

    def _get_registry(self) -> BatchRegistry:
        if self._registry is None:
            from batchflow.application.services import get_batch_registry

            self._registry = get_batch_registry()
        return self._registry

    async def execute(self, batch_id: str, request: SplitBatchRequest) -> SplitBatchResult:
        """Execute split batch use case."""
        new_id = await self._get_engine().split(batch_id, request.quantity, request.note)

        registry = self._get_registry()
        source = await registry.get(batch_id)
        new_batch = await registry.get(new_id)

        logger.debug(
            "split_batch_loaded",
            source_id=source.id,
            new_batch_id=new_batch.id,
        )
        return SplitBatchResult(source=source, new_batch=new_batch)

    def to_response(self, result: SplitBatchResult) -> SplitBatchResponse:
        return SplitBatchResponse(
            source=BatchResponse.from_entity(result.source),
            new_batch=BatchResponse.from_entity(result.new_batch),
        )
