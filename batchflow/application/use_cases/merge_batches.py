"""Merge Batches Use Case: combine same-SKU batches into one."""

from dataclasses import dataclass, field

from batchflow.application.dto.requests import MergeBatchesRequest
from batchflow.application.dto.responses import BatchResponse, MergeBatchesResponse
from batchflow.core.entities import Batch
from batchflow.core.services import BatchRegistry, SplitMergeEngine


@dataclass
class MergeBatchesResult:
    """The merged batch and the retired sources."""

    merged: Batch
    sources: list[Batch] = field(default_factory=list)


class MergeBatchesUseCase:
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

    async def execute(self, request: MergeBatchesRequest) -> MergeBatchesResult:
        """Execute merge use case."""
        merged_id = await self._get_engine().merge(request.batch_ids, request.note)

        registry = self._get_registry()
        merged = await registry.get(merged_id)
        sources = [await registry.get(batch_id) for batch_id in merged.lineage_of]
        return MergeBatchesResult(merged=merged, sources=sources)

    def to_response(self, result: MergeBatchesResult) -> MergeBatchesResponse:
        return MergeBatchesResponse(
            merged=BatchResponse.from_entity(result.merged),
            sources=[BatchResponse.from_entity(b) for b in result.sources],
        )
