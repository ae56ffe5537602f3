"""Change Stage Use Case: move a batch along the pipeline."""

from dataclasses import dataclass

from batchflow.application.dto.requests import StageChangeRequest
from batchflow.application.dto.responses import BatchResponse
from batchflow.core.entities import Batch, BatchStage
from batchflow.core.services import StageTransitionEngine


@dataclass
class ChangeStageResult:
    batch: Batch
    previous_stage: BatchStage


class ChangeStageUseCase:
    """Record a stage transition for a batch."""

    def __init__(self, engine: StageTransitionEngine | None = None):
        self._engine = engine

    def _get_engine(self) -> StageTransitionEngine:
        if self._engine is None:
            from batchflow.application.services import get_stage_transition_engine

            self._engine = get_stage_transition_engine()
        return self._engine

    async def execute(self, batch_id: str, request: StageChangeRequest) -> ChangeStageResult:
        batch = await self._get_engine().transition(batch_id, request.stage, request.note)
        # History holds at least the seeded row plus the one just written
        previous = (
            batch.stage_history[-2].stage if len(batch.stage_history) > 1 else batch.stage
        )
        return ChangeStageResult(batch=batch, previous_stage=previous)

    def to_response(self, result: ChangeStageResult) -> BatchResponse:
        return BatchResponse.from_entity(result.batch)
