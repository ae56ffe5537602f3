"""Stage transition engine."""

from datetime import date

from batchflow.config import get_logger
from batchflow.core.entities import ARRIVAL_STAGES, Batch, BatchStage
from batchflow.core.entities.common import utc_now
from batchflow.core.exceptions import InactiveBatchError, UnknownStageError
from batchflow.core.interfaces import UnitOfWorkFactory
from batchflow.core.services.locking import KeyedLockRegistry, batch_key
from batchflow.core.services.stock_ledger import require_batch

logger = get_logger(__name__)


def parse_stage(value: BatchStage | str) -> BatchStage:
    try:
        return BatchStage(value)
    except ValueError:
        raise UnknownStageError(str(value), BatchStage.values()) from None


class StageTransitionEngine:
    """
    Moves batches between pipeline stages.

    Any known stage may follow any other so that mistakes can be
    corrected; every call, including a same-stage one, appends history.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory, locks: KeyedLockRegistry):
        self._uow_factory = uow_factory
        self._locks = locks

    async def transition(
        self, batch_id: str, target_stage: BatchStage | str, note: str | None = None
    ) -> Batch:
        stage = parse_stage(target_stage)
        logger.info("stage_transition_started", batch_id=batch_id, target_stage=stage.value)

        async with self._locks.hold(batch_key(batch_id)):
            async with self._uow_factory() as uow:
                batch = await require_batch(uow, batch_id)
                if not batch.active:
                    raise InactiveBatchError(batch_id, "change stage")

                previous = batch.stage
                entry = batch.append_stage(stage, note)
                if stage in ARRIVAL_STAGES and batch.actual_arrival is None:
                    batch.actual_arrival = date.today()
                batch.updated_at = utc_now()

                await uow.batches.add_stage_entry(entry)
                await uow.batches.update(batch)

        logger.info(
            "stage_transition_complete",
            batch_id=batch_id,
            from_stage=previous.value,
            to_stage=stage.value,
        )
        return batch
