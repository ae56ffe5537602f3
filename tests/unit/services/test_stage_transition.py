"""Tests for batch stage transitions."""

from datetime import date

import pytest

from batchflow.core.entities import BatchStage
from batchflow.core.exceptions import (
    BatchNotFoundError,
    InactiveBatchError,
    UnknownStageError,
)


async def test_transition_appends_history(make_batch, stages, registry):
    batch = await make_batch()

    updated = await stages.transition(batch.id, "factory", "Production started")

    assert updated.stage == BatchStage.FACTORY
    stored = await registry.get(batch.id)
    assert stored.stage == BatchStage.FACTORY
    assert [h.stage for h in stored.stage_history] == [BatchStage.ORDERED, BatchStage.FACTORY]
    assert stored.stage_history[-1].note == "Production started"


async def test_backwards_and_repeat_transitions_are_recorded(make_batch, stages, registry):
    batch = await make_batch()
    await stages.transition(batch.id, BatchStage.IN_TRANSIT)
    await stages.transition(batch.id, BatchStage.FACTORY, "Returned for rework")
    await stages.transition(batch.id, BatchStage.FACTORY)

    stored = await registry.get(batch.id)
    assert stored.stage == BatchStage.FACTORY
    assert len(stored.stage_history) == 4


async def test_arrival_stage_sets_actual_arrival(make_batch, stages):
    batch = await make_batch()
    assert batch.actual_arrival is None

    in_transit = await stages.transition(batch.id, BatchStage.IN_TRANSIT)
    assert in_transit.actual_arrival is None

    arrived = await stages.transition(batch.id, BatchStage.WAREHOUSE)
    assert arrived.actual_arrival == date.today()


async def test_unknown_stage(make_batch, stages, registry):
    batch = await make_batch()

    with pytest.raises(UnknownStageError) as exc_info:
        await stages.transition(batch.id, "shipped")

    assert "marketplace" in exc_info.value.details["allowed"]
    assert len((await registry.get(batch.id)).stage_history) == 1


async def test_unknown_batch(stages):
    with pytest.raises(BatchNotFoundError):
        await stages.transition("missing", BatchStage.FACTORY)


async def test_inactive_batch(make_batch, stages, split_merge):
    a = await make_batch(quantity=5)
    b = await make_batch(quantity=5)
    await split_merge.merge([a.id, b.id])

    with pytest.raises(InactiveBatchError):
        await stages.transition(a.id, BatchStage.FACTORY)
