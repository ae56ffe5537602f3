"""Tests for batch entities."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from batchflow.core.entities import ARRIVAL_STAGES, Batch, BatchStage


class TestBatchStage:
    def test_values_in_pipeline_order(self):
        assert BatchStage.values() == [
            "ordered",
            "factory",
            "inspected",
            "ready_to_ship",
            "in_transit",
            "warehouse",
            "marketplace",
        ]

    def test_arrival_stages(self):
        assert ARRIVAL_STAGES == {BatchStage.WAREHOUSE, BatchStage.MARKETPLACE}


class TestBatch:
    def test_defaults(self):
        batch = Batch(sku="SKU-001", product_name="Mug")
        assert batch.quantity == 0
        assert batch.stage == BatchStage.ORDERED
        assert batch.active is True
        assert batch.lineage_of == []
        assert len(batch.id) == 32

    def test_unit_cost_normalized_to_four_places(self):
        batch = Batch(sku="S", product_name="P", unit_cost=2.5)
        assert batch.unit_cost == Decimal("2.5000")

    def test_negative_unit_cost_rejected(self):
        with pytest.raises(ValidationError):
            Batch(sku="S", product_name="P", unit_cost="-1")

    def test_negative_quantity_rejected(self):
        with pytest.raises(ValidationError):
            Batch(sku="S", product_name="P", quantity=-5)

    def test_recompute_total(self):
        batch = Batch(sku="S", product_name="P", quantity=400, unit_cost="2.50")
        assert batch.recompute_total() == Decimal("1000.00")
        assert batch.total_cost == Decimal("1000.00")

    def test_append_stage_keeps_history_in_step(self):
        batch = Batch(sku="S", product_name="P")
        batch.append_stage(BatchStage.ORDERED, "Batch created")
        entry = batch.append_stage(BatchStage.FACTORY, "Production started")

        assert batch.stage == BatchStage.FACTORY
        assert batch.stage_history[-1] is entry
        assert entry.batch_id == batch.id
        assert [h.stage for h in batch.stage_history] == [BatchStage.ORDERED, BatchStage.FACTORY]

    def test_display_name_falls_back_to_id(self):
        batch = Batch(sku="S", product_name="P")
        assert batch.display_name == batch.id
        batch.batch_number = "B-20260101-0001"
        assert batch.display_name == "B-20260101-0001"
