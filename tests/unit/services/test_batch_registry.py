"""Tests for batch creation, queries and attachments."""

from datetime import date
from decimal import Decimal

import pytest

from batchflow.core.entities import AttachmentOwner, BatchStage, MovementType, POStatus
from batchflow.core.exceptions import (
    AttachmentNotFoundError,
    BatchCreationNotAllowedError,
    BatchNotFoundError,
    PurchaseOrderNotFoundError,
    UnknownStageError,
    ValidationError,
)


class TestCreateBatch:
    async def test_create_with_receipt(self, make_batch, ledger):
        batch = await make_batch(quantity=1000, unit_cost="2.50", notes="First run")

        assert batch.batch_number == f"B-{date.today():%Y%m%d}-0001"
        assert batch.stage == BatchStage.ORDERED
        assert batch.active is True
        assert batch.total_cost == Decimal("2500.00")
        assert batch.ordered_date == date.today()

        entries = await ledger.entries(batch.id)
        assert [(e.movement_type, e.quantity) for e in entries] == [(MovementType.RECEIPT, 1000)]

    async def test_numbers_increment(self, make_batch):
        first = await make_batch()
        second = await make_batch()
        assert first.batch_number.endswith("-0001")
        assert second.batch_number.endswith("-0002")

    async def test_zero_quantity_has_no_receipt(self, make_batch, ledger):
        batch = await make_batch(quantity=0)
        assert await ledger.entries(batch.id) == []
        assert batch.total_cost == Decimal("0.00")

    async def test_negative_quantity(self, make_batch):
        with pytest.raises(ValidationError):
            await make_batch(quantity=-1)

    async def test_unknown_initial_stage(self, make_batch):
        with pytest.raises(UnknownStageError):
            await make_batch(stage="docked")

    async def test_po_must_be_past_production(self, make_po, make_batch):
        po = await make_po(POStatus.CONFIRMED)
        with pytest.raises(BatchCreationNotAllowedError) as exc_info:
            await make_batch(po_id=po.id)
        assert exc_info.value.details["status"] == "confirmed"

    async def test_po_supplies_supplier_default(self, make_po, make_batch, registry):
        po = await make_po(POStatus.PRODUCTION_COMPLETE, supplier_id="SUP-9")

        batch = await make_batch(po_id=po.id)
        other = await make_batch(po_id=po.id, supplier_id="SUP-OVERRIDE")

        assert batch.supplier_id == "SUP-9"
        assert other.supplier_id == "SUP-OVERRIDE"
        assert {b.id for b in await registry.list_by_po(po.id)} == {batch.id, other.id}

    async def test_unknown_po(self, make_batch):
        with pytest.raises(PurchaseOrderNotFoundError):
            await make_batch(po_id="missing")


class TestQueries:
    async def test_get_unknown(self, registry):
        with pytest.raises(BatchNotFoundError):
            await registry.get("missing")

    async def test_list_filters(self, make_batch, registry, split_merge):
        a = await make_batch(quantity=10)
        b = await make_batch(quantity=10)
        await make_batch(quantity=10, stage=BatchStage.FACTORY)
        merged_id = await split_merge.merge([a.id, b.id])

        ordered = await registry.list_batches(stage="ordered")
        assert [x.id for x in ordered] == [merged_id]

        everything = await registry.list_batches(active_only=False)
        assert len(everything) == 4

    async def test_stage_summary_covers_every_stage(self, make_batch, registry):
        await make_batch(quantity=100, unit_cost="2.00")
        await make_batch(quantity=50, unit_cost="1.00")
        await make_batch(quantity=10, unit_cost="1.00", stage=BatchStage.WAREHOUSE)

        summary = await registry.stage_summary()

        assert list(summary) == BatchStage.values()
        assert summary["ordered"]["count"] == 2
        assert summary["ordered"]["units"] == 150
        assert Decimal(summary["ordered"]["value"]) == Decimal("250.00")
        assert summary["warehouse"]["count"] == 1
        assert summary["marketplace"]["count"] == 0


class TestAttachments:
    async def test_batch_attachments(self, make_batch, registry):
        batch = await make_batch()

        attachment = await registry.add_attachment("batch", batch.id, "qc-photo.jpg", "photo")
        listed = await registry.list_attachments(AttachmentOwner.BATCH, batch.id)

        assert [a.id for a in listed] == [attachment.id]
        assert listed[0].kind == "photo"

        await registry.remove_attachment(attachment.id)
        assert await registry.list_attachments("batch", batch.id) == []

    async def test_po_attachments(self, make_po, registry):
        po = await make_po()
        await registry.add_attachment("purchase_order", po.id, "invoice.pdf", "invoice")
        assert len(await registry.list_attachments("purchase_order", po.id)) == 1

    async def test_unknown_owner(self, registry):
        with pytest.raises(BatchNotFoundError):
            await registry.add_attachment("batch", "missing", "x.pdf")
        with pytest.raises(PurchaseOrderNotFoundError):
            await registry.add_attachment("purchase_order", "missing", "x.pdf")

    async def test_remove_unknown(self, registry):
        with pytest.raises(AttachmentNotFoundError):
            await registry.remove_attachment("missing")
