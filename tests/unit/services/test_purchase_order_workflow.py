"""Tests for the purchase order state machine."""

from datetime import date
from decimal import Decimal

import pytest

from batchflow.core.entities import POStatus, TransitionKind
from batchflow.core.exceptions import (
    IllegalTransitionError,
    PurchaseOrderNotFoundError,
    ValidationError,
)
from batchflow.core.services.purchase_order_workflow import (
    TRANSITIONS,
    allowed_transitions,
    batch_creation_allowed,
)


class TestTransitionTable:
    def test_every_status_has_an_entry(self):
        assert set(TRANSITIONS) == set(POStatus)

    def test_draft_edges(self):
        labels = [(t.target, t.label) for t in allowed_transitions("draft")]
        assert labels == [(POStatus.CANCELLED, "Cancel Order")]

    def test_cancel_not_offered_after_production(self):
        for status in (POStatus.PRODUCTION_COMPLETE, POStatus.READY_TO_SHIP, POStatus.RECEIVED):
            kinds = {t.kind for t in allowed_transitions(status)}
            assert TransitionKind.CANCEL not in kinds

    def test_unknown_status_has_no_edges(self):
        assert allowed_transitions("shipped") == []

    @pytest.mark.parametrize(
        "status, allowed",
        [
            ("draft", False),
            ("confirmed", False),
            ("cancelled", False),
            ("production_complete", True),
            ("ready_to_ship", True),
            ("partially_received", True),
            ("received", True),
            ("bogus", False),
        ],
    )
    def test_batch_creation_allowed(self, status, allowed):
        assert batch_creation_allowed(status) is allowed


class TestCreate:
    async def test_create_numbers_and_totals(self, workflow, sample_line_items):
        po = await workflow.create("SUP-1", sample_line_items, notes="Spring restock")

        assert po.po_number == f"PO-{date.today().year}-0001"
        assert po.status == POStatus.DRAFT
        assert po.total == Decimal("1500.00")
        assert po.total_units == 700
        assert [h.status for h in po.status_history] == [POStatus.DRAFT]

        second = await workflow.create("SUP-2", sample_line_items)
        assert second.po_number == f"PO-{date.today().year}-0002"

    async def test_numbering_follows_order_year(self, workflow, sample_line_items):
        po = await workflow.create("SUP-1", sample_line_items, order_date=date(2025, 12, 30))
        assert po.po_number == "PO-2025-0001"

    async def test_requires_line_items(self, workflow):
        with pytest.raises(ValidationError):
            await workflow.create("SUP-1", [])

    async def test_round_trip(self, workflow, sample_line_items):
        po = await workflow.create("SUP-1", sample_line_items, expected_date=date(2026, 12, 1))

        stored = await workflow.get(po.id)

        assert stored.po_number == po.po_number
        assert stored.expected_date == date(2026, 12, 1)
        assert [li.sku for li in stored.line_items] == ["SKU-001", "SKU-002"]
        assert stored.line_items[0].subtotal == Decimal("1250.00")
        assert stored.total == Decimal("1500.00")


class TestApply:
    async def test_skipping_steps_is_illegal(self, make_po, workflow):
        po = await make_po(POStatus.SENT)

        with pytest.raises(IllegalTransitionError) as exc_info:
            await workflow.apply(po.id, POStatus.RECEIVED)

        details = exc_info.value.details
        assert details["current_status"] == "sent"
        assert "awaiting_invoice" in details["allowed"]
        assert (await workflow.get(po.id)).status == POStatus.SENT

    async def test_forward_and_back(self, make_po, workflow):
        po = await make_po(POStatus.SENT)

        po = await workflow.apply(po.id, "awaiting_invoice", "Supplier acknowledged")
        assert po.status == POStatus.AWAITING_INVOICE

        po = await workflow.apply(po.id, POStatus.SENT)
        stored = await workflow.get(po.id)
        assert stored.status == POStatus.SENT
        assert [h.status for h in stored.status_history] == [
            POStatus.DRAFT,
            POStatus.SENT,
            POStatus.AWAITING_INVOICE,
            POStatus.SENT,
        ]
        assert stored.status_history[2].note == "Supplier acknowledged"

    async def test_full_path_to_received(self, make_po):
        po = await make_po(POStatus.RECEIVED)
        assert po.status == POStatus.RECEIVED
        assert len(po.status_history) == 8
        assert po.sent_to_supplier_at is not None

    async def test_cancel_and_reopen(self, make_po, workflow):
        po = await make_po(POStatus.CONFIRMED)

        po = await workflow.apply(po.id, POStatus.CANCELLED)
        assert po.status == POStatus.CANCELLED

        po = await workflow.apply(po.id, POStatus.DRAFT)
        assert po.status == POStatus.DRAFT

    async def test_cannot_cancel_after_production(self, make_po, workflow):
        po = await make_po(POStatus.PRODUCTION_COMPLETE)
        with pytest.raises(IllegalTransitionError):
            await workflow.apply(po.id, POStatus.CANCELLED)

    async def test_unknown_target(self, make_po, workflow):
        po = await make_po()
        with pytest.raises(IllegalTransitionError) as exc_info:
            await workflow.apply(po.id, "shipped")
        assert exc_info.value.details["target_status"] == "shipped"

    async def test_unknown_po(self, workflow):
        with pytest.raises(PurchaseOrderNotFoundError):
            await workflow.apply("missing", POStatus.SENT)


class TestSend:
    async def test_send_stamps_and_moves_to_sent(self, make_po, workflow):
        po = await make_po()

        sent = await workflow.send_to_supplier(po.id)

        assert sent.status == POStatus.SENT
        assert sent.sent_to_supplier_at is not None
        assert (await workflow.get(po.id)).sent_to_supplier_at is not None

    async def test_apply_cannot_send(self, make_po, workflow):
        po = await make_po()

        with pytest.raises(IllegalTransitionError) as exc_info:
            await workflow.apply(po.id, POStatus.SENT)
        assert exc_info.value.details["allowed"] == ["cancelled"]

        stored = await workflow.get(po.id)
        assert stored.status == POStatus.DRAFT
        assert stored.sent_to_supplier_at is None

    async def test_send_only_from_draft(self, make_po, workflow):
        po = await make_po(POStatus.SENT)
        with pytest.raises(IllegalTransitionError):
            await workflow.send_to_supplier(po.id)

    async def test_resend_while_awaiting_invoice(self, make_po, workflow):
        po = await make_po(POStatus.AWAITING_INVOICE)

        resent = await workflow.resend_to_supplier(po.id, "Reminder")

        assert resent.status == POStatus.AWAITING_INVOICE
        assert resent.sent_to_supplier_at is not None
        assert resent.status_history[-1].note == "Reminder"
        assert resent.status_history[-1].status == POStatus.AWAITING_INVOICE

    async def test_resend_rejected_elsewhere(self, make_po, workflow):
        po = await make_po(POStatus.SENT)
        with pytest.raises(IllegalTransitionError):
            await workflow.resend_to_supplier(po.id)


async def test_list_orders_by_status(make_po, workflow):
    await make_po()
    await make_po(POStatus.SENT)

    drafts = await workflow.list_orders(status=POStatus.DRAFT)
    everything = await workflow.list_orders()

    assert len(drafts) == 1
    assert len(everything) == 2
