"""Unit tests for the purchase order use cases."""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from batchflow.application.dto.requests import (
    CreatePurchaseOrderRequest,
    POLineItemRequest,
    POStatusChangeRequest,
    SendPurchaseOrderRequest,
)
from batchflow.application.use_cases.create_purchase_order import CreatePurchaseOrderUseCase
from batchflow.application.use_cases.update_po_status import UpdatePOStatusUseCase
from batchflow.core.entities import POLineItem, POStatus, PurchaseOrder


@pytest.fixture
def sample_po():
    po = PurchaseOrder(
        id="po-1",
        po_number="PO-2026-0001",
        supplier_id="SUP-1",
        line_items=[
            POLineItem(sku="SKU-001", product_name="Mug", quantity=500, unit_cost="2.50"),
        ],
    )
    po.append_status(POStatus.DRAFT, "Purchase order created")
    return po


@pytest.fixture
def mock_workflow(sample_po):
    workflow = AsyncMock()
    workflow.create = AsyncMock(return_value=sample_po)
    workflow.apply = AsyncMock(return_value=sample_po)
    workflow.get = AsyncMock(return_value=sample_po)
    workflow.send_to_supplier = AsyncMock(return_value=sample_po)
    workflow.resend_to_supplier = AsyncMock(return_value=sample_po)
    return workflow


async def test_create_builds_line_items(mock_workflow):
    use_case = CreatePurchaseOrderUseCase(workflow=mock_workflow)
    request = CreatePurchaseOrderRequest(
        supplier_id="SUP-1",
        line_items=[
            POLineItemRequest(
                sku="SKU-001", product_name="Mug", quantity=500, unit_cost=Decimal("2.50")
            )
        ],
    )

    po = await use_case.execute(request)

    lines = mock_workflow.create.call_args.kwargs["line_items"]
    assert lines[0].subtotal == Decimal("1250.00")
    response = use_case.to_response(po)
    assert response.total == Decimal("1250.00")
    assert response.total_units == 500
    assert response.batch_creation_allowed is False


async def test_status_change(mock_workflow):
    use_case = UpdatePOStatusUseCase(workflow=mock_workflow)
    await use_case.execute("po-1", POStatusChangeRequest(status="sent", note="Emailed"))
    mock_workflow.apply.assert_awaited_once_with("po-1", "sent", "Emailed")


async def test_send_and_resend(mock_workflow):
    use_case = UpdatePOStatusUseCase(workflow=mock_workflow)

    await use_case.send("po-1", SendPurchaseOrderRequest())
    await use_case.send("po-1", SendPurchaseOrderRequest(resend=True, note="Reminder"))

    mock_workflow.send_to_supplier.assert_awaited_once_with("po-1", None)
    mock_workflow.resend_to_supplier.assert_awaited_once_with("po-1", "Reminder")


async def test_transitions_lists_labels(mock_workflow):
    use_case = UpdatePOStatusUseCase(workflow=mock_workflow)

    response = await use_case.transitions("po-1")

    assert response.status == "draft"
    assert [t.target for t in response.transitions] == ["cancelled"]
    assert response.transitions[0].label == "Cancel Order"
