"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field


# Batches


class CreateBatchRequest(BaseModel):
    """Request to receive a new batch."""

    sku: str = Field(..., min_length=1, description="Catalog SKU snapshot")
    product_name: str = Field(..., min_length=1, description="Product name snapshot")
    quantity: int = Field(..., ge=0, description="Units received into the batch")
    unit_cost: Decimal = Field(..., ge=0, description="Cost per unit", examples=["2.50"])
    stage: str = Field(
        default="ordered",
        description="Initial pipeline stage",
        examples=["ordered", "factory"],
    )
    po_id: str | None = Field(default=None, description="Purchase order the batch belongs to")
    supplier_id: str | None = Field(
        default=None, description="Supplier (defaults to the PO's supplier)"
    )
    location_id: str | None = Field(
        default=None, description="Location of the opening receipt (defaults to factory)"
    )
    ordered_date: date | None = Field(default=None, description="Defaults to today")
    expected_arrival: date | None = None
    notes: str | None = None


class StageChangeRequest(BaseModel):
    """Request to move a batch to a pipeline stage."""

    stage: str = Field(..., description="Target stage", examples=["in_transit", "warehouse"])
    note: str | None = Field(default=None, description="Note stored in the stage history")


class SplitBatchRequest(BaseModel):
    """Request to carve units off a batch into a new batch."""

    quantity: int = Field(..., description="Units moved into the new batch")
    note: str | None = None


class MergeBatchesRequest(BaseModel):
    """Request to combine batches into one."""

    batch_ids: list[str] = Field(..., min_length=2, description="Batches to merge")
    note: str | None = None


class AdjustStockRequest(BaseModel):
    """Request to record a manual ledger movement."""

    quantity: int = Field(..., description="Signed quantity (non-zero)")
    location_id: str = Field(..., min_length=1, description="Location the units move at")
    reason: str = Field(..., min_length=1, description="Why the stock changed")
    movement_type: str = Field(
        default="adjustment",
        description="Movement type",
        examples=["adjustment", "transfer_in"],
    )
    reference: str | None = Field(default=None, description="External reference")


class AttachmentRequest(BaseModel):
    """Attachment metadata for a batch or purchase order."""

    name: str = Field(..., min_length=1, description="File or document name")
    kind: str = Field(default="document", examples=["document", "photo", "invoice"])


# Allocations


class AllocateRequest(BaseModel):
    """Request to reserve batch quantity for a transfer draft."""

    batch_id: str = Field(..., description="Batch to reserve from")
    transfer_draft_id: str = Field(..., description="Transfer draft the units are held for")
    quantity: int = Field(..., description="Units to reserve")
    location_id: str | None = Field(
        default=None, description="Location the units will leave from"
    )


class CommitAllocationRequest(BaseModel):
    """Request to turn a reservation into a ledger movement."""

    location_id: str | None = Field(
        default=None, description="Override the location units leave from"
    )


# Purchase orders


class POLineItemRequest(BaseModel):
    """One line on a new purchase order."""

    sku: str = Field(..., min_length=1)
    product_name: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    unit_cost: Decimal = Field(..., ge=0)


class CreatePurchaseOrderRequest(BaseModel):
    """Request to create a draft purchase order."""

    supplier_id: str = Field(..., min_length=1, description="Supplier ID")
    line_items: list[POLineItemRequest] = Field(..., min_length=1)
    order_date: date | None = Field(default=None, description="Defaults to today")
    expected_date: date | None = None
    notes: str | None = None


class POStatusChangeRequest(BaseModel):
    """Request to move a PO along a workflow edge."""

    status: str = Field(..., description="Target status", examples=["awaiting_invoice"])
    note: str | None = None


class SendPurchaseOrderRequest(BaseModel):
    """Request to mark a PO as sent (or resent) to its supplier."""

    note: str | None = None
    resend: bool = Field(
        default=False, description="Re-stamp the send time while awaiting the invoice"
    )


# Reconciliations


class ReconcileRequest(BaseModel):
    """Marketplace-reported receipt quantity for a batch."""

    batch_id: str
    reported_quantity: int = Field(..., ge=0, description="Units the marketplace received")
    expected_quantity: int | None = Field(
        default=None, ge=0, description="Defaults to the batch's current quantity"
    )
    notes: str | None = None


class ResolveReconciliationRequest(BaseModel):
    """Request to close a reconciliation, booking any discrepancy."""

    location_id: str = Field(..., min_length=1, description="Location the adjustment lands at")
    reason: str | None = None
