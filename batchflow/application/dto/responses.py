"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from batchflow.core.entities import (
    Allocation,
    Attachment,
    Batch,
    PurchaseOrder,
    Reconciliation,
    StockLedgerEntry,
    Transition,
)


class StageHistoryResponse(BaseModel):
    """One stage history row."""

    stage: str
    timestamp: datetime
    note: str | None = None


class BatchResponse(BaseModel):
    """Batch response DTO."""

    id: str
    batch_number: str | None = None
    sku: str
    product_name: str
    quantity: int = Field(..., description="Nominal on-hand units")
    unit_cost: Decimal
    total_cost: Decimal
    stage: str
    stage_history: list[StageHistoryResponse] = Field(default_factory=list)
    po_id: str | None = None
    supplier_id: str | None = None
    ordered_date: date
    expected_arrival: date | None = None
    actual_arrival: date | None = None
    notes: str | None = None
    lineage_of: list[str] = Field(default_factory=list)
    active: bool = True
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, batch: Batch) -> "BatchResponse":
        return cls(
            **batch.model_dump(exclude={"stage", "stage_history"}),
            stage=batch.stage.value,
            stage_history=[
                StageHistoryResponse(stage=h.stage.value, timestamp=h.timestamp, note=h.note)
                for h in batch.stage_history
            ],
        )


class BatchListResponse(BaseModel):
    """Paginated batch list."""

    batches: list[BatchResponse]
    total: int
    limit: int
    offset: int


class StageSummaryItemResponse(BaseModel):
    """Active batch totals for one stage."""

    stage: str
    count: int
    units: int
    value: Decimal


class StageSummaryResponse(BaseModel):
    """Per-stage totals, in pipeline order."""

    stages: list[StageSummaryItemResponse]


class SplitBatchResponse(BaseModel):
    """Response for a split: the shrunk source and the new batch."""

    source: BatchResponse
    new_batch: BatchResponse


class MergeBatchesResponse(BaseModel):
    """Response for a merge: the merged batch and the retired sources."""

    merged: BatchResponse
    sources: list[BatchResponse]


class LedgerEntryResponse(BaseModel):
    """Stock ledger entry DTO."""

    id: str
    batch_id: str
    location_id: str
    movement_type: str
    quantity: int
    reason: str
    reference: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, entry: StockLedgerEntry) -> "LedgerEntryResponse":
        return cls(
            **entry.model_dump(exclude={"movement_type"}),
            movement_type=entry.movement_type.value,
        )


class AdjustStockResponse(BaseModel):
    """Response for a recorded movement."""

    entries: list[LedgerEntryResponse]
    batch: BatchResponse


class BalanceResponse(BaseModel):
    """Ledger-derived balance of a batch."""

    batch_id: str
    balance: int
    available: int = Field(..., description="Balance minus open allocations")
    by_location: dict[str, int] = Field(default_factory=dict)


class AllocationResponse(BaseModel):
    """Open allocation DTO."""

    id: str
    batch_id: str
    transfer_draft_id: str
    allocated_quantity: int
    location_id: str | None = None
    created_at: datetime

    @classmethod
    def from_entity(cls, allocation: Allocation) -> "AllocationResponse":
        return cls(**allocation.model_dump())


class AllocateResponse(BaseModel):
    """Response for a new allocation."""

    allocation: AllocationResponse
    available: int


class CommitAllocationResponse(BaseModel):
    """Response for a committed allocation."""

    entries: list[LedgerEntryResponse]
    batch_quantity: int
    available: int


class POLineItemResponse(BaseModel):
    sku: str
    product_name: str
    quantity: int
    unit_cost: Decimal
    subtotal: Decimal


class StatusHistoryResponse(BaseModel):
    status: str
    timestamp: datetime
    note: str | None = None


class PurchaseOrderResponse(BaseModel):
    """Purchase order DTO."""

    id: str
    po_number: str | None = None
    supplier_id: str
    status: str
    status_history: list[StatusHistoryResponse] = Field(default_factory=list)
    line_items: list[POLineItemResponse] = Field(default_factory=list)
    subtotal: Decimal
    total: Decimal
    total_units: int
    order_date: date
    expected_date: date | None = None
    notes: str | None = None
    sent_to_supplier_at: datetime | None = None
    batch_creation_allowed: bool = False
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(
        cls, po: PurchaseOrder, batch_creation_allowed: bool = False
    ) -> "PurchaseOrderResponse":
        return cls(
            id=po.id,
            po_number=po.po_number,
            supplier_id=po.supplier_id,
            status=po.status.value,
            status_history=[
                StatusHistoryResponse(status=h.status.value, timestamp=h.timestamp, note=h.note)
                for h in po.status_history
            ],
            line_items=[
                POLineItemResponse(
                    sku=item.sku,
                    product_name=item.product_name,
                    quantity=item.quantity,
                    unit_cost=item.unit_cost,
                    subtotal=item.subtotal,
                )
                for item in po.line_items
            ],
            subtotal=po.subtotal,
            total=po.total,
            total_units=po.total_units,
            order_date=po.order_date,
            expected_date=po.expected_date,
            notes=po.notes,
            sent_to_supplier_at=po.sent_to_supplier_at,
            batch_creation_allowed=batch_creation_allowed,
            created_at=po.created_at,
            updated_at=po.updated_at,
        )


class PurchaseOrderListResponse(BaseModel):
    purchase_orders: list[PurchaseOrderResponse]
    total: int


class TransitionResponse(BaseModel):
    """A legal move out of the PO's current status."""

    target: str
    kind: str = Field(..., description="forward, back or cancel")
    label: str

    @classmethod
    def from_entity(cls, transition: Transition) -> "TransitionResponse":
        return cls(
            target=transition.target.value,
            kind=transition.kind.value,
            label=transition.label,
        )


class TransitionListResponse(BaseModel):
    po_id: str
    status: str
    transitions: list[TransitionResponse]


class ReconciliationResponse(BaseModel):
    """Reconciliation record DTO."""

    id: str
    batch_id: str
    sku: str
    expected_quantity: int
    reported_quantity: int
    discrepancy: int = Field(..., description="reported - expected")
    status: str
    notes: str | None = None
    reconciled_at: datetime
    resolved: bool
    resolved_at: datetime | None = None
    adjustment_entry_id: str | None = None

    @classmethod
    def from_entity(cls, record: Reconciliation) -> "ReconciliationResponse":
        return cls(**record.model_dump(exclude={"status"}), status=record.status.value)


class AttachmentResponse(BaseModel):
    id: str
    owner_type: str
    owner_id: str
    name: str
    kind: str
    created_at: datetime

    @classmethod
    def from_entity(cls, attachment: Attachment) -> "AttachmentResponse":
        return cls(
            **attachment.model_dump(exclude={"owner_type"}),
            owner_type=attachment.owner_type.value,
        )


class ProviderHealthResponse(BaseModel):
    """Dependency health status."""

    name: str
    available: bool
    latency_ms: float | None = None
    schema_version: str | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str = "1.0.0"
    uptime_seconds: float
    database: ProviderHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. BATCH_NOT_FOUND)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
