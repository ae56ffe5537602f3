"""Purchase order domain entities."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from batchflow.core.entities.common import new_id, utc_now
from batchflow.core.money import ZERO, line_total, to_unit_cost


class POStatus(str, Enum):
    """Purchase order workflow statuses."""

    DRAFT = "draft"
    SENT = "sent"
    AWAITING_INVOICE = "awaiting_invoice"
    INVOICE_RECEIVED = "invoice_received"
    CONFIRMED = "confirmed"
    PRODUCTION_COMPLETE = "production_complete"
    READY_TO_SHIP = "ready_to_ship"
    PARTIALLY_RECEIVED = "partially_received"
    RECEIVED = "received"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]


class TransitionKind(str, Enum):
    FORWARD = "forward"
    BACK = "back"
    CANCEL = "cancel"


class Transition(BaseModel):
    """A declared edge out of a PO status."""

    target: POStatus
    kind: TransitionKind
    label: str


class POLineItem(BaseModel):
    """A single ordered SKU on a purchase order."""

    id: int | None = None
    po_id: str | None = None
    sku: str
    product_name: str
    quantity: int = Field(gt=0)
    unit_cost: Decimal = ZERO
    subtotal: Decimal = ZERO  # round(quantity * unit_cost)

    @field_validator("unit_cost", mode="before")
    @classmethod
    def normalize_unit_cost(cls, v):
        cost = to_unit_cost(v)
        if cost < 0:
            raise ValueError("unit_cost must be >= 0")
        return cost

    @model_validator(mode="after")
    def compute_subtotal(self) -> "POLineItem":
        self.subtotal = line_total(self.quantity, self.unit_cost)
        return self


class StatusHistoryEntry(BaseModel):
    """Append-only record of a PO entering a status."""

    id: int | None = None
    po_id: str | None = None
    status: POStatus
    timestamp: datetime = Field(default_factory=utc_now)
    note: str | None = None


class PurchaseOrder(BaseModel):
    """Supplier purchase order with its status workflow history."""

    id: str = Field(default_factory=new_id)
    po_number: str | None = None
    supplier_id: str
    status: POStatus = POStatus.DRAFT
    status_history: list[StatusHistoryEntry] = Field(default_factory=list)
    line_items: list[POLineItem] = Field(default_factory=list)
    subtotal: Decimal = ZERO
    total: Decimal = ZERO
    order_date: date = Field(default_factory=date.today)
    expected_date: date | None = None
    notes: str | None = None
    sent_to_supplier_at: datetime | None = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def compute_totals(self) -> "PurchaseOrder":
        """Compute subtotal and total from line items."""
        self.subtotal = sum((item.subtotal for item in self.line_items), ZERO)
        # No tax or shipping lines: total mirrors subtotal
        self.total = self.subtotal
        return self

    def append_status(self, status: POStatus, note: str | None = None) -> StatusHistoryEntry:
        entry = StatusHistoryEntry(po_id=self.id, status=status, note=note)
        self.status_history.append(entry)
        self.status = status
        self.updated_at = entry.timestamp
        return entry

    @property
    def total_units(self) -> int:
        return sum(item.quantity for item in self.line_items)
