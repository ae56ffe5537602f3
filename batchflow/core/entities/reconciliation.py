"""Marketplace reconciliation entity."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from batchflow.core.entities.common import new_id, utc_now


class ReconciliationStatus(str, Enum):
    MATCHED = "matched"
    DISCREPANCY = "discrepancy"


class Reconciliation(BaseModel):
    """Reported vs. expected receipt quantity for a batch at the marketplace."""

    id: str = Field(default_factory=new_id)
    batch_id: str
    sku: str
    expected_quantity: int = Field(ge=0)
    reported_quantity: int = Field(ge=0)
    discrepancy: int = 0  # reported - expected
    status: ReconciliationStatus = ReconciliationStatus.MATCHED
    notes: str | None = None
    reconciled_at: datetime = Field(default_factory=utc_now)
    resolved: bool = False
    resolved_at: datetime | None = None
    adjustment_entry_id: str | None = None

    @property
    def is_open_discrepancy(self) -> bool:
        return self.status == ReconciliationStatus.DISCREPANCY and not self.resolved
