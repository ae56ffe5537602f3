"""Batch domain entities."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from batchflow.core.entities.common import new_id, utc_now
from batchflow.core.money import ZERO, line_total, to_unit_cost


class BatchStage(str, Enum):
    """Pipeline stages, in physical order."""

    ORDERED = "ordered"
    FACTORY = "factory"
    INSPECTED = "inspected"
    READY_TO_SHIP = "ready_to_ship"
    IN_TRANSIT = "in_transit"
    WAREHOUSE = "warehouse"
    MARKETPLACE = "marketplace"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]


# Arriving here stamps actual_arrival when it is still empty
ARRIVAL_STAGES = frozenset({BatchStage.WAREHOUSE, BatchStage.MARKETPLACE})


class StageHistoryEntry(BaseModel):
    """One append-only record of a batch entering a stage."""

    id: int | None = None
    batch_id: str | None = None
    stage: BatchStage
    timestamp: datetime = Field(default_factory=utc_now)
    note: str | None = None


class Batch(BaseModel):
    """A lot of one SKU moving through the pipeline as a unit."""

    id: str = Field(default_factory=new_id)
    batch_number: str | None = None
    sku: str
    product_name: str
    quantity: int = Field(default=0, ge=0)  # nominal on-hand, not reduced by allocation
    unit_cost: Decimal = ZERO
    total_cost: Decimal = ZERO
    stage: BatchStage = BatchStage.ORDERED
    stage_history: list[StageHistoryEntry] = Field(default_factory=list)
    po_id: str | None = None
    supplier_id: str | None = None
    ordered_date: date = Field(default_factory=date.today)
    expected_arrival: date | None = None
    actual_arrival: date | None = None
    notes: str | None = None
    lineage_of: list[str] = Field(default_factory=list)
    active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("unit_cost", mode="before")
    @classmethod
    def normalize_unit_cost(cls, v):
        cost = to_unit_cost(v)
        if cost < 0:
            raise ValueError("unit_cost must be >= 0")
        return cost

    def recompute_total(self) -> Decimal:
        """Reset total_cost to round(quantity * unit_cost)."""
        self.total_cost = line_total(self.quantity, self.unit_cost)
        return self.total_cost

    def append_stage(self, stage: BatchStage, note: str | None = None) -> StageHistoryEntry:
        """Move to a stage and record it; history and current stage stay in step."""
        entry = StageHistoryEntry(batch_id=self.id, stage=stage, note=note)
        self.stage_history.append(entry)
        self.stage = stage
        return entry

    @property
    def display_name(self) -> str:
        return self.batch_number or self.id
