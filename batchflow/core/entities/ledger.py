"""Stock ledger domain entities."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from batchflow.core.entities.common import new_id, utc_now


class MovementType(str, Enum):
    """Kinds of signed quantity movement."""

    RECEIPT = "receipt"
    SPLIT_OUT = "split_out"
    SPLIT_IN = "split_in"
    MERGE_OUT = "merge_out"
    MERGE_IN = "merge_in"
    TRANSFER_OUT = "transfer_out"
    TRANSFER_IN = "transfer_in"
    ADJUSTMENT = "adjustment"

    @property
    def required_sign(self) -> int:
        """+1 or -1 when the type fixes the sign, 0 when either is allowed."""
        if self in INBOUND_MOVEMENTS:
            return 1
        if self in OUTBOUND_MOVEMENTS:
            return -1
        return 0


INBOUND_MOVEMENTS = frozenset(
    {
        MovementType.RECEIPT,
        MovementType.SPLIT_IN,
        MovementType.MERGE_IN,
        MovementType.TRANSFER_IN,
    }
)
OUTBOUND_MOVEMENTS = frozenset(
    {
        MovementType.SPLIT_OUT,
        MovementType.MERGE_OUT,
        MovementType.TRANSFER_OUT,
    }
)


class StockLedgerEntry(BaseModel):
    """Immutable signed quantity movement for one batch at one location."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    batch_id: str
    location_id: str
    movement_type: MovementType
    quantity: int  # signed
    reason: str
    reference: str | None = None  # transfer draft id, reconciliation id, source batch
    created_at: datetime = Field(default_factory=utc_now)
