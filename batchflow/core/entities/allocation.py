"""Allocation domain entity."""

from datetime import datetime

from pydantic import BaseModel, Field

from batchflow.core.entities.common import new_id, utc_now


class Allocation(BaseModel):
    """Draft reservation of batch stock for a pending outbound transfer."""

    id: str = Field(default_factory=new_id)
    batch_id: str
    transfer_draft_id: str
    allocated_quantity: int = Field(gt=0)
    location_id: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
