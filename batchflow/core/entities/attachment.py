"""Attachment metadata entity. File bytes live outside this service."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from batchflow.core.entities.common import new_id, utc_now


class AttachmentOwner(str, Enum):
    BATCH = "batch"
    PURCHASE_ORDER = "purchase_order"


class Attachment(BaseModel):
    id: str = Field(default_factory=new_id)
    owner_type: AttachmentOwner
    owner_id: str
    name: str = Field(min_length=1)
    kind: str = "document"  # photo, document, invoice, ...
    created_at: datetime = Field(default_factory=utc_now)
