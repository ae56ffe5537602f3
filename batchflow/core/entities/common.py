"""Shared helpers for entity identity and timestamps."""

import uuid
from datetime import UTC, datetime


def new_id() -> str:
    """Generate a stable entity identifier."""
    return uuid.uuid4().hex


def utc_now() -> datetime:
    return datetime.now(UTC)
