"""Human-readable document numbers, allocated inside the write transaction."""

import re
from datetime import date

from batchflow.core.interfaces import IUnitOfWork

_TRAILING_SEQ = re.compile(r"(\d+)$")


def _next_sequence(last: str | None) -> int:
    if last is None:
        return 1
    match = _TRAILING_SEQ.search(last)
    return int(match.group(1)) + 1 if match else 1


async def next_batch_number(uow: IUnitOfWork, prefix: str = "B", on: date | None = None) -> str:
    """B-YYYYMMDD-NNNN, sequence restarting each day."""
    stem = f"{prefix}-{(on or date.today()).strftime('%Y%m%d')}-"
    last = await uow.batches.last_number(stem)
    return f"{stem}{_next_sequence(last):04d}"


async def next_po_number(uow: IUnitOfWork, prefix: str = "PO", on: date | None = None) -> str:
    """PO-YYYY-NNNN, sequence restarting each year."""
    stem = f"{prefix}-{(on or date.today()).year}-"
    last = await uow.purchase_orders.last_number(stem)
    return f"{stem}{_next_sequence(last):04d}"
