"""Allocation Use Cases: reserve, release and commit transfer allocations."""

from dataclasses import dataclass

from batchflow.application.dto.requests import AllocateRequest, CommitAllocationRequest
from batchflow.application.dto.responses import (
    AllocateResponse,
    AllocationResponse,
    CommitAllocationResponse,
    LedgerEntryResponse,
)
from batchflow.config import get_logger
from batchflow.core.entities import Allocation, StockLedgerEntry
from batchflow.core.services import AllocationTracker, StockLedger

logger = get_logger(__name__)


@dataclass
class AllocateResult:
    allocation: Allocation
    available: int


@dataclass
class CommitAllocationResult:
    entries: list[StockLedgerEntry]
    batch_quantity: int
    available: int


class ManageAllocationsUseCase:
    """
    Transfer-facing allocation operations.

    The transfer subsystem drives reservations through here: allocate
    while a transfer is drafted, commit when it ships, release when it
    is abandoned.
    """

    def __init__(
        self,
        tracker: AllocationTracker | None = None,
        ledger: StockLedger | None = None,
    ):
        self._tracker = tracker
        self._ledger = ledger

    def _get_tracker(self) -> AllocationTracker:
        if self._tracker is None:
            from batchflow.application.services import get_allocation_tracker

            self._tracker = get_allocation_tracker()
        return self._tracker

    def _get_ledger(self) -> StockLedger:
        if self._ledger is None:
            from batchflow.application.services import get_stock_ledger

            self._ledger = get_stock_ledger()
        return self._ledger

    async def allocate(self, request: AllocateRequest) -> AllocateResult:
        tracker = self._get_tracker()
        allocation = await tracker.allocate(
            batch_id=request.batch_id,
            transfer_draft_id=request.transfer_draft_id,
            quantity=request.quantity,
            location_id=request.location_id,
        )
        available = await tracker.available(request.batch_id)
        return AllocateResult(allocation=allocation, available=available)

    async def release(self, allocation_id: str) -> None:
        await self._get_tracker().release(allocation_id)

    async def commit(
        self, allocation_id: str, request: CommitAllocationRequest | None = None
    ) -> CommitAllocationResult:
        tracker = self._get_tracker()
        location_id = request.location_id if request else None
        entries = await tracker.commit(allocation_id, location_id=location_id)

        batch_id = entries[0].batch_id
        batch_quantity = await self._get_ledger().balance(batch_id)
        available = await tracker.available(batch_id)
        logger.debug(
            "allocation_committed",
            allocation_id=allocation_id,
            batch_quantity=batch_quantity,
            available=available,
        )
        return CommitAllocationResult(
            entries=entries, batch_quantity=batch_quantity, available=available
        )

    def to_allocate_response(self, result: AllocateResult) -> AllocateResponse:
        return AllocateResponse(
            allocation=AllocationResponse.from_entity(result.allocation),
            available=result.available,
        )

    def to_commit_response(self, result: CommitAllocationResult) -> CommitAllocationResponse:
        return CommitAllocationResponse(
            entries=[LedgerEntryResponse.from_entity(e) for e in result.entries],
            batch_quantity=result.batch_quantity,
            available=result.available,
        )
