"""Adjust Stock Use Case: record a manual ledger movement."""

from dataclasses import dataclass

from batchflow.application.dto.requests import AdjustStockRequest
from batchflow.application.dto.responses import (
    AdjustStockResponse,
    BatchResponse,
    LedgerEntryResponse,
)
from batchflow.core.entities import Batch, StockLedgerEntry
from batchflow.core.services import BatchRegistry, StockLedger


@dataclass
class AdjustStockResult:
    entry: StockLedgerEntry
    batch: Batch


class AdjustStockUseCase:
    """Append a movement to a batch's ledger and return the updated batch."""

    def __init__(
        self,
        ledger: StockLedger | None = None,
        registry: BatchRegistry | None = None,
    ):
        self._ledger = ledger
        self._registry = registry

    def _get_ledger(self) -> StockLedger:
        if self._ledger is None:
            from batchflow.application.services import get_stock_ledger

            self._ledger = get_stock_ledger()
        return self._ledger

    def _get_registry(self) -> BatchRegistry:
        if self._registry is None:
            from batchflow.application.services import get_batch_registry

            self._registry = get_batch_registry()
        return self._registry

    async def execute(self, batch_id: str, request: AdjustStockRequest) -> AdjustStockResult:
        entry = await self._get_ledger().record(
            batch_id=batch_id,
            location_id=request.location_id,
            movement_type=request.movement_type,
            quantity=request.quantity,
            reason=request.reason,
            reference=request.reference,
        )
        batch = await self._get_registry().get(batch_id)
        return AdjustStockResult(entry=entry, batch=batch)

    def to_response(self, result: AdjustStockResult) -> AdjustStockResponse:
        return AdjustStockResponse(
            entry=LedgerEntryResponse.from_entity(result.entry),
            batch=BatchResponse.from_entity(result.batch),
        )
