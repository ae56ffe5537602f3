"""Reconcile Batch Use Case: marketplace receipt checks and their resolution."""

from batchflow.application.dto.requests import ReconcileRequest, ResolveReconciliationRequest
from batchflow.application.dto.responses import ReconciliationResponse
from batchflow.core.entities import Reconciliation
from batchflow.core.services import ReconciliationEngine


class ReconcileBatchUseCase:
    """Compare marketplace-reported receipts with the batch and book the outcome."""

    def __init__(self, engine: ReconciliationEngine | None = None):
        self._engine = engine

    def _get_engine(self) -> ReconciliationEngine:
        if self._engine is None:
            from batchflow.application.services import get_reconciliation_engine

            self._engine = get_reconciliation_engine()
        return self._engine

    async def execute(self, request: ReconcileRequest) -> Reconciliation:
        return await self._get_engine().reconcile(
            batch_id=request.batch_id,
            expected_quantity=request.expected_quantity,
            reported_quantity=request.reported_quantity,
            notes=request.notes,
        )

    async def resolve(
        self, reconciliation_id: str, request: ResolveReconciliationRequest
    ) -> Reconciliation:
        return await self._get_engine().resolve(
            reconciliation_id, location_id=request.location_id, reason=request.reason
        )

    def to_response(self, result: Reconciliation) -> ReconciliationResponse:
        return ReconciliationResponse.from_entity(result)
