"""Unit tests for ReconcileBatchUseCase."""

from unittest.mock import AsyncMock

from batchflow.application.dto.requests import ReconcileRequest, ResolveReconciliationRequest
from batchflow.application.use_cases.reconcile_batch import ReconcileBatchUseCase
from batchflow.core.entities import Reconciliation, ReconciliationStatus


def _record(**kwargs) -> Reconciliation:
    return Reconciliation(
        id="rec-1",
        batch_id="b1",
        sku="SKU-001",
        expected_quantity=500,
        reported_quantity=485,
        discrepancy=-15,
        status=ReconciliationStatus.DISCREPANCY,
        **kwargs,
    )


async def test_reconcile():
    engine = AsyncMock()
    engine.reconcile = AsyncMock(return_value=_record())
    use_case = ReconcileBatchUseCase(engine=engine)

    result = await use_case.execute(ReconcileRequest(batch_id="b1", reported_quantity=485))

    engine.reconcile.assert_awaited_once_with(
        batch_id="b1", expected_quantity=None, reported_quantity=485, notes=None
    )
    response = use_case.to_response(result)
    assert response.status == "discrepancy"
    assert response.discrepancy == -15


async def test_resolve():
    engine = AsyncMock()
    engine.resolve = AsyncMock(return_value=_record(resolved=True, adjustment_entry_id="e-1"))
    use_case = ReconcileBatchUseCase(engine=engine)

    result = await use_case.resolve(
        "rec-1", ResolveReconciliationRequest(location_id="amazon-fba")
    )

    engine.resolve.assert_awaited_once_with("rec-1", location_id="amazon-fba", reason=None)
    assert use_case.to_response(result).adjustment_entry_id == "e-1"
