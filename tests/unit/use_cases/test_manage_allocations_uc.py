"""Unit tests for ManageAllocationsUseCase."""

from unittest.mock import AsyncMock

import pytest

from batchflow.application.dto.requests import AllocateRequest, CommitAllocationRequest
from batchflow.application.use_cases.manage_allocations import ManageAllocationsUseCase
from batchflow.core.entities import Allocation, MovementType, StockLedgerEntry


@pytest.fixture
def mock_tracker():
    tracker = AsyncMock()
    tracker.allocate = AsyncMock(
        return_value=Allocation(
            id="al-1", batch_id="b1", transfer_draft_id="TD-1", allocated_quantity=100
        )
    )
    tracker.available = AsyncMock(return_value=200)
    tracker.commit = AsyncMock(
        return_value=[
            StockLedgerEntry(
                batch_id="b1",
                location_id="factory",
                movement_type=MovementType.TRANSFER_OUT,
                quantity=-100,
                reason="Transfer TD-1",
                reference="TD-1",
            )
        ]
    )
    return tracker


@pytest.fixture
def mock_ledger():
    ledger = AsyncMock()
    ledger.balance = AsyncMock(return_value=200)
    return ledger


async def test_allocate_reports_available(mock_tracker, mock_ledger):
    use_case = ManageAllocationsUseCase(tracker=mock_tracker, ledger=mock_ledger)

    result = await use_case.allocate(
        AllocateRequest(batch_id="b1", transfer_draft_id="TD-1", quantity=100)
    )

    assert result.available == 200
    response = use_case.to_allocate_response(result)
    assert response.allocation.id == "al-1"
    mock_tracker.available.assert_awaited_once_with("b1")


async def test_commit_passes_location_override(mock_tracker, mock_ledger):
    use_case = ManageAllocationsUseCase(tracker=mock_tracker, ledger=mock_ledger)

    result = await use_case.commit("al-1", CommitAllocationRequest(location_id="hub-dxb"))

    mock_tracker.commit.assert_awaited_once_with("al-1", location_id="hub-dxb")
    assert result.batch_quantity == 200
    response = use_case.to_commit_response(result)
    [entry] = response.entries
    assert entry.movement_type == "transfer_out"
    assert entry.quantity == -100
    mock_ledger.balance.assert_awaited_once_with("b1")


async def test_commit_without_body(mock_tracker, mock_ledger):
    use_case = ManageAllocationsUseCase(tracker=mock_tracker, ledger=mock_ledger)
    await use_case.commit("al-1")
    mock_tracker.commit.assert_awaited_once_with("al-1", location_id=None)


async def test_release(mock_tracker, mock_ledger):
    use_case = ManageAllocationsUseCase(tracker=mock_tracker, ledger=mock_ledger)
    await use_case.release("al-1")
    mock_tracker.release.assert_awaited_once_with("al-1")
