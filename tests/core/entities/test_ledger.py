"""Tests for ledger, reconciliation and allocation entities."""

import pytest
from pydantic import ValidationError

from batchflow.core.entities import (
    Allocation,
    MovementType,
    Reconciliation,
    ReconciliationStatus,
    StockLedgerEntry,
)


class TestMovementType:
    @pytest.mark.parametrize(
        "movement_type, sign",
        [
            (MovementType.RECEIPT, 1),
            (MovementType.SPLIT_IN, 1),
            (MovementType.MERGE_IN, 1),
            (MovementType.TRANSFER_IN, 1),
            (MovementType.SPLIT_OUT, -1),
            (MovementType.MERGE_OUT, -1),
            (MovementType.TRANSFER_OUT, -1),
            (MovementType.ADJUSTMENT, 0),
        ],
    )
    def test_required_sign(self, movement_type, sign):
        assert movement_type.required_sign == sign


class TestStockLedgerEntry:
    def test_entries_are_frozen(self):
        entry = StockLedgerEntry(
            batch_id="b1",
            location_id="factory",
            movement_type=MovementType.RECEIPT,
            quantity=10,
            reason="Initial receipt",
        )
        with pytest.raises(ValidationError):
            entry.quantity = 20


class TestAllocation:
    def test_quantity_must_be_positive(self):
        with pytest.raises(ValidationError):
            Allocation(batch_id="b1", transfer_draft_id="t1", allocated_quantity=0)


class TestReconciliation:
    def test_open_discrepancy(self):
        record = Reconciliation(
            batch_id="b1",
            sku="S",
            expected_quantity=500,
            reported_quantity=485,
            discrepancy=-15,
            status=ReconciliationStatus.DISCREPANCY,
        )
        assert record.is_open_discrepancy
        record.resolved = True
        assert not record.is_open_discrepancy

    def test_matched_is_never_open(self):
        record = Reconciliation(batch_id="b1", sku="S", expected_quantity=5, reported_quantity=5)
        assert not record.is_open_discrepancy
