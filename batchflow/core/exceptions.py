"""
Domain exceptions for the BatchFlow application.

Provides specific exception types for different error scenarios.
Rule violations carry the entity id, the attempted value and the
constraint that was broken so callers can render a useful message.
"""

from typing import Any


class BatchFlowError(Exception):
    """Base exception for all BatchFlow errors."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# Storage Exceptions
class StorageError(BatchFlowError):
    """Base exception for storage operations."""

    pass


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


# Lookup Exceptions
class NotFoundError(BatchFlowError):
    """Base exception for missing entities."""

    pass


class BatchNotFoundError(NotFoundError):
    """Batch not found."""

    def __init__(self, batch_id: str):
        super().__init__(
            f"Batch not found: {batch_id}",
            code="BATCH_NOT_FOUND",
            details={"batch_id": batch_id},
        )


class PurchaseOrderNotFoundError(NotFoundError):
    """Purchase order not found."""

    def __init__(self, po_id: str):
        super().__init__(
            f"Purchase order not found: {po_id}",
            code="PURCHASE_ORDER_NOT_FOUND",
            details={"po_id": po_id},
        )


class ReconciliationNotFoundError(NotFoundError):
    """Reconciliation record not found."""

    def __init__(self, reconciliation_id: str):
        super().__init__(
            f"Reconciliation not found: {reconciliation_id}",
            code="RECONCILIATION_NOT_FOUND",
            details={"reconciliation_id": reconciliation_id},
        )


class AttachmentNotFoundError(NotFoundError):
    """Attachment metadata not found."""

    def __init__(self, attachment_id: str):
        super().__init__(
            f"Attachment not found: {attachment_id}",
            code="ATTACHMENT_NOT_FOUND",
            details={"attachment_id": attachment_id},
        )


class AllocationNotFoundError(NotFoundError):
    """Allocation is unknown, or was already committed or released."""

    def __init__(self, allocation_id: str):
        super().__init__(
            f"Allocation not found or no longer open: {allocation_id}",
            code="ALLOCATION_NOT_FOUND",
            details={"allocation_id": allocation_id},
        )


# Inventory rule violations
class InventoryRuleError(BatchFlowError):
    """Base exception for precondition violations on batches, ledger and POs."""

    pass


class InvalidMovementError(InventoryRuleError):
    """Ledger movement rejected."""

    def __init__(self, batch_id: str, movement_type: str, quantity: int, reason: str):
        super().__init__(
            f"Invalid {movement_type} movement of {quantity} on batch {batch_id}: {reason}",
            code="INVALID_MOVEMENT",
            details={
                "batch_id": batch_id,
                "movement_type": movement_type,
                "quantity": quantity,
                "reason": reason,
            },
        )


class InsufficientAvailableError(InventoryRuleError):
    """Requested allocation exceeds the batch's available quantity."""

    def __init__(self, batch_id: str, requested: int, available: int):
        super().__init__(
            f"Cannot allocate {requested} from batch {batch_id}: only {available} available",
            code="INSUFFICIENT_AVAILABLE",
            details={
                "batch_id": batch_id,
                "requested": requested,
                "available": available,
            },
        )


class InvalidSplitQuantityError(InventoryRuleError):
    """Split quantity outside the open interval (0, quantity)."""

    def __init__(self, batch_id: str, split_quantity: int, batch_quantity: int):
        super().__init__(
            f"Split quantity {split_quantity} must be between 0 and {batch_quantity} "
            f"(exclusive) for batch {batch_id}",
            code="INVALID_SPLIT_QUANTITY",
            details={
                "batch_id": batch_id,
                "split_quantity": split_quantity,
                "batch_quantity": batch_quantity,
            },
        )


class BatchOverAllocatedError(InventoryRuleError):
    """Split would take away stock reserved by open allocations."""

    def __init__(self, batch_id: str, split_quantity: int, available: int):
        super().__init__(
            f"Cannot split {split_quantity} from batch {batch_id}: "
            f"only {available} unreserved",
            code="BATCH_OVER_ALLOCATED",
            details={
                "batch_id": batch_id,
                "split_quantity": split_quantity,
                "available": available,
            },
        )


class OpenAllocationsBlockMergeError(InventoryRuleError):
    """Merge sources still carry open allocations."""

    def __init__(self, batch_ids: list[str]):
        super().__init__(
            f"Release open allocations before merging: {', '.join(batch_ids)}",
            code="OPEN_ALLOCATIONS_BLOCK_MERGE",
            details={"batch_ids": batch_ids},
        )


class InvalidMergeError(InventoryRuleError):
    """Merge request does not describe a compatible set of batches."""

    def __init__(self, batch_ids: list[str], reason: str):
        super().__init__(
            f"Cannot merge batches {', '.join(batch_ids)}: {reason}",
            code="INVALID_MERGE",
            details={"batch_ids": batch_ids, "reason": reason},
        )


class InactiveBatchError(InventoryRuleError):
    """Operation attempted on a batch consumed by a split or merge."""

    def __init__(self, batch_id: str, operation: str):
        super().__init__(
            f"Batch {batch_id} is inactive; cannot {operation}",
            code="INACTIVE_BATCH",
            details={"batch_id": batch_id, "operation": operation},
        )


class UnknownStageError(InventoryRuleError):
    """Stage value is not one of the pipeline stages."""

    def __init__(self, stage: str, allowed: list[str]):
        super().__init__(
            f"Unknown stage '{stage}'. Allowed: {', '.join(allowed)}",
            code="UNKNOWN_STAGE",
            details={"stage": stage, "allowed": allowed},
        )


class IllegalTransitionError(InventoryRuleError):
    """PO status change not declared by the workflow."""

    def __init__(self, po_id: str, current: str, target: str, allowed: list[str]):
        super().__init__(
            f"Purchase order {po_id} cannot move from '{current}' to '{target}'",
            code="ILLEGAL_TRANSITION",
            details={
                "po_id": po_id,
                "current_status": current,
                "target_status": target,
                "allowed": allowed,
            },
        )


class BatchCreationNotAllowedError(InventoryRuleError):
    """Batches cannot be created against a PO in its current status."""

    def __init__(self, po_id: str, status: str):
        super().__init__(
            f"Purchase order {po_id} is '{status}'; batches can be created once "
            f"production is complete",
            code="BATCH_CREATION_NOT_ALLOWED",
            details={"po_id": po_id, "status": status},
        )


class UnresolvedDiscrepancyError(InventoryRuleError):
    """Batch has an open reconciliation discrepancy."""

    def __init__(self, batch_id: str, operation: str, reconciliation_ids: list[str]):
        super().__init__(
            f"Batch {batch_id} has unresolved reconciliation discrepancies; "
            f"cannot {operation}",
            code="UNRESOLVED_DISCREPANCY",
            details={
                "batch_id": batch_id,
                "operation": operation,
                "reconciliation_ids": reconciliation_ids,
            },
        )


class ReconciliationNotAllowedError(InventoryRuleError):
    """Reconciliation requested before the batch reached the marketplace."""

    def __init__(self, batch_id: str, stage: str):
        super().__init__(
            f"Batch {batch_id} is at stage '{stage}'; reconciliation requires 'marketplace'",
            code="RECONCILIATION_NOT_ALLOWED",
            details={"batch_id": batch_id, "stage": stage},
        )


class ReconciliationAlreadyResolvedError(InventoryRuleError):
    """Reconciliation was already resolved."""

    def __init__(self, reconciliation_id: str):
        super().__init__(
            f"Reconciliation {reconciliation_id} is already resolved",
            code="RECONCILIATION_ALREADY_RESOLVED",
            details={"reconciliation_id": reconciliation_id},
        )


# Validation Exceptions
class ValidationError(BatchFlowError):
    """Input validation failed."""

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class ConfigurationError(BatchFlowError):
    """Configuration error."""

    pass
