"""
Split and merge engine.

Restructures batches while conserving quantity and cost. Both operations
run in one transaction: the new batch, every ledger entry and every
source update commit together or not at all.
"""

from collections import defaultdict
from decimal import Decimal

from batchflow.config import get_logger
from batchflow.core.entities import Batch, MovementType
from batchflow.core.exceptions import (
    BatchOverAllocatedError,
    InactiveBatchError,
    InvalidMergeError,
    InvalidSplitQuantityError,
    OpenAllocationsBlockMergeError,
    UnresolvedDiscrepancyError,
)
from batchflow.core.interfaces import IUnitOfWork, UnitOfWorkFactory
from batchflow.core.money import ZERO, line_total, weighted_unit_cost
from batchflow.core.services.allocation_tracker import available_quantity
from batchflow.core.services.locking import KeyedLockRegistry, batch_key
from batchflow.core.services.numbering import next_batch_number
from batchflow.core.services.stock_ledger import (
    apply_movement,
    draw_from_locations,
    require_batch,
)

logger = get_logger(__name__)


class SplitMergeEngine:
    """Batch split and merge with cost and quantity conservation."""

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        locks: KeyedLockRegistry,
        batch_number_prefix: str = "B",
        default_location_id: str = "factory",
    ):
        self._uow_factory = uow_factory
        self._locks = locks
        self._prefix = batch_number_prefix
        self._default_location_id = default_location_id

    async def split(self, batch_id: str, split_quantity: int, note: str | None = None) -> str:
        """
        Carve split_quantity units off a batch into a new batch.

        The new batch's total is round(q * unit_cost); the source keeps the
        rest of its original total, so any residual cent stays with it.

        Returns:
            ID of the new batch.

        Raises:
            InactiveBatchError, InvalidSplitQuantityError,
            BatchOverAllocatedError, UnresolvedDiscrepancyError
        """
        logger.info("split_started", batch_id=batch_id, split_quantity=split_quantity)

        async with self._locks.hold(batch_key(batch_id)):
            async with self._uow_factory() as uow:
                source = await require_batch(uow, batch_id)
                if not source.active:
                    raise InactiveBatchError(batch_id, "split")
                if not 0 < split_quantity < source.quantity:
                    raise InvalidSplitQuantityError(batch_id, split_quantity, source.quantity)

                available = await available_quantity(uow, source)
                if split_quantity > available:
                    raise BatchOverAllocatedError(batch_id, split_quantity, available)
                await self._ensure_no_open_discrepancy(uow, source, "split")

                original_total = source.total_cost
                new_total = line_total(split_quantity, source.unit_cost)

                child = Batch(
                    batch_number=await next_batch_number(uow, self._prefix),
                    sku=source.sku,
                    product_name=source.product_name,
                    unit_cost=source.unit_cost,
                    stage=source.stage,
                    po_id=source.po_id,
                    supplier_id=source.supplier_id,
                    ordered_date=source.ordered_date,
                    expected_arrival=source.expected_arrival,
                    actual_arrival=source.actual_arrival,
                    lineage_of=[source.id],
                )
                child.append_stage(source.stage, note or f"Split from {source.display_name}")
                await uow.batches.create(child)

                balances = await uow.ledger.balance_by_location(source.id)
                reason = f"Split {split_quantity} units into {child.batch_number}"
                for location_id, units in draw_from_locations(
                    balances, split_quantity, self._default_location_id
                ):
                    await apply_movement(
                        uow, source, location_id, MovementType.SPLIT_OUT, -units,
                        reason, reference=child.id, recompute_total=False,
                    )
                    await apply_movement(
                        uow, child, location_id, MovementType.SPLIT_IN, units,
                        reason, reference=source.id, recompute_total=False,
                    )

                child.total_cost = new_total
                source.total_cost = original_total - new_total
                await uow.batches.update(child)
                await uow.batches.update(source)

        logger.info(
            "split_complete",
            batch_id=batch_id,
            new_batch_id=child.id,
            remaining_quantity=source.quantity,
            remaining_total=str(source.total_cost),
            new_total=str(child.total_cost),
        )
        return child.id

    async def merge(self, batch_ids: list[str], note: str | None = None) -> str:
        """
        Combine same-SKU, same-stage batches into one new batch.

        The new batch carries the summed quantity and a weighted-average
        unit cost rounded half-up to cents; its total is round(q * unit_cost),
        which may differ from the summed source cost by the rounding. Sources
        end with zero quantity and active=False.

        Returns:
            ID of the new batch.

        Raises:
            InvalidMergeError, InactiveBatchError,
            OpenAllocationsBlockMergeError, UnresolvedDiscrepancyError
        """
        ordered_ids = list(dict.fromkeys(batch_ids))
        if len(ordered_ids) < 2:
            raise InvalidMergeError(list(batch_ids), "at least two distinct batches are required")

        logger.info("merge_started", batch_ids=ordered_ids)

        async with self._locks.hold(*(batch_key(i) for i in ordered_ids)):
            async with self._uow_factory() as uow:
                # Read in the same canonical order the locks were taken
                loaded = {i: await require_batch(uow, i) for i in sorted(ordered_ids)}
                sources = [loaded[i] for i in ordered_ids]

                for batch in sources:
                    if not batch.active:
                        raise InactiveBatchError(batch.id, "merge")
                if len({b.sku for b in sources}) > 1:
                    raise InvalidMergeError(ordered_ids, "batches must share one SKU")
                if len({b.stage for b in sources}) > 1:
                    raise InvalidMergeError(ordered_ids, "batches must share one stage")

                blocked = [
                    b.id for b in sources if await uow.allocations.total_open(b.id) > 0
                ]
                if blocked:
                    raise OpenAllocationsBlockMergeError(blocked)
                for batch in sources:
                    await self._ensure_no_open_discrepancy(uow, batch, "merge")

                source_cost = sum((b.total_cost for b in sources), ZERO)
                merged = self._combine(sources, source_cost)
                merged.batch_number = await next_batch_number(uow, self._prefix)
                merged.append_stage(
                    merged.stage,
                    note or "Merged from " + ", ".join(b.display_name for b in sources),
                )
                await uow.batches.create(merged)

                incoming: dict[str, int] = defaultdict(int)
                reason = f"Merge into {merged.batch_number}"
                for batch in sources:
                    if batch.quantity > 0:
                        balances = await uow.ledger.balance_by_location(batch.id)
                        for location_id, units in draw_from_locations(
                            balances, batch.quantity, self._default_location_id
                        ):
                            await apply_movement(
                                uow, batch, location_id, MovementType.MERGE_OUT, -units,
                                reason, reference=merged.id,
                            )
                            incoming[location_id] += units
                    batch.active = False
                    await uow.batches.update(batch)

                for location_id in sorted(incoming):
                    await apply_movement(
                        uow, merged, location_id, MovementType.MERGE_IN,
                        incoming[location_id], reason, reference=merged.id,
                    )

        logger.info(
            "merge_complete",
            batch_ids=ordered_ids,
            new_batch_id=merged.id,
            quantity=merged.quantity,
            unit_cost=str(merged.unit_cost),
            total_cost=str(merged.total_cost),
        )
        return merged.id

    def _combine(self, sources: list[Batch], total_cost: Decimal) -> Batch:
        """Build the (empty) merged batch from its sources."""
        total_quantity = sum(b.quantity for b in sources)
        if total_quantity:
            unit_cost = weighted_unit_cost(total_cost, total_quantity)
        else:
            unit_cost = sources[0].unit_cost

        po_ids = {b.po_id for b in sources}
        supplier_ids = {b.supplier_id for b in sources}
        expected = [b.expected_arrival for b in sources if b.expected_arrival]
        arrived = [b.actual_arrival for b in sources if b.actual_arrival]

        return Batch(
            sku=sources[0].sku,
            product_name=sources[0].product_name,
            unit_cost=unit_cost,
            stage=sources[0].stage,
            po_id=po_ids.pop() if len(po_ids) == 1 else None,
            supplier_id=supplier_ids.pop() if len(supplier_ids) == 1 else None,
            ordered_date=min(b.ordered_date for b in sources),
            expected_arrival=max(expected) if expected else None,
            actual_arrival=max(arrived) if arrived else None,
            lineage_of=[b.id for b in sources],
        )

    async def _ensure_no_open_discrepancy(
        self, uow: IUnitOfWork, batch: Batch, operation: str
    ) -> None:
        open_records = await uow.reconciliations.open_discrepancies(batch.id)
        if open_records:
            raise UnresolvedDiscrepancyError(batch.id, operation, [r.id for r in open_records])
