"""First-in-first-out allocation of an order quantity across stock batches.

Pure functions over batch-like objects (anything with ``id``,
``quantity_remaining`` and ``date_received``), so the rule can be exercised
without a repository.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class BatchAllocation:
    batch_id: str
    quantity: int


@dataclass(frozen=True)
class FifoPlan:
    allocations: tuple[BatchAllocation, ...]
    shortfall: int

    @property
    def allocated(self) -> int:
        return sum(a.quantity for a in self.allocations)


def oldest_first(batches):
    return sorted(batches, key=lambda b: b.date_received)


def allocate_fifo(batches, quantity: int) -> FifoPlan:
    """Draw ``quantity`` from the oldest batches first.

    Batches with nothing remaining are skipped. When the batches together
    hold less than ``quantity`` the unmet part is reported as ``shortfall``
    rather than raising: the aggregate stock on the product is the figure
    checkout validates against, and batch records may lag behind it.
    """
    needed = quantity
    allocations = []

    for batch in oldest_first(batches):
        if needed <= 0:
            break
        if batch.quantity_remaining <= 0:
            continue

        take = min(batch.quantity_remaining, needed)
        allocations.append(BatchAllocation(batch_id=str(batch.id), quantity=take))
        needed -= take

    return FifoPlan(allocations=tuple(allocations), shortfall=max(needed, 0))
