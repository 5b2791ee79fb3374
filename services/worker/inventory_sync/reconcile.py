"""
Reconciliation of the current feed against posted records.

Decision per vehicle, in feed order:

| Exact record left? | Same-VIN record left? | Operation |
|--------------------|-----------------------|-----------|
| yes                | -                     | NOOP      |
| no                 | yes                   | UPDATE    |
| no                 | no                    | CREATE    |

Records not consumed by any vehicle are DELETEd afterwards (store order).
Ties always go to the first record in store order, so the plan is
deterministic for a given feed and snapshot.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from inventory_sync.matching import compare
from inventory_sync.models import MatchKind, Operation, OperationKind, Record, Vehicle

logger = logging.getLogger(__name__)


class RemainingRecords:
    """
    Working set of records not yet claimed by a vehicle.

    Keeps store order and an identity index so that lookups only walk
    records sharing the vehicle's VIN.
    """

    def __init__(self, records: Iterable[Record]):
        self._records = {}
        self._by_identity = {}
        for record in records:
            if not record.is_listing or record.handle in self._records:
                continue
            self._records[record.handle] = record
            identity = record.content.identity
            self._by_identity.setdefault(identity, []).append(record.handle)

    def __len__(self):
        return len(self._records)

    def candidates(self, identity: Optional[str]) -> Iterator[Record]:
        """Unclaimed records with the given identity, in store order."""
        for handle in self._by_identity.get(identity, ()):
            record = self._records.get(handle)
            if record is not None:
                yield record

    def claim(self, record: Record) -> None:
        del self._records[record.handle]

    def leftovers(self) -> list[Record]:
        return list(self._records.values())


@dataclass
class ReconcilePlan:
    """Ordered operations produced by one reconciliation run."""
    operations: list[Operation] = field(default_factory=list)

    @property
    def changes(self) -> int:
        """Number of operations that modify the record store."""
        return sum(1 for op in self.operations if op.is_change)

    def counts(self) -> dict[OperationKind, int]:
        counter = Counter(op.kind for op in self.operations)
        return {kind: counter.get(kind, 0) for kind in OperationKind}


def _match_vehicle(vehicle: Vehicle, remaining: RemainingRecords) -> Operation:
    candidates = list(remaining.candidates(vehicle.identity))

    for record in candidates:
        if compare(vehicle, record) is MatchKind.EXACT:
            remaining.claim(record)
            return Operation.noop(vehicle, record)

    if vehicle.identity is not None:
        for record in candidates:
            if compare(vehicle, record) is MatchKind.PARTIAL:
                remaining.claim(record)
                return Operation.update(record, vehicle)

    return Operation.create(vehicle)


def reconcile(
    vehicles: Iterable[Vehicle],
    records: Iterable[Record],
    *,
    prune_stale: bool = True,
) -> ReconcilePlan:
    """
    Compute the operations that make the posted records match the feed.

    Args:
        vehicles: Current feed, in feed order
        records: Snapshot of the record store, in store order. Records
            without listing content are ignored entirely.
        prune_stale: Emit DELETE for records with no vehicle in the feed

    Returns:
        ReconcilePlan with exactly one operation per vehicle followed by one
        DELETE per unclaimed record
    """
    remaining = RemainingRecords(records)
    plan = ReconcilePlan()

    for vehicle in vehicles:
        plan.operations.append(_match_vehicle(vehicle, remaining))

    if prune_stale:
        for record in remaining.leftovers():
            plan.operations.append(Operation.delete(record))
    elif len(remaining):
        logger.info(f'Keeping {len(remaining)} stale record(s), pruning disabled')

    counts = plan.counts()
    logger.info(
        f'Reconciled: {counts[OperationKind.NOOP]} unchanged, '
        f'{counts[OperationKind.CREATE]} created, '
        f'{counts[OperationKind.UPDATE]} updated, '
        f'{counts[OperationKind.DELETE]} deleted'
    )
    return plan
