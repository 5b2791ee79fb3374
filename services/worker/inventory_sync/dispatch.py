"""
Applies a reconciliation plan to a record store.
"""
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Optional

from inventory_sync.errors import OperationFailure
from inventory_sync.models import Operation, OperationKind
from inventory_sync.reconcile import ReconcilePlan
from inventory_sync.render import embed_color, render, to_embed
from inventory_sync.store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class DispatchReport:
    """Outcome of applying one plan."""
    changes: int = 0
    applied: Counter = field(default_factory=Counter)
    failures: list[OperationFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)

    def summary(self) -> str:
        """Status line shown to the user after a refresh."""
        message = f'Refreshed! {self.changes} changes made.'
        if self.failures:
            message += f' ({self.failed} failed)'
        return message


def apply_operation(store: RecordStore, op: Operation, color: int) -> None:
    """Apply a single operation. Raises OperationFailure."""
    if op.kind is OperationKind.CREATE:
        store.create(to_embed(render(op.vehicle), color))
    elif op.kind is OperationKind.UPDATE:
        store.update(op.record.handle, to_embed(render(op.vehicle), color))
    elif op.kind is OperationKind.DELETE:
        store.delete(op.record.handle)


def apply_operations(
    store: RecordStore,
    plan: ReconcilePlan,
    *,
    color: Optional[int] = None,
) -> DispatchReport:
    """
    Apply every operation of a plan, best-effort.

    A failing operation is logged and recorded in the report; the remaining
    operations are still applied.
    """
    if color is None:
        color = embed_color()

    report = DispatchReport(changes=plan.changes)
    for op in plan.operations:
        if not op.is_change:
            continue
        try:
            apply_operation(store, op, color)
        except OperationFailure as e:
            if e.operation is None:
                e.operation = op
            logger.error(f'Failed to apply {op.describe()}: {e}')
            report.failures.append(e)
            continue
        logger.debug(f'Applied {op.describe()}')
        report.applied[op.kind] += 1

    logger.info(f'Applied {sum(report.applied.values())} of {report.changes} change(s)')
    return report
