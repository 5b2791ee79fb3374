"""
One reconciliation run: snapshot the store, reconcile, apply.
"""
import logging

from inventory_sync.dispatch import apply_operations
from inventory_sync.errors import FetchFailure
from inventory_sync.reconcile import reconcile

logger = logging.getLogger(__name__)


def sync_vehicles(store, vehicles, *, record_limit=100, prune_stale=True, color=None):
    """
    Bring the store in line with `vehicles`.

    Raises:
        FetchFailure: `vehicles` is empty
        StoreReadFailure: the store snapshot could not be read
    """
    if not vehicles:
        raise FetchFailure('Refusing to reconcile an empty inventory batch')

    records = store.list_records(record_limit)
    logger.info(f'Loaded {len(records)} message(s) from the record store')

    plan = reconcile(vehicles, records, prune_stale=prune_stale)
    return apply_operations(store, plan, color=color)
