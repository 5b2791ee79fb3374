"""
Keeps a channel of posted vehicle listings in sync with a dealer's inventory page.
"""
from inventory_sync.models import MatchKind, Operation, OperationKind, Record, RenderedContent, Vehicle
from inventory_sync.reconcile import ReconcilePlan, reconcile

__version__ = '1.0.0'

__all__ = [
    'MatchKind',
    'Operation',
    'OperationKind',
    'ReconcilePlan',
    'Record',
    'RenderedContent',
    'Vehicle',
    'reconcile',
]
