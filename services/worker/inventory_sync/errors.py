"""
Error types raised at the feed and record-store boundaries.
"""


class SyncError(Exception):
    """Base class for inventory sync errors."""


class FetchFailure(SyncError):
    """The inventory feed could not be retrieved, parsed, or was empty."""


class StoreReadFailure(SyncError):
    """Existing records could not be listed from the record store."""


class OperationFailure(SyncError):
    """A single create/update/delete against the record store failed."""

    def __init__(self, message, operation=None):
        super().__init__(message)
        self.operation = operation
