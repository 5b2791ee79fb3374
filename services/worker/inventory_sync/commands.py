"""
Command handlers: ping, refresh and bulkclear.

Every command answers with a short status message that deletes itself
after a few seconds.
"""
import logging
import threading

from inventory_sync.errors import FetchFailure, OperationFailure, StoreReadFailure
from inventory_sync.feed import fetch_inventory
from inventory_sync.sync import sync_vehicles

logger = logging.getLogger(__name__)

# Only one refresh may run against the channel at a time
REFRESH_LOCK = threading.Lock()


def _delete_reply(store, handle):
    try:
        store.delete(handle)
    except OperationFailure as e:
        logger.warning(f'Could not delete status message {handle}: {e}')


def quick_reply(store, message, timeout=3):
    """
    Post a status message and delete it after `timeout` seconds.

    Returns the timer so callers can wait for (or cancel) the deletion, or
    None when the message could not be posted.
    """
    print(message)
    try:
        handle = store.post_message(message)
    except OperationFailure as e:
        logger.error(f'Could not post status message: {e}')
        return None
    timer = threading.Timer(timeout, _delete_reply, args=(store, handle))
    timer.start()
    return timer


def ping(store, config):
    """Health check."""
    message = 'Pong!'
    quick_reply(store, message, config.reply_timeout)
    return message


def refresh(store, config, fetcher=fetch_inventory):
    """
    Refresh the posted listings from the dealer website:
    1. Fetch the listings from the website
    2. Snapshot the listings in the channel
    3. Leave exact matches alone, update listings whose details changed,
       post listings that are new
    4. Remove listings that are no longer on the website

    A fetch or store-read failure aborts the run before anything is changed.
    """
    if not REFRESH_LOCK.acquire(blocking=False):
        message = 'A refresh is already running.'
        quick_reply(store, message, config.reply_timeout)
        return message

    try:
        vehicles = fetcher(config)
        report = sync_vehicles(
            store,
            vehicles,
            record_limit=config.record_limit,
            prune_stale=config.prune_stale,
        )
        message = report.summary()
    except (FetchFailure, StoreReadFailure) as e:
        logger.error(f'Refresh aborted: {e}')
        message = f'Refresh failed: {e}'
    finally:
        REFRESH_LOCK.release()

    quick_reply(store, message, config.reply_timeout)
    return message


def bulkclear(store, config):
    """Delete the most recent messages in the channel."""
    try:
        deleted = store.bulk_delete(config.bulkclear_limit)
        message = f'Deleted {deleted} messages'
    except OperationFailure as e:
        logger.error(f'Bulk clear failed: {e}')
        message = f'Bulk clear failed: {e}'
    quick_reply(store, message, config.reply_timeout)
    return message


COMMANDS = {
    'ping': ping,
    'refresh': refresh,
    'bulkclear': bulkclear,
}


def run_command(name, store, config):
    """Run a command by name and return its status message."""
    handler = COMMANDS.get(name)
    if handler is None:
        raise ValueError(f'Unknown command: {name}')
    return handler(store, config)
