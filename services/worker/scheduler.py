"""
Scheduler module for automatically refreshing the posted listings.
Runs in a separate thread and triggers a refresh every REFRESH_INTERVAL seconds.
"""
import threading
import traceback

from inventory_sync.commands import refresh

ERROR_BACKOFF = 60  # seconds to wait after an unexpected error


def scheduler_loop(store, config, stop_event=None):
    """Main scheduler loop that refreshes every config.refresh_interval seconds."""
    stop_event = stop_event or threading.Event()
    print(f'Scheduler started: Refreshing listings every {config.refresh_interval} seconds')

    while not stop_event.is_set():
        try:
            message = refresh(store, config)
            print(f'Scheduled refresh: {message}')
            wait = config.refresh_interval
        except Exception as e:
            print(f'Scheduler error: {e}')
            traceback.print_exc()
            wait = ERROR_BACKOFF
        stop_event.wait(wait)

    print('Scheduler stopped')


def start_scheduler(store, config, stop_event=None):
    """Start scheduler in a background thread. Returns the thread, or None when disabled."""
    if not config.scheduler_enabled:
        print('Scheduler is disabled (SCHEDULER_ENABLED=false)')
        return None

    scheduler_thread = threading.Thread(
        target=scheduler_loop,
        args=(store, config, stop_event),
        daemon=True,
    )
    scheduler_thread.start()
    print('Scheduler thread started')
    return scheduler_thread
