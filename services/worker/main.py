"""
Worker entry point: runs one command against the configured channel,
or keeps refreshing it on a schedule.

    python main.py ping|refresh|bulkclear
    python main.py watch
    python main.py crawl
"""
import argparse
import logging
import os
import sys
import threading
from dataclasses import replace

# Add the worker directory to Python path so the package and Scrapy project resolve
worker_dir = os.path.dirname(os.path.abspath(__file__))
if worker_dir not in sys.path:
    sys.path.insert(0, worker_dir)

from scrapy.crawler import CrawlerProcess
from scrapy.utils.project import get_project_settings

from inventory_sync.commands import COMMANDS, run_command
from inventory_sync.config import SyncConfig
from inventory_sync.errors import StoreReadFailure
from inventory_sync.store import get_record_store
from scheduler import start_scheduler


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description='Sync posted vehicle listings with the dealer inventory.')
    parser.add_argument(
        'command',
        choices=sorted(COMMANDS) + ['crawl', 'watch'],
        help='Command to run; "watch" refreshes every REFRESH_INTERVAL seconds, '
             '"crawl" runs the refresh through the Scrapy spider',
    )
    return parser.parse_args(argv)


def watch(store, config):
    """Run the scheduler until interrupted."""
    stop_event = threading.Event()
    thread = start_scheduler(store, replace(config, scheduler_enabled=True), stop_event)
    try:
        while thread.is_alive():
            thread.join(timeout=1)
    except KeyboardInterrupt:
        print('Stopping scheduler...')
        stop_event.set()
        thread.join()


def crawl(config):
    """Run the inventory spider once; ReconcilePipeline syncs the channel on close."""
    os.environ.setdefault('SCRAPY_SETTINGS_MODULE', 'inventory_sync.settings')
    settings = get_project_settings()
    settings.set('LOG_LEVEL', config.log_level)

    process = CrawlerProcess(settings)
    process.crawl('inventory', config=config)
    process.start()


def main(argv=None):
    """Entrypoint for command-line execution."""
    args = _parse_args(argv)
    config = SyncConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    if args.command == 'crawl':
        crawl(config)
        return 0

    print(f'Using {config.store_type} record store')
    try:
        store = get_record_store(config)
    except StoreReadFailure as e:
        print(f'Could not open record store: {e}')
        return 1

    if args.command == 'watch':
        watch(store, config)
        return 0

    run_command(args.command, store, config)
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
