"""
Scrapy pipelines for processing vehicle items.
"""
from inventory_sync.config import SyncConfig
from inventory_sync.errors import FetchFailure, StoreReadFailure
from inventory_sync.models import Vehicle
from inventory_sync.store import get_record_store
from inventory_sync.sync import sync_vehicles


class ReconcilePipeline:
    """
    Pipeline that collects every scraped vehicle and, when the spider closes,
    reconciles the record store against the full crawl.
    """

    def __init__(self, config=None, store=None):
        self.config = config
        self.store = store
        self.vehicles = []
        self.report = None

    @classmethod
    def from_crawler(cls, crawler):
        """Create pipeline instance from crawler (Scrapy's standard way)."""
        return cls()

    def open_spider(self, spider=None):
        """Load config and the record store when the spider starts."""
        if self.config is None:
            self.config = getattr(spider, 'config', None) or SyncConfig.from_env()
        if self.store is None:
            self.store = get_record_store(self.config)
        self.vehicles = []

    def process_item(self, item, spider=None):
        """Remember the vehicle; nothing is written until the crawl is complete."""
        self.vehicles.append(Vehicle.from_item(item))
        return item

    def close_spider(self, spider=None):
        """Reconcile the store against everything the crawl produced."""
        log = spider.logger if spider else None
        if getattr(spider, 'fetch_failed', False):
            msg = 'ReconcilePipeline: Skipping reconciliation: inventory page could not be fetched'
            if log:
                log.error(msg)
            else:
                print(msg)
            return

        try:
            self.report = sync_vehicles(
                self.store,
                self.vehicles,
                record_limit=self.config.record_limit,
                prune_stale=self.config.prune_stale,
            )
        except (FetchFailure, StoreReadFailure) as e:
            msg = f'ReconcilePipeline: Skipping reconciliation: {e}'
            if log:
                log.error(msg)
            else:
                print(msg)
            return

        msg = f'ReconcilePipeline: {self.report.summary()}'
        if log:
            log.info(msg)
        else:
            print(msg)
