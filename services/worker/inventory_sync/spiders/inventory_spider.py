"""
Inventory spider for the dealer's vehicle listing page.
"""
import scrapy

from inventory_sync.config import SyncConfig
from inventory_sync.extract import iter_vehicle_items, split_segments


class InventorySpider(scrapy.Spider):
    """
    Spider that scrapes the inventory page configured in CARS_URL.
    Filtering follows the configured FilterPolicy (category and name exclusions).
    """
    name = 'inventory'

    def __init__(self, cars_url=None, config=None, *args, **kwargs):
        super(InventorySpider, self).__init__(*args, **kwargs)
        self.config = config or SyncConfig.from_env()
        self.cars_url = cars_url or self.config.cars_url
        self.fetch_failed = False
        self.logger.info(f'Spider initialized for {self.cars_url}')

    def start_requests(self):
        """Request the inventory page."""
        if not self.cars_url:
            self.logger.warning('No CARS_URL configured')
            return
        yield scrapy.Request(url=self.cars_url, callback=self.parse, errback=self.handle_error)

    def parse(self, response):
        """Yield one VehicleItem per accepted listing segment."""
        segments = split_segments(response.text)
        if not segments:
            self.logger.warning(f'No vehicle segments found on {response.url}')
            return

        count = 0
        for item in iter_vehicle_items(response.text, self.cars_url, self.config.filter_policy):
            count += 1
            yield item
        self.logger.info(f'Kept {count} of {len(segments)} vehicles on {response.url}')

    def handle_error(self, failure):
        """Record a failed fetch; the pipeline will see an empty crawl and skip reconciling."""
        self.fetch_failed = True
        self.logger.error(f'Failed to fetch {failure.request.url}: {failure.value}')
