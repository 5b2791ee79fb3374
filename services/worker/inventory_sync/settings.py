"""
Scrapy settings for inventory_sync project.
"""
BOT_NAME = 'inventory_sync'

SPIDER_MODULES = ['inventory_sync.spiders']
NEWSPIDER_MODULE = 'inventory_sync.spiders'

# The inventory page is a single public listing page
ROBOTSTXT_OBEY = False

# Collect the crawl, then reconcile once the spider closes
ITEM_PIPELINES = {
    'inventory_sync.pipelines.ReconcilePipeline': 300,
}

# One page per run, fetched once
CONCURRENT_REQUESTS = 1
DOWNLOAD_TIMEOUT = 15

# Retry transient errors; a failed fetch must not look like an empty inventory
RETRY_ENABLED = True
RETRY_TIMES = 3
RETRY_HTTP_CODES = [408, 429, 500, 502, 503, 504]

USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36'

# Logging
LOG_LEVEL = 'INFO'
