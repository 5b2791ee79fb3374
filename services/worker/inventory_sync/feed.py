"""
Fetching of the dealer inventory feed.
"""
import logging

import requests

from inventory_sync.config import SyncConfig
from inventory_sync.errors import FetchFailure
from inventory_sync.extract import extract_vehicles
from inventory_sync.models import Vehicle

logger = logging.getLogger(__name__)

USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36'


def fetch_feed(url: str, timeout: int = 15) -> str:
    """Download the inventory page. Raises FetchFailure on any HTTP or network error."""
    if not url:
        raise FetchFailure('CARS_URL is not configured')
    try:
        response = requests.get(url, timeout=timeout, headers={'User-Agent': USER_AGENT})
        response.raise_for_status()
    except requests.RequestException as e:
        raise FetchFailure(f'Failed to fetch {url}: {e}') from e
    return response.text


def fetch_inventory(config: SyncConfig) -> list[Vehicle]:
    """
    Fetch and extract the current inventory.

    An empty result is treated as a failed fetch: reconciling against it
    would delete every posted listing.
    """
    html = fetch_feed(config.cars_url, timeout=config.fetch_timeout)
    vehicles = extract_vehicles(html, config.cars_url, config.filter_policy)
    if not vehicles:
        raise FetchFailure(f'No vehicles found at {config.cars_url}')
    logger.info(f'Fetched {len(vehicles)} vehicle(s) from {config.cars_url}')
    return vehicles
