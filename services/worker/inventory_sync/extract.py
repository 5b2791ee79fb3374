"""
Extraction of vehicle listings from the dealer inventory page.

Listings sit between `<!-- Vehicle Start -->` and `<!-- Vehicle End -->`
comments. Each segment's first div carries the vehicle data as data-*
attributes; the link and photo come from the markup inside it.
"""
import logging
import re
from decimal import Decimal
from typing import Iterator, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from inventory_sync.config import FilterPolicy
from inventory_sync.items import VehicleItem
from inventory_sync.models import Vehicle

logger = logging.getLogger(__name__)

SEGMENT_RE = re.compile(r'<!-- Vehicle Start -->(.*?)<!-- Vehicle End -->', re.S)

# Only the canonical spelling of a number is read as one; "024995", " 24995 "
# and "1e5" stay text.
CANONICAL_NUMBER_RE = re.compile(r'-?(?:0|[1-9]\d*)(?:\.\d*[1-9])?')


def split_segments(html: str) -> list[str]:
    """Return the trimmed markup of every vehicle segment, in page order."""
    return [match.group(1).strip() for match in SEGMENT_RE.finditer(html or '')]


def site_base_url(feed_url: str) -> str:
    """Scheme and host of the feed URL, used to absolutize image paths."""
    parsed = urlparse(feed_url)
    return f'{parsed.scheme}://{parsed.netloc}'


def format_number(value: Optional[str]) -> Optional[str]:
    """
    Add thousands separators to numeric strings ("24995" -> "24,995").
    Anything that is not a canonical number string is returned unchanged.
    """
    if value is None or not CANONICAL_NUMBER_RE.fullmatch(value):
        return value
    number = Decimal(value)
    if number == number.to_integral_value():
        return f'{int(number):,}'
    return f'{number:,.3f}'.rstrip('0').rstrip('.')


def parse_segment(segment: str, base_url: str) -> Optional[VehicleItem]:
    """Parse one vehicle segment into a VehicleItem, or None if it has no data div."""
    soup = BeautifulSoup(segment, 'html.parser')
    main_div = soup.find('div')
    if main_div is None:
        return None

    link = soup.select_one('a.h2')
    image = soup.find('img')
    image_src = image.get('src') if image else None

    item = VehicleItem()
    item['vin'] = main_div.get('data-vin')
    item['name'] = main_div.get('data-name')
    item['url'] = link.get('href') if link else None
    item['image_url'] = urljoin(base_url, image_src) if image_src else None
    item['price'] = format_number(main_div.get('data-price'))
    item['mileage'] = format_number(main_div.get('data-mileage'))
    item['external_color'] = main_div.get('data-extcolor')
    item['internal_color'] = main_div.get('data-intcolor')
    item['body_style'] = main_div.get('data-bodystyle')
    return item


def iter_vehicle_items(html: str, feed_url: str, policy: FilterPolicy) -> Iterator[VehicleItem]:
    """Yield VehicleItems for every segment accepted by the filter policy."""
    base_url = site_base_url(feed_url)
    for segment in split_segments(html):
        item = parse_segment(segment, base_url)
        if item is None:
            logger.debug('Skipping vehicle segment without a data div')
            continue
        if not policy.accepts(item.get('name'), item.get('body_style')):
            logger.debug(f"Filtered out {item.get('name')} ({item.get('body_style')})")
            continue
        yield item


def extract_vehicles(html: str, feed_url: str, policy: Optional[FilterPolicy] = None) -> list[Vehicle]:
    """Extract the filtered vehicles of an inventory page, in page order."""
    policy = policy or FilterPolicy()
    return [Vehicle.from_item(item) for item in iter_vehicle_items(html, feed_url, policy)]
