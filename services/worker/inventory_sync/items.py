"""
Scrapy items for vehicle listings.
"""
import scrapy


class VehicleItem(scrapy.Item):
    """A single vehicle listing scraped from the dealer inventory page."""
    vin = scrapy.Field()  # Identity
    name = scrapy.Field()  # Embed title
    url = scrapy.Field()  # Listing detail page
    image_url = scrapy.Field()  # Absolute URL
    price = scrapy.Field()  # Thousands-separated, e.g. "24,995"
    mileage = scrapy.Field()
    external_color = scrapy.Field()
    internal_color = scrapy.Field()
    body_style = scrapy.Field()  # Only used for filtering
