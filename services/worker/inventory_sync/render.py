"""
Rendering of vehicles into embed payloads, and parsing payloads back.

The embed layout mirrors a Discord embed: title, url, image, color and an
ordered list of labeled fields.
"""
from datetime import datetime
from typing import Optional

from inventory_sync.models import RenderedContent, Vehicle

# (label, RenderedContent attribute, inline) in display order
FIELD_LAYOUT = (
    ('Price', 'price', False),
    ('Mileage', 'mileage', False),
    ('External Color', 'external_color', True),
    ('Internal Color', 'internal_color', True),
    ('VIN', 'vin', True),
)

COMPARED_FIELDS = (
    'title', 'url', 'image_url', 'price', 'mileage',
    'external_color', 'internal_color', 'vin',
)


def render(vehicle: Vehicle) -> RenderedContent:
    """Project a vehicle onto its displayable (and comparable) content."""
    return RenderedContent(
        title=vehicle.name,
        url=vehicle.url,
        image_url=vehicle.image_url,
        price=vehicle.price,
        mileage=vehicle.mileage,
        external_color=vehicle.external_color,
        internal_color=vehicle.internal_color,
        vin=vehicle.vin,
    )


def embed_color(now: Optional[datetime] = None) -> int:
    """
    Color derived from the wall clock: HHMMSS read as a hex RGB value.

    New and updated embeds from one run share a color that differs from
    earlier runs, so they stand out in the channel.
    """
    now = now or datetime.now()
    return int(now.strftime('%H%M%S'), 16)


def to_embed(content: RenderedContent, color: Optional[int] = None) -> dict:
    """Build the embed payload posted to the record store."""
    embed = {
        'title': content.title,
        'url': content.url,
        'image': {'url': content.image_url},
        'fields': [
            {'name': label, 'value': getattr(content, attr), 'inline': inline}
            for label, attr, inline in FIELD_LAYOUT
        ],
    }
    if color is not None:
        embed['color'] = color
    return embed


def content_from_embed(embed) -> Optional[RenderedContent]:
    """
    Parse a stored embed back into RenderedContent.

    Fields are looked up by label, so reordered or extra fields do not shift
    values. Missing values come back as empty strings, which never compare
    equal to rendered content.
    """
    if not isinstance(embed, dict):
        return None

    values = {}
    for field in embed.get('fields') or []:
        if isinstance(field, dict) and field.get('name') is not None:
            values.setdefault(field['name'], field.get('value') or '')

    image = embed.get('image')
    image_url = image.get('url') if isinstance(image, dict) else None
    kwargs = {attr: values.get(label, '') for label, attr, _ in FIELD_LAYOUT}
    return RenderedContent(
        title=embed.get('title') or '',
        url=embed.get('url') or '',
        image_url=image_url or '',
        **kwargs,
    )
