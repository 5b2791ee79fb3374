"""
Comparison of a feed vehicle against a posted record.
"""
from inventory_sync.models import MatchKind, Record, RenderedContent, Vehicle
from inventory_sync.render import COMPARED_FIELDS, render


def _same_content(rendered: RenderedContent, existing: RenderedContent) -> bool:
    for name in COMPARED_FIELDS:
        if name == 'vin':
            # stray whitespace only shows up on the VIN
            if rendered.vin.strip() != existing.vin.strip():
                return False
        elif getattr(rendered, name) != getattr(existing, name):
            return False
    return True


def compare(vehicle: Vehicle, record: Record) -> MatchKind:
    """
    Classify how a record relates to a vehicle.

    EXACT when every compared field agrees, PARTIAL when only the identity
    (trimmed VIN) agrees, NONE otherwise. Records without listing content
    never match.
    """
    if not record.is_listing:
        return MatchKind.NONE

    rendered = render(vehicle)
    if _same_content(rendered, record.content):
        return MatchKind.EXACT

    identity = vehicle.identity
    if identity is not None and identity == record.content.identity:
        return MatchKind.PARTIAL
    return MatchKind.NONE
