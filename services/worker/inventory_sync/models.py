"""
Core data models shared by extraction, rendering and reconciliation.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

NOT_LISTED = 'Not listed'


def _or_not_listed(value) -> str:
    """Collapse missing/empty values to the NOT_LISTED sentinel."""
    if value is None:
        return NOT_LISTED
    text = str(value)
    return text if text else NOT_LISTED


@dataclass(frozen=True)
class Vehicle:
    """A single vehicle listing from the inventory feed."""
    vin: str = NOT_LISTED
    name: str = NOT_LISTED
    url: str = NOT_LISTED
    image_url: str = NOT_LISTED
    price: str = NOT_LISTED
    mileage: str = NOT_LISTED
    external_color: str = NOT_LISTED
    internal_color: str = NOT_LISTED

    def __post_init__(self):
        for name in self.__dataclass_fields__:
            object.__setattr__(self, name, _or_not_listed(getattr(self, name)))

    @property
    def identity(self) -> Optional[str]:
        """Trimmed VIN, or None when the listing carries no VIN."""
        return normalize_identity(self.vin)

    @classmethod
    def from_item(cls, item) -> 'Vehicle':
        """Build a Vehicle from a VehicleItem (or any mapping with the same keys)."""
        return cls(**{name: item.get(name) for name in cls.__dataclass_fields__})


def normalize_identity(value: Optional[str]) -> Optional[str]:
    """Trim stray whitespace from a VIN; absent or sentinel values become None."""
    if value is None:
        return None
    trimmed = value.strip()
    if not trimmed or trimmed == NOT_LISTED:
        return None
    return trimmed


@dataclass(frozen=True)
class RenderedContent:
    """
    Canonical displayable representation of a listing.

    This is also the comparison projection: everything here takes part in
    equality checks, so presentation-only attributes (embed color) live
    outside of it.
    """
    title: str
    url: str
    image_url: str
    price: str
    mileage: str
    external_color: str
    internal_color: str
    vin: str

    @property
    def identity(self) -> Optional[str]:
        return normalize_identity(self.vin)


@dataclass(frozen=True)
class Record:
    """A previously-posted message in the record store."""
    handle: str
    content: Optional[RenderedContent] = None

    @property
    def is_listing(self) -> bool:
        """Whether the message carries renderable listing content."""
        return self.content is not None


class MatchKind(Enum):
    EXACT = 'EXACT'
    PARTIAL = 'PARTIAL'
    NONE = 'NONE'


class OperationKind(Enum):
    NOOP = 'NOOP'
    CREATE = 'CREATE'
    UPDATE = 'UPDATE'
    DELETE = 'DELETE'


@dataclass(frozen=True)
class Operation:
    """
    One reconciliation intent.

    - NOOP: vehicle and record already agree
    - CREATE: vehicle has no record yet
    - UPDATE: record is the same vehicle with stale content
    - DELETE: record has no vehicle in the current feed
    """
    kind: OperationKind
    vehicle: Optional[Vehicle] = None
    record: Optional[Record] = None

    @classmethod
    def noop(cls, vehicle: Vehicle, record: Record) -> 'Operation':
        return cls(OperationKind.NOOP, vehicle=vehicle, record=record)

    @classmethod
    def create(cls, vehicle: Vehicle) -> 'Operation':
        return cls(OperationKind.CREATE, vehicle=vehicle)

    @classmethod
    def update(cls, record: Record, vehicle: Vehicle) -> 'Operation':
        return cls(OperationKind.UPDATE, vehicle=vehicle, record=record)

    @classmethod
    def delete(cls, record: Record) -> 'Operation':
        return cls(OperationKind.DELETE, record=record)

    @property
    def is_change(self) -> bool:
        return self.kind is not OperationKind.NOOP

    def describe(self) -> str:
        """Short human-readable label used in logs."""
        if self.vehicle is not None:
            return f'{self.kind.value} {self.vehicle.vin} ({self.vehicle.name})'
        return f'{self.kind.value} record {self.record.handle}'
