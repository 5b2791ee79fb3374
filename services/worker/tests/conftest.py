"""Shared pytest fixtures and local import resolution."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

WORKER_DIR = Path(__file__).resolve().parents[1]
worker_dir_str = str(WORKER_DIR)
if worker_dir_str not in sys.path:
    # Ensure tests can import `inventory_sync` and `scheduler` without installation.
    sys.path.insert(0, worker_dir_str)

from inventory_sync.config import SyncConfig  # noqa: E402
from inventory_sync.models import Record, Vehicle  # noqa: E402
from inventory_sync.render import render  # noqa: E402
from inventory_sync.store import InMemoryRecordStore  # noqa: E402

FEED_URL = "https://dealer.example.com/used-inventory/index.htm?type=suv"


def build_vehicle(vin: str = "1FMCU9H67LUA00001", **overrides: str) -> Vehicle:
    """Build a fully-populated vehicle with optional field overrides."""
    fields = {
        "vin": vin,
        "name": "2021 Ford Explorer XLT",
        "url": f"https://dealer.example.com/used/{vin}.htm",
        "image_url": f"https://dealer.example.com/photos/{vin}.jpg",
        "price": "32,995",
        "mileage": "21,450",
        "external_color": "Oxford White",
        "internal_color": "Ebony",
    }
    fields.update(overrides)
    return Vehicle(**fields)


def build_record(handle: str, vehicle: Vehicle) -> Record:
    """Build a record whose content is exactly what `vehicle` renders to."""
    return Record(handle=handle, content=render(vehicle))


@pytest.fixture
def make_vehicle():
    return build_vehicle


@pytest.fixture
def make_record():
    return build_record


@pytest.fixture
def config() -> SyncConfig:
    """Config pointing at a fake feed; status replies delete immediately."""
    return SyncConfig(cars_url=FEED_URL, reply_timeout=0)


@pytest.fixture
def store() -> InMemoryRecordStore:
    return InMemoryRecordStore()
