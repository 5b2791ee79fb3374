"""Tests for extracting vehicles from the dealer inventory page."""

from __future__ import annotations

import pytest

from inventory_sync.config import FilterPolicy
from inventory_sync.extract import (
    extract_vehicles,
    format_number,
    parse_segment,
    site_base_url,
    split_segments,
)
from inventory_sync.models import NOT_LISTED

FEED_URL = "https://dealer.example.com/used-inventory/index.htm?bodyStyle=suv"


def _segment(
    *,
    vin: str,
    name: str,
    body_style: str = "Sport Utility",
    price: str = "32995",
    mileage: str = "21450",
    intcolor: str | None = "Ebony",
    image: str = "/photos/explorer.jpg",
) -> str:
    intcolor_attr = f' data-intcolor="{intcolor}"' if intcolor is not None else ""
    return f"""
<!-- Vehicle Start -->
  <div class="vehicle-card" data-vin="{vin}" data-name="{name}" data-bodystyle="{body_style}"
       data-price="{price}" data-mileage="{mileage}" data-extcolor="Oxford White"{intcolor_attr}>
    <a class="h2" href="https://dealer.example.com/used/{vin}.htm">{name}</a>
    <img src="{image}" alt="{name}">
  </div>
<!-- Vehicle End -->
"""


PAGE = (
    "<html><body><h1>Used inventory</h1>"
    + _segment(vin="1FMSK8DH5MGA00001", name="2021 Ford Explorer XLT")
    + _segment(vin="3FA6P0H72KR000002", name="2019 Ford Fusion SE", body_style="Sedan")
    + _segment(vin="1FMCU9G63LUA00003", name="2020 Ford Escape SE")
    + _segment(vin=" 1FMEE5DP1NLA00004 ", name="2022 Ford Bronco Big Bend", intcolor=None, price="Call")
    + "</body></html>"
)


def test_split_segments_returns_trimmed_markup_in_page_order() -> None:
    segments = split_segments(PAGE)

    assert len(segments) == 4
    assert segments[0].startswith("<div")
    assert segments[0].endswith("</div>")
    assert split_segments("<html>no vehicles</html>") == []


def test_default_policy_keeps_suvs_and_drops_excluded_names() -> None:
    """Sedans and Ford Escapes are filtered out; order follows the page."""
    vehicles = extract_vehicles(PAGE, FEED_URL)

    assert [vehicle.name for vehicle in vehicles] == [
        "2021 Ford Explorer XLT",
        "2022 Ford Bronco Big Bend",
    ]


def test_extracted_fields_are_formatted() -> None:
    explorer, bronco = extract_vehicles(PAGE, FEED_URL)

    assert explorer.vin == "1FMSK8DH5MGA00001"
    assert explorer.url == "https://dealer.example.com/used/1FMSK8DH5MGA00001.htm"
    assert explorer.image_url == "https://dealer.example.com/photos/explorer.jpg"
    assert explorer.price == "32,995"
    assert explorer.mileage == "21,450"
    assert explorer.external_color == "Oxford White"
    assert explorer.internal_color == "Ebony"

    # Stray VIN whitespace is kept as scraped; matching trims it.
    assert bronco.vin == " 1FMEE5DP1NLA00004 "
    assert bronco.identity == "1FMEE5DP1NLA00004"
    assert bronco.price == "Call"
    assert bronco.internal_color == NOT_LISTED


def test_policy_without_filters_keeps_everything() -> None:
    vehicles = extract_vehicles(PAGE, FEED_URL, FilterPolicy(category=None, name_exclusions=frozenset()))
    assert len(vehicles) == 4


def test_segment_without_data_div_is_skipped() -> None:
    assert parse_segment("<p>Sold</p>", "https://dealer.example.com") is None
    assert extract_vehicles("<!-- Vehicle Start --><p>Sold</p><!-- Vehicle End -->", FEED_URL) == []


def test_missing_image_renders_not_listed() -> None:
    item = parse_segment('<div data-vin="V1" data-name="Edge"></div>', "https://dealer.example.com")

    assert item["image_url"] is None
    assert item["url"] is None
    assert item["price"] is None


def test_site_base_url_strips_path_and_query() -> None:
    assert site_base_url(FEED_URL) == "https://dealer.example.com"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("24995", "24,995"),
        ("1234567", "1,234,567"),
        ("999", "999"),
        ("15999.5", "15,999.5"),
        ("15999.50", "15999.50"),
        ("024995", "024995"),
        (" 24995 ", " 24995 "),
        ("1e5", "1e5"),
        ("Call for price", "Call for price"),
        ("", ""),
        (None, None),
    ],
)
def test_format_number(raw, expected) -> None:
    assert format_number(raw) == expected
