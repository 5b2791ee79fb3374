"""Tests for fetching the inventory feed; HTTP is faked."""

from __future__ import annotations

from dataclasses import replace

import pytest
import requests

from inventory_sync import feed
from inventory_sync.errors import FetchFailure

PAGE = """
<!-- Vehicle Start -->
<div data-vin="V1" data-name="2021 Ford Edge" data-bodystyle="Sport Utility" data-price="27000">
  <a class="h2" href="/used/V1.htm">2021 Ford Edge</a><img src="/photos/V1.jpg">
</div>
<!-- Vehicle End -->
"""


class FakeResponse:
    def __init__(self, text: str = "", status_code: int = 200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")


def _fake_get(response=None, exc=None):
    calls = []

    def fake_get(url, timeout=None, headers=None):
        calls.append({"url": url, "timeout": timeout, "headers": headers})
        if exc is not None:
            raise exc
        return response

    fake_get.calls = calls
    return fake_get


def test_fetch_inventory_returns_extracted_vehicles(monkeypatch, config) -> None:
    fake_get = _fake_get(FakeResponse(PAGE))
    monkeypatch.setattr(feed.requests, "get", fake_get)

    vehicles = feed.fetch_inventory(config)

    assert [vehicle.vin for vehicle in vehicles] == ["V1"]
    assert vehicles[0].price == "27,000"
    assert vehicles[0].image_url == "https://dealer.example.com/photos/V1.jpg"
    assert fake_get.calls[0]["url"] == config.cars_url
    assert fake_get.calls[0]["timeout"] == config.fetch_timeout


def test_http_error_is_a_fetch_failure(monkeypatch, config) -> None:
    monkeypatch.setattr(feed.requests, "get", _fake_get(FakeResponse("", status_code=503)))

    with pytest.raises(FetchFailure, match="503"):
        feed.fetch_inventory(config)


def test_network_error_is_a_fetch_failure(monkeypatch, config) -> None:
    monkeypatch.setattr(feed.requests, "get", _fake_get(exc=requests.ConnectionError("refused")))

    with pytest.raises(FetchFailure, match="refused"):
        feed.fetch_inventory(config)


def test_empty_inventory_is_a_fetch_failure(monkeypatch, config) -> None:
    """An empty page must never reach reconciliation, where it would delete everything."""
    monkeypatch.setattr(feed.requests, "get", _fake_get(FakeResponse("<html></html>")))

    with pytest.raises(FetchFailure, match="No vehicles"):
        feed.fetch_inventory(config)


def test_missing_url_is_a_fetch_failure(config) -> None:
    with pytest.raises(FetchFailure, match="CARS_URL"):
        feed.fetch_inventory(replace(config, cars_url=None))
