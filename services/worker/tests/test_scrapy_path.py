"""Tests for the spider and the reconcile pipeline, without running a crawl."""

from __future__ import annotations

from scrapy.http import HtmlResponse, Request

from inventory_sync.items import VehicleItem
from inventory_sync.pipelines import ReconcilePipeline
from inventory_sync.render import render, to_embed
from inventory_sync.spiders.inventory_spider import InventorySpider

PAGE = """
<html><body>
<!-- Vehicle Start -->
<div data-vin="V1" data-name="2021 Ford Explorer XLT" data-bodystyle="Sport Utility" data-price="32995">
  <a class="h2" href="https://dealer.example.com/used/V1.htm">Explorer</a><img src="/photos/V1.jpg">
</div>
<!-- Vehicle End -->
<!-- Vehicle Start -->
<div data-vin="V2" data-name="2020 Ford EcoSport SE" data-bodystyle="Sport Utility" data-price="17500">
  <a class="h2" href="https://dealer.example.com/used/V2.htm">EcoSport</a><img src="/photos/V2.jpg">
</div>
<!-- Vehicle End -->
</body></html>
"""


def _response(url: str, body: str) -> HtmlResponse:
    return HtmlResponse(url=url, body=body.encode("utf-8"), encoding="utf-8", request=Request(url))


def test_spider_yields_filtered_vehicle_items(config) -> None:
    spider = InventorySpider(config=config)

    items = list(spider.parse(_response(config.cars_url, PAGE)))

    assert len(items) == 1
    assert isinstance(items[0], VehicleItem)
    assert items[0]["vin"] == "V1"
    assert items[0]["price"] == "32,995"
    assert items[0]["image_url"] == "https://dealer.example.com/photos/V1.jpg"


def test_spider_requests_configured_url(config) -> None:
    requests = list(InventorySpider(config=config).start_requests())

    assert [request.url for request in requests] == [config.cars_url]


def test_spider_page_without_segments_yields_nothing(config) -> None:
    spider = InventorySpider(config=config)
    assert list(spider.parse(_response(config.cars_url, "<html></html>"))) == []


def test_pipeline_reconciles_after_crawl(config, store, make_vehicle) -> None:
    store.create(to_embed(render(make_vehicle("V9")), 1))
    pipeline = ReconcilePipeline(config=config, store=store)
    spider = InventorySpider(config=config)

    pipeline.open_spider(spider)
    for item in spider.parse(_response(config.cars_url, PAGE)):
        assert pipeline.process_item(item, spider) is item
    # Nothing is written while the crawl is still running
    assert len(store.messages) == 1

    pipeline.close_spider(spider)

    assert pipeline.report.changes == 2
    vins = [message["embeds"][0]["fields"][4]["value"] for message in store.messages]
    assert vins == ["V1"]


def test_pipeline_skips_reconcile_for_empty_crawl(config, store, make_vehicle) -> None:
    """A failed or empty crawl must not delete the posted listings."""
    store.create(to_embed(render(make_vehicle("V9")), 1))
    pipeline = ReconcilePipeline(config=config, store=store)

    pipeline.open_spider()
    pipeline.close_spider()

    assert pipeline.report is None
    assert len(store.messages) == 1


def test_pipeline_skips_reconcile_when_fetch_failed(config, store, make_vehicle) -> None:
    """Items scraped before a failed request must not prune the channel."""
    store.create(to_embed(render(make_vehicle("V9")), 1))
    pipeline = ReconcilePipeline(config=config, store=store)
    spider = InventorySpider(config=config)

    pipeline.open_spider(spider)
    for item in spider.parse(_response(config.cars_url, PAGE)):
        pipeline.process_item(item, spider)
    spider.fetch_failed = True
    pipeline.close_spider(spider)

    assert pipeline.report is None
    vins = [message["embeds"][0]["fields"][4]["value"] for message in store.messages]
    assert vins == ["V9"]


def test_spider_errback_marks_fetch_failed(config) -> None:
    spider = InventorySpider(config=config)

    class FakeFailure:
        request = Request(config.cars_url)
        value = "DNS lookup failed"

    spider.handle_error(FakeFailure())

    assert spider.fetch_failed is True
