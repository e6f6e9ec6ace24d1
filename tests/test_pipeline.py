"""Tests for the region-by-region seeding driver."""

import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from allreview_seeder.catalog.gateway import DryRunCatalog
from allreview_seeder.catalog.models import Attribution
from allreview_seeder.catalog.rest import RestCatalog
from allreview_seeder.catalog.sqlite import SqliteCatalog
from allreview_seeder.config import Config, _deep_merge
from allreview_seeder.errors import CatalogError
from allreview_seeder.pipeline import SeedPipeline


class FakeDiscovery:
    def __init__(self, trends: dict):
        self.trends = trends
        self.calls = []

    def discover(self, region):
        self.calls.append(region)
        result = self.trends.get(region, [])
        if isinstance(result, Exception):
            raise result
        return list(result)


class FakeChain:
    def __init__(self, count: int = 3):
        self.count = count
        self.calls = []

    def resolve(self, topic):
        self.calls.append(topic)
        return [f"https://img.example.com/{topic}/{i}.jpg" for i in range(self.count)]


@pytest.fixture
def catalog():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield SqliteCatalog(Path(tmpdir) / "catalog.db")


def _make_config(overrides: dict | None = None) -> Config:
    config = Config.load("/nonexistent/config.yaml")
    if overrides:
        config._data = _deep_merge(config._data, overrides)
    return config


def _pipeline(discovery, chain, catalog, dry_run=False, overrides=None, sleeps=None):
    sleeps = sleeps if sleeps is not None else []
    return SeedPipeline(
        _make_config(overrides),
        discovery=discovery,
        chain=chain,
        catalog=catalog,
        dry_run=dry_run,
        sleep=sleeps.append,
    )


def test_seed_scenario_existing_and_new_topic(catalog):
    """Coffee already seeded in KR, Rain is new and gets 3 images."""
    coffee_id = catalog.insert_topic("Coffee", "KR")
    discovery = FakeDiscovery({"KR": ["Coffee", "Rain"], "US": []})
    chain = FakeChain(count=3)

    stats = _pipeline(discovery, chain, catalog).run(["KR", "US"])

    kr = stats.regions[0]
    assert kr.region == "KR"
    assert (kr.topics_inserted, kr.images_inserted, kr.topics_skipped) == (1, 3, 1)
    assert stats.topics_inserted == 1
    assert stats.images_inserted == 3
    assert chain.calls == ["Rain"]
    assert catalog.image_count(coffee_id) == 0
    assert catalog.topic_exists("Rain", "KR")
    assert discovery.calls == ["KR", "US"]


def test_second_run_inserts_nothing(catalog):
    discovery = FakeDiscovery({"KR": ["Coffee", "Rain"], "JP": ["Sumo"]})
    chain = FakeChain(count=4)

    first = _pipeline(discovery, chain, catalog).run(["KR", "JP"])
    second = _pipeline(discovery, chain, catalog).run(["KR", "JP"])

    assert (first.topics_inserted, first.images_inserted) == (3, 12)
    assert (second.topics_inserted, second.images_inserted) == (0, 0)
    assert chain.calls == ["Coffee", "Rain", "Sumo"]
    assert catalog.count_topics() == 3


def test_images_not_sourced_when_topic_already_has_images():
    catalog = MagicMock()
    catalog.topic_exists.return_value = False
    catalog.insert_topic.return_value = 7
    catalog.image_count.return_value = 5
    chain = FakeChain()

    stats = _pipeline(FakeDiscovery({"KR": ["Rain"]}), chain, catalog).run(["KR"])

    assert stats.topics_inserted == 1
    assert stats.images_inserted == 0
    assert chain.calls == []
    catalog.insert_images.assert_not_called()


def test_images_inserted_with_bot_attribution():
    catalog = MagicMock()
    catalog.topic_exists.return_value = False
    catalog.insert_topic.return_value = 7
    catalog.image_count.return_value = 0
    catalog.insert_images.return_value = 3

    _pipeline(FakeDiscovery({"KR": ["Rain"]}), FakeChain(3), catalog).run(["KR"])

    topic_id, urls, attribution = catalog.insert_images.call_args[0]
    assert topic_id == 7
    assert len(urls) == 3
    assert attribution == Attribution(name="Allreview Bot", region="GL")


def test_images_capped_at_per_topic(catalog):
    chain = FakeChain(count=40)
    stats = _pipeline(FakeDiscovery({"KR": ["Rain"]}), chain, catalog).run(["KR"])
    assert stats.images_inserted == 16


def test_region_failure_is_isolated(catalog):
    discovery = FakeDiscovery({
        "KR": ["Coffee"],
        "JP": RuntimeError("feed exploded"),
        "US": ["Baseball"],
    })

    stats = _pipeline(discovery, FakeChain(2), catalog).run(["KR", "JP", "US"])

    assert [r.region for r in stats.regions] == ["KR", "JP", "US"]
    assert stats.failed_regions == ["JP"]
    assert stats.regions[1].error == "feed exploded"
    assert stats.regions[0].topics_inserted == 1
    assert stats.regions[2].topics_inserted == 1
    assert stats.images_inserted == 4


def test_catalog_error_abandons_only_that_topic():
    catalog = MagicMock()
    catalog.topic_exists.return_value = False
    catalog.insert_topic.side_effect = [CatalogError("duplicate key", operation="insert_topic"), 2]
    catalog.image_count.return_value = 0
    catalog.insert_images.return_value = 3
    chain = FakeChain(3)

    stats = _pipeline(FakeDiscovery({"KR": ["Coffee", "Rain"]}), chain, catalog).run(["KR"])

    kr = stats.regions[0]
    assert kr.ok
    assert kr.topic_errors == ["Coffee: duplicate key"]
    assert kr.topics_inserted == 1
    assert kr.images_inserted == 3
    assert chain.calls == ["Rain"]


def test_garbled_store_response_abandons_only_that_topic():
    responses = [httpx.Response(200, text="<html>gateway</html>")]

    def handler(request: httpx.Request) -> httpx.Response:
        if responses:
            return responses.pop()
        if request.method == "HEAD":
            return httpx.Response(200, headers={"Content-Range": "*/0"})
        if request.method == "POST" and request.url.path.endswith("/keywords"):
            return httpx.Response(201, json=[{"id": 7}])
        if request.method == "POST":
            return httpx.Response(201)
        return httpx.Response(200, json=[])

    client = httpx.Client(transport=httpx.MockTransport(handler))
    catalog = RestCatalog("https://demo.supabase.co", "service-key", client=client)
    chain = FakeChain(2)

    stats = _pipeline(FakeDiscovery({"KR": ["Coffee", "Rain"]}), chain, catalog).run(["KR"])

    kr = stats.regions[0]
    assert kr.ok
    assert len(kr.topic_errors) == 1
    assert kr.topic_errors[0].startswith("Coffee: topic_exists failed")
    assert kr.topics_inserted == 1
    assert kr.images_inserted == 2
    assert chain.calls == ["Rain"]


def test_every_region_failing_still_completes():
    discovery = FakeDiscovery({"KR": RuntimeError("down"), "US": RuntimeError("down")})
    stats = _pipeline(discovery, FakeChain(), MagicMock()).run(["KR", "US"])
    assert stats.failed_regions == ["KR", "US"]
    assert (stats.topics_inserted, stats.images_inserted) == (0, 0)


def test_empty_discovery_is_not_an_error(catalog):
    stats = _pipeline(FakeDiscovery({}), FakeChain(), catalog).run(["KR"])
    assert stats.regions[0].ok
    assert stats.regions[0].trends_found == 0


def test_dry_run_sources_every_topic():
    chain = FakeChain(3)
    discovery = FakeDiscovery({"KR": ["Coffee", "Rain"], "US": ["Baseball"]})

    stats = _pipeline(discovery, chain, DryRunCatalog(), dry_run=True).run(["KR", "US"])

    assert stats.dry_run is True
    assert (stats.topics_inserted, stats.images_inserted) == (3, 9)
    assert chain.calls == ["Coffee", "Rain", "Baseball"]
    assert stats.failed_regions == []


def test_rate_limit_sleeps(catalog):
    sleeps = []
    discovery = FakeDiscovery({"KR": ["Coffee", "Rain"], "US": ["Baseball"]})
    _pipeline(discovery, FakeChain(1), catalog, sleeps=sleeps).run(["KR", "US"])
    assert sleeps == [0.5, 0.5, 1.0, 0.5, 1.0]


def test_rate_limit_from_config(catalog):
    sleeps = []
    overrides = {"rate_limit": {"topic_delay_seconds": 0, "region_delay_seconds": 2}}
    _pipeline(FakeDiscovery({"KR": ["Coffee"]}), FakeChain(1), catalog, overrides=overrides, sleeps=sleeps).run(["KR"])
    assert sleeps == [0.0, 2.0]


def test_run_defaults_to_configured_regions(catalog):
    discovery = FakeDiscovery({})
    _pipeline(discovery, FakeChain(), catalog, overrides={"regions": ["kr", "JP"]}).run()
    assert discovery.calls == ["KR", "JP"]
