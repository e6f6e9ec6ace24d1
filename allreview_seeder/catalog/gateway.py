"""Catalog gateway contract, the dry-run gateway, and the backend factory."""

from __future__ import annotations

import itertools
from typing import Protocol, runtime_checkable

import httpx

from allreview_seeder.catalog.models import Attribution
from allreview_seeder.config import Config
from allreview_seeder.errors import ConfigurationError
from allreview_seeder.utils.logger import get_logger

logger = get_logger()

TopicId = int | str


@runtime_checkable
class CatalogGateway(Protocol):
    """Operations the seeding pipeline needs from the shared catalog.

    Implementations raise CatalogError when the store call fails.
    """

    def topic_exists(self, name: str, region: str) -> bool: ...

    def insert_topic(self, name: str, region: str) -> TopicId: ...

    def image_count(self, topic_id: TopicId) -> int: ...

    def insert_images(self, topic_id: TopicId, urls: list[str], attribution: Attribution) -> int: ...


class DryRunCatalog:
    """Gateway that never touches a store.

    Reads behave as an empty catalog so every discovered topic goes down the
    full sourcing path; writes are logged and reported as successful.
    """

    def __init__(self):
        self._ids = itertools.count(1)

    def topic_exists(self, name: str, region: str) -> bool:
        return False

    def insert_topic(self, name: str, region: str) -> int:
        topic_id = next(self._ids)
        logger.info("[DRY] Would insert topic: \"%s\" (%s)", name, region)
        return topic_id

    def image_count(self, topic_id: TopicId) -> int:
        return 0

    def insert_images(self, topic_id: TopicId, urls: list[str], attribution: Attribution) -> int:
        logger.info("[DRY] Would insert %d images as %s", len(urls), attribution.name)
        return len(urls)


def create_catalog(config: Config, dry_run: bool = False, client: httpx.Client | None = None) -> CatalogGateway:
    """Build the gateway for this run. Dry runs never need credentials."""
    if dry_run:
        return DryRunCatalog()

    backend = config.get("catalog.backend", default="rest")
    if backend == "sqlite":
        from allreview_seeder.catalog.sqlite import SqliteCatalog

        return SqliteCatalog(config.sqlite_path)
    if backend == "rest":
        from allreview_seeder.catalog.rest import RestCatalog

        url, key = config.require_catalog_credentials()
        return RestCatalog(
            url,
            key,
            topics_table=config.get("catalog.topics_table", default="keywords"),
            images_table=config.get("catalog.images_table", default="images"),
            client=client,
            timeout=config.get("http.timeout", default=30),
        )
    raise ConfigurationError(f"Unknown catalog backend '{backend}' (expected 'rest' or 'sqlite')")
