"""Region-by-region seeding run: trends -> idempotency gates -> images -> catalog."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable

from allreview_seeder.catalog.gateway import CatalogGateway
from allreview_seeder.catalog.models import Attribution, bot_attribution
from allreview_seeder.config import Config
from allreview_seeder.errors import CatalogError
from allreview_seeder.images.chain import ProviderChain
from allreview_seeder.trends.discovery import TrendDiscovery
from allreview_seeder.utils.logger import get_logger

logger = get_logger()


@dataclass
class RegionOutcome:
    """What happened to one region during a run."""

    region: str
    trends_found: int = 0
    topics_inserted: int = 0
    topics_skipped: int = 0
    images_inserted: int = 0
    error: str | None = None
    topic_errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class RunStats:
    """Counters for one invocation. Never persisted."""

    dry_run: bool = False
    regions: list[RegionOutcome] = field(default_factory=list)

    @property
    def topics_inserted(self) -> int:
        return sum(r.topics_inserted for r in self.regions)

    @property
    def images_inserted(self) -> int:
        return sum(r.images_inserted for r in self.regions)

    @property
    def failed_regions(self) -> list[str]:
        return [r.region for r in self.regions if not r.ok]


class SeedPipeline:
    """Sequential seeding driver. One region, one topic, one provider at a time."""

    def __init__(
        self,
        config: Config,
        discovery: TrendDiscovery,
        chain: ProviderChain,
        catalog: CatalogGateway,
        dry_run: bool = False,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config
        self.discovery = discovery
        self.chain = chain
        self.catalog = catalog
        self.dry_run = dry_run
        self.sleep = sleep
        self.attribution: Attribution = bot_attribution(config)
        self.images_per_topic = config.images_per_topic
        self.topic_delay = float(config.rate_limit.get("topic_delay_seconds", 0.5))
        self.region_delay = float(config.rate_limit.get("region_delay_seconds", 1.0))

    def run(self, regions: list[str] | None = None) -> RunStats:
        regions = list(regions) if regions is not None else self.config.regions
        stats = RunStats(dry_run=self.dry_run)
        logger.info("Seed run starting for %d regions%s", len(regions), " (DRY RUN)" if self.dry_run else "")

        for region in regions:
            outcome = RegionOutcome(region=region)
            stats.regions.append(outcome)
            logger.info("[%s] Fetching trends...", region)
            try:
                self._seed_region(region, outcome)
            except Exception as e:
                outcome.error = str(e) or type(e).__name__
                logger.error("[%s] Error processing region: %s", region, outcome.error)

            self.sleep(self.region_delay)

        logger.info("Seed complete: %d topics, %d images", stats.topics_inserted, stats.images_inserted)
        return stats

    def _seed_region(self, region: str, outcome: RegionOutcome) -> None:
        names = self.discovery.discover(region)
        outcome.trends_found = len(names)
        logger.info("[%s] Found %d trending topics", region, len(names))

        for name in names:
            stage = "topic_exists"
            try:
                if self.catalog.topic_exists(name, region):
                    outcome.topics_skipped += 1
                    logger.info("[%s] \"%s\" already exists, skipping", region, name)
                    continue

                stage = "insert_topic"
                topic_id = self.catalog.insert_topic(name, region)
                outcome.topics_inserted += 1
                logger.info("[%s] Inserted topic \"%s\" (id: %s)", region, name, topic_id)

                stage = "image_count"
                existing = self.catalog.image_count(topic_id)
                if existing:
                    logger.info("[%s] \"%s\" already has %d images, skipping sourcing", region, name, existing)
                else:
                    stage = "insert_images"
                    urls = self.chain.resolve(name)[: self.images_per_topic]
                    inserted = self.catalog.insert_images(topic_id, urls, self.attribution)
                    outcome.images_inserted += inserted
                    logger.info("[%s] Inserted %d images for \"%s\"", region, inserted, name)
            except CatalogError as e:
                outcome.topic_errors.append(f"{name}: {e}")
                logger.error("[%s] Catalog %s failed for \"%s\": %s", region, e.operation or stage, name, e)
            finally:
                self.sleep(self.topic_delay)
