"""Trending topic discovery via the Google Trends regional RSS feed."""

from __future__ import annotations

import feedparser
import httpx

from allreview_seeder.config import Config
from allreview_seeder.errors import AcquisitionError
from allreview_seeder.utils.http import create_http_client
from allreview_seeder.utils.logger import get_logger
from allreview_seeder.utils.retry import retry_transient

logger = get_logger()


class TrendDiscovery:
    """Resolve a region code to an ordered list of trending topic names."""

    def __init__(self, config: Config, client: httpx.Client | None = None):
        self.config = config
        self.client = client or create_http_client(config)
        trends_cfg = config.trends_config
        self.feed_url = trends_cfg.get("feed_url", "https://trends.google.com/trending/rss?geo={geo}")
        self.geo_map = trends_cfg.get("geo_map") or {}
        self.max_results = trends_cfg.get("max_per_region", 10)
        self.max_title_length = trends_cfg.get("max_title_length", 100)

    def feed_url_for(self, region: str) -> str:
        geo = self.geo_map.get(region, region)
        return self.feed_url.format(geo=geo)

    @retry_transient(max_attempts=3)
    def _fetch_feed(self, url: str) -> list[dict]:
        """Fetch and parse a single RSS feed."""
        response = self.client.get(url)
        response.raise_for_status()
        feed = feedparser.parse(response.text)
        if feed.bozo and not feed.entries:
            raise AcquisitionError(f"Unparseable feed: {feed.get('bozo_exception')}")
        return feed.entries

    def _is_usable(self, title: str) -> bool:
        return 0 < len(title) < self.max_title_length

    def discover(self, region: str) -> list[str]:
        """Return up to max_per_region topic names in feed order; [] on failure."""
        url = self.feed_url_for(region)
        try:
            entries = self._fetch_feed(url)
        except Exception as e:
            logger.warning("Trend feed failed for %s: %s", region, e)
            return []

        topics: list[str] = []
        for entry in entries:
            if len(topics) >= self.max_results:
                break
            title = (entry.get("title") or "").strip()
            if self._is_usable(title):
                topics.append(title)

        logger.debug("Fetched %d entries from %s", len(entries), url[:80])
        return topics
