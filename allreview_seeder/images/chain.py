"""Prioritized image provider chain with a guaranteed non-empty result."""

from __future__ import annotations

import httpx

from allreview_seeder.config import Config
from allreview_seeder.images.placeholder import DEFAULT_TEMPLATE, PlaceholderProvider
from allreview_seeder.images.providers import DuckDuckGoProvider, ImageProvider, PexelsProvider
from allreview_seeder.utils.http import create_http_client
from allreview_seeder.utils.logger import get_logger

logger = get_logger()


class ProviderChain:
    """Try providers in order; the first non-empty result wins.

    Provider errors and empty results fall through to the next provider. The
    fallback runs last and always produces `limit` URLs, so resolve() never
    returns an empty list and never raises.
    """

    def __init__(self, providers: list[ImageProvider], fallback: ImageProvider | None = None, limit: int = 16):
        self.providers = list(providers)
        self.fallback = fallback or PlaceholderProvider()
        self.limit = limit

    def resolve(self, topic: str) -> list[str]:
        for provider in self.providers:
            try:
                urls = provider.search(topic, self.limit)
            except Exception as e:
                logger.warning("Image provider %s failed for \"%s\": %s", provider.name, topic, e)
                continue
            if urls:
                logger.debug("%s returned %d images for \"%s\"", provider.name, len(urls), topic)
                return list(urls)[: self.limit]
            logger.info("%s returned no images for \"%s\", trying next provider", provider.name, topic)

        logger.info("All image providers empty for \"%s\", using %s", topic, self.fallback.name)
        return self.fallback.search(topic, self.limit)[: self.limit]


def build_provider_chain(config: Config, client: httpx.Client | None = None) -> ProviderChain:
    """Assemble the default DuckDuckGo -> Pexels -> placeholder chain."""
    client = client or create_http_client(config)
    images_cfg = config.images
    providers: list[ImageProvider] = []

    if images_cfg.get("duckduckgo", {}).get("enabled", True):
        providers.append(DuckDuckGoProvider(client, locale=images_cfg.get("duckduckgo", {}).get("locale", "us-en")))
    if images_cfg.get("pexels", {}).get("enabled", True):
        providers.append(PexelsProvider(client, api_key=config.pexels_api_key))

    fallback = PlaceholderProvider(images_cfg.get("placeholder_template") or DEFAULT_TEMPLATE)
    return ProviderChain(providers, fallback=fallback, limit=config.images_per_topic)
