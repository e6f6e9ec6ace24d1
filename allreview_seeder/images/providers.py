"""Image search providers: DuckDuckGo scraper and the Pexels API."""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable
from urllib.parse import urlparse

import httpx

from allreview_seeder.errors import AcquisitionError
from allreview_seeder.utils.logger import get_logger
from allreview_seeder.utils.retry import retry_transient

logger = get_logger()


@runtime_checkable
class ImageProvider(Protocol):
    """Protocol for image sources: a topic in, candidate image URLs out."""

    name: str

    def search(self, query: str, limit: int) -> list[str]: ...


def is_http_url(value: object) -> bool:
    """True for well-formed absolute http(s) URLs."""
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


# =============================================================================
# DuckDuckGo (token scrape)
# =============================================================================

VQD_PATTERN = re.compile(r"vqd=[\"']?([\w-]+)")


class DuckDuckGoProvider:
    """Scrape DuckDuckGo image search using its per-query vqd token."""

    name = "duckduckgo"
    PAGE_URL = "https://duckduckgo.com/"
    RESULTS_URL = "https://duckduckgo.com/i.js"

    def __init__(self, client: httpx.Client, locale: str = "us-en"):
        self.client = client
        self.locale = locale

    @retry_transient(max_attempts=3)
    def _get(self, url: str, params: dict, headers: dict | None = None) -> httpx.Response:
        response = self.client.get(url, params=params, headers=headers)
        response.raise_for_status()
        return response

    def extract_token(self, page: str) -> str | None:
        match = VQD_PATTERN.search(page)
        return match.group(1) if match else None

    def search(self, query: str, limit: int) -> list[str]:
        page = self._get(self.PAGE_URL, {"q": query, "iax": "images", "ia": "images"})
        token = self.extract_token(page.text)
        if not token:
            logger.info("Could not extract DuckDuckGo vqd token for \"%s\"", query)
            return []

        response = self._get(
            self.RESULTS_URL,
            {"l": self.locale, "o": "json", "q": query, "vqd": token, "p": "1"},
            headers={"Referer": self.PAGE_URL},
        )
        try:
            payload = response.json()
        except ValueError as e:
            raise AcquisitionError(f"DuckDuckGo returned invalid JSON: {e}") from e

        urls = [r.get("image") for r in payload.get("results") or [] if isinstance(r, dict)]
        return [u for u in urls if is_http_url(u)][:limit]


# =============================================================================
# Pexels (keyed REST API)
# =============================================================================

class PexelsProvider:
    """Pexels photo search. Skipped when no API key is configured."""

    name = "pexels"
    SEARCH_URL = "https://api.pexels.com/v1/search"

    def __init__(self, client: httpx.Client, api_key: str | None):
        self.client = client
        self.api_key = api_key

    @retry_transient(max_attempts=3)
    def _search(self, query: str, limit: int) -> dict:
        response = self.client.get(
            self.SEARCH_URL,
            params={"query": query, "per_page": limit},
            headers={"Authorization": self.api_key},
        )
        response.raise_for_status()
        return response.json()

    def search(self, query: str, limit: int) -> list[str]:
        if not self.api_key:
            logger.info("No Pexels API key set, skipping Pexels")
            return []

        try:
            data = self._search(query, limit)
        except ValueError as e:
            raise AcquisitionError(f"Pexels returned invalid JSON: {e}") from e

        urls = []
        for photo in data.get("photos") or []:
            src = photo.get("src") if isinstance(photo, dict) else None
            url = src.get("large") if isinstance(src, dict) else None
            if is_http_url(url):
                urls.append(url)
        return urls[:limit]
