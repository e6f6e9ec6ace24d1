"""Remote catalog over a Supabase/PostgREST-style REST API."""

from __future__ import annotations

import httpx

from allreview_seeder.catalog.models import Attribution, CatalogImage
from allreview_seeder.errors import CatalogError
from allreview_seeder.trends.models import Topic
from allreview_seeder.utils.logger import get_logger
from allreview_seeder.utils.retry import retry_transient

logger = get_logger()


def parse_content_range_total(header: str | None) -> int:
    """Total from a PostgREST Content-Range header ('0-24/57' or '*/0')."""
    if not header or "/" not in header:
        raise CatalogError(f"Missing or malformed Content-Range: {header!r}", operation="image_count")
    total = header.rsplit("/", 1)[1]
    if total == "*":
        raise CatalogError("Store did not return an exact count", operation="image_count")
    try:
        return int(total)
    except ValueError as e:
        raise CatalogError(f"Malformed Content-Range: {header!r}", operation="image_count") from e


class RestCatalog:
    """Catalog gateway backed by the `keywords` and `images` REST tables."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        topics_table: str = "keywords",
        images_table: str = "images",
        client: httpx.Client | None = None,
        timeout: float = 30,
    ):
        self.base_url = base_url.rstrip("/")
        self.topics_table = topics_table
        self.images_table = images_table
        self.client = client or httpx.Client(timeout=timeout)
        self.headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        }

    def _table_url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    @retry_transient(max_attempts=3)
    def _send(self, method: str, table: str, **kwargs) -> httpx.Response:
        headers = {**self.headers, **kwargs.pop("headers", {})}
        response = self.client.request(method, self._table_url(table), headers=headers, **kwargs)
        response.raise_for_status()
        return response

    def _request(self, operation: str, method: str, table: str, **kwargs) -> httpx.Response:
        try:
            return self._send(method, table, **kwargs)
        except httpx.HTTPStatusError as e:
            raise CatalogError(
                f"{operation} failed: HTTP {e.response.status_code} {e.response.text[:200]}",
                operation=operation,
            ) from e
        except httpx.HTTPError as e:
            raise CatalogError(f"{operation} failed: {e}", operation=operation) from e

    def _rows(self, operation: str, response: httpx.Response) -> list:
        """Decode a JSON array body; anything else is a store failure."""
        try:
            rows = response.json()
        except ValueError as e:
            raise CatalogError(
                f"{operation} failed: non-JSON response body {response.text[:200]!r}",
                operation=operation,
            ) from e
        if not isinstance(rows, list):
            raise CatalogError(f"{operation} failed: expected a JSON array, got {type(rows).__name__}", operation=operation)
        return rows

    def topic_exists(self, name: str, region: str) -> bool:
        response = self._request(
            "topic_exists",
            "GET",
            self.topics_table,
            params={
                "select": "id",
                "keyword_name": f"eq.{name}",
                "country_code": f"eq.{region}",
                "limit": "1",
            },
        )
        return len(self._rows("topic_exists", response)) > 0

    def insert_topic(self, name: str, region: str) -> int | str:
        response = self._request(
            "insert_topic",
            "POST",
            self.topics_table,
            params={"select": "id"},
            json=Topic(name, region).to_db_dict(),
            headers={"Prefer": "return=representation"},
        )
        rows = self._rows("insert_topic", response)
        if not rows or not isinstance(rows[0], dict) or "id" not in rows[0]:
            raise CatalogError(f"insert_topic returned no id for \"{name}\"", operation="insert_topic")
        return rows[0]["id"]

    def image_count(self, topic_id: int | str) -> int:
        response = self._request(
            "image_count",
            "HEAD",
            self.images_table,
            params={"select": "id", "keyword_id": f"eq.{topic_id}"},
            headers={"Prefer": "count=exact"},
        )
        return parse_content_range_total(response.headers.get("content-range"))

    def insert_images(self, topic_id: int | str, urls: list[str], attribution: Attribution) -> int:
        if not urls:
            return 0
        rows = [CatalogImage(topic_id=topic_id, url=url, attribution=attribution).to_db_dict() for url in urls]
        self._request(
            "insert_images",
            "POST",
            self.images_table,
            json=rows,
            headers={"Prefer": "return=minimal"},
        )
        return len(rows)
