"""Shared httpx client construction."""

from __future__ import annotations

import httpx

from allreview_seeder.config import Config


def create_http_client(config: Config) -> httpx.Client:
    """Build a client with the bot User-Agent and configured timeout."""
    return httpx.Client(
        headers={"User-Agent": config.get("http.user_agent", default="Mozilla/5.0 (compatible; AllreviewBot/1.0)")},
        timeout=config.get("http.timeout", default=30),
        follow_redirects=True,
    )
