"""Slack webhook notifications for seed runs."""

from __future__ import annotations

import httpx

from allreview_seeder.config import Config
from allreview_seeder.pipeline import RunStats
from allreview_seeder.utils.logger import get_logger
from allreview_seeder.utils.retry import with_retry

logger = get_logger()


class SlackNotifier:
    """Send run summaries via a Slack incoming webhook."""

    def __init__(self, config: Config):
        slack_cfg = config.notifications.get("slack", {})
        self.enabled = slack_cfg.get("enabled", False)
        webhook_env = slack_cfg.get("webhook_url_env", "SLACK_WEBHOOK_URL")
        self.webhook_url = config.env(webhook_env) if self.enabled else None

    @with_retry(max_attempts=2, retry_on=(httpx.HTTPError, ConnectionError))
    def _send(self, payload: dict) -> bool:
        """Send a payload to Slack webhook."""
        if not self.webhook_url:
            logger.debug("Slack not configured, skipping notification")
            return False

        response = httpx.post(self.webhook_url, json=payload, timeout=10)
        response.raise_for_status()
        logger.info("Slack notification sent")
        return True

    def notify_run_complete(self, stats: RunStats) -> bool:
        """Post the run summary. Delivery failures are logged, not raised."""
        lines = [f"*Allreview seed complete:* {stats.topics_inserted} topics, {stats.images_inserted} images"]
        for outcome in stats.regions:
            if outcome.error:
                lines.append(f"• {outcome.region}: failed ({outcome.error})")
            elif outcome.topic_errors:
                lines.append(f"• {outcome.region}: {len(outcome.topic_errors)} topic error(s)")
        try:
            return self._send({"text": "\n".join(lines)})
        except httpx.HTTPError as e:
            logger.warning("Slack notification failed: %s", e)
            return False
