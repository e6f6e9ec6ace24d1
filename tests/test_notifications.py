"""Tests for Slack run notifications."""

from unittest.mock import MagicMock, patch

import httpx

from allreview_seeder.config import Config, _deep_merge
from allreview_seeder.notifications.slack_notifier import SlackNotifier
from allreview_seeder.pipeline import RegionOutcome, RunStats


def _make_config(overrides: dict | None = None) -> Config:
    config = Config.load("/nonexistent/config.yaml")
    if overrides:
        config._data = _deep_merge(config._data, overrides)
    return config


def _stats() -> RunStats:
    return RunStats(regions=[
        RegionOutcome(region="KR", topics_inserted=1, images_inserted=3),
        RegionOutcome(region="JP", error="feed exploded"),
    ])


@patch("allreview_seeder.notifications.slack_notifier.httpx.post")
def test_disabled_sends_nothing(mock_post):
    assert SlackNotifier(_make_config()).notify_run_complete(_stats()) is False
    mock_post.assert_not_called()


@patch("allreview_seeder.notifications.slack_notifier.httpx.post")
def test_run_summary_posted(mock_post, monkeypatch):
    monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.slack.com/services/T/B/X")
    mock_post.return_value = MagicMock(raise_for_status=MagicMock())

    notifier = SlackNotifier(_make_config({"notifications": {"slack": {"enabled": True}}}))
    assert notifier.notify_run_complete(_stats()) is True

    text = mock_post.call_args.kwargs["json"]["text"]
    assert "1 topics, 3 images" in text
    assert "JP: failed (feed exploded)" in text


def test_delivery_failure_is_swallowed(monkeypatch):
    monkeypatch.setenv("SLACK_WEBHOOK_URL", "https://hooks.slack.com/services/T/B/X")
    notifier = SlackNotifier(_make_config({"notifications": {"slack": {"enabled": True}}}))
    with patch.object(SlackNotifier, "_send", side_effect=httpx.ConnectError("offline")):
        assert notifier.notify_run_complete(_stats()) is False
