"""Deterministic placeholder image sets, the provider of last resort."""

from __future__ import annotations

from urllib.parse import quote

from allreview_seeder.images.colors import hsl_to_hex

DEFAULT_TEMPLATE = "https://placehold.co/600x600/{color}/ffffff?text={label}&font=roboto"
LABEL_LENGTH = 10
SATURATION = 70
LIGHTNESS = 45


def placeholder_hue(topic: str, index: int) -> int:
    return (index * 23 + len(topic) * 7) % 360


def generate_placeholders(topic: str, count: int = 16, template: str = DEFAULT_TEMPLATE) -> list[str]:
    """Return exactly `count` placeholder URLs for a topic.

    Output depends only on the topic, the index and the template, so reseeding
    a topic always produces the same set.
    """
    label = quote(topic[:LABEL_LENGTH], safe="!*'()")
    return [
        template.format(color=hsl_to_hex(placeholder_hue(topic, i), SATURATION, LIGHTNESS), label=label)
        for i in range(count)
    ]


class PlaceholderProvider:
    """Provider wrapper around generate_placeholders. Never fails, never empty."""

    name = "placeholder"

    def __init__(self, template: str = DEFAULT_TEMPLATE):
        self.template = template

    def search(self, query: str, limit: int) -> list[str]:
        return generate_placeholders(query, count=max(limit, 1), template=self.template)
