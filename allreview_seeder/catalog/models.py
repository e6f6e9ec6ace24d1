"""Catalog image data models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Attribution:
    """Who an image is credited to in the catalog."""

    name: str
    region: str


@dataclass
class CatalogImage:
    """An image row attached to a catalog topic."""

    topic_id: int | str
    url: str
    attribution: Attribution
    popularity: int = 0  # owned by the voting app
    id: int | str | None = field(default=None)

    def to_db_dict(self) -> dict:
        """Row for insertion; popularity is left to the store default."""
        return {
            "keyword_id": self.topic_id,
            "image_url": self.url,
            "uploader_nickname": self.attribution.name,
            "uploader_country": self.attribution.region,
        }

    @classmethod
    def from_db_row(cls, row) -> CatalogImage:
        data = dict(row)
        return cls(
            id=data.get("id"),
            topic_id=data["keyword_id"],
            url=data["image_url"],
            attribution=Attribution(
                name=data.get("uploader_nickname") or "",
                region=data.get("uploader_country") or "",
            ),
            popularity=data.get("popularity") or 0,
        )


def bot_attribution(config) -> Attribution:
    """Attribution used for every pipeline-sourced image."""
    bot = config.catalog.get("bot", {})
    return Attribution(name=bot.get("name", "Allreview Bot"), region=bot.get("region", "GL"))
