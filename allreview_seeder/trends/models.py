"""Topic data models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Topic:
    """A trending term scoped to a region. Unique per (name, region)."""

    name: str
    region: str
    is_global: bool = False

    @property
    def key(self) -> tuple[str, str]:
        return (self.name, self.region)

    def to_db_dict(self) -> dict:
        return {
            "keyword_name": self.name,
            "country_code": self.region,
            "is_global": self.is_global,
        }

    @classmethod
    def from_db_row(cls, row) -> Topic:
        data = dict(row)
        return cls(
            name=data["keyword_name"],
            region=data["country_code"],
            is_global=bool(data.get("is_global") or False),
        )
