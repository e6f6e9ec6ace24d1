"""SQLite catalog: local stand-in for the remote store with the same gateway contract."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from allreview_seeder.catalog.models import Attribution, CatalogImage
from allreview_seeder.errors import CatalogError
from allreview_seeder.trends.models import Topic
from allreview_seeder.utils.logger import get_logger

logger = get_logger()

SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Trending topics, one row per (keyword_name, country_code)
CREATE TABLE IF NOT EXISTS keywords (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    keyword_name TEXT NOT NULL,
    country_code TEXT NOT NULL,
    is_global INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Candidate images per topic; popularity is owned by the voting app
CREATE TABLE IF NOT EXISTS images (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    keyword_id INTEGER NOT NULL REFERENCES keywords(id),
    image_url TEXT NOT NULL,
    uploader_nickname TEXT,
    uploader_country TEXT,
    popularity INTEGER NOT NULL DEFAULT 0,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_keywords_name_country ON keywords(keyword_name, country_code);
CREATE INDEX IF NOT EXISTS idx_images_keyword ON images(keyword_id);

-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);
"""


class SqliteCatalog:
    """SQLite-backed catalog gateway."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    @contextmanager
    def connection(self) -> Generator[sqlite3.Connection, None, None]:
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def _init_schema(self) -> None:
        with self.connection() as conn:
            conn.executescript(SCHEMA_SQL)
            cur = conn.execute("SELECT version FROM schema_version ORDER BY version DESC LIMIT 1")
            if cur.fetchone() is None:
                conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
            logger.debug("Catalog initialized at %s", self.db_path)

    def execute(self, sql: str, params: tuple = (), operation: str = "query") -> list[sqlite3.Row]:
        try:
            with self.connection() as conn:
                return conn.execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise CatalogError(f"{operation} failed: {e}", operation=operation) from e

    # --- Gateway contract ---

    def topic_exists(self, name: str, region: str) -> bool:
        rows = self.execute(
            "SELECT id FROM keywords WHERE keyword_name = ? AND country_code = ? LIMIT 1",
            (name, region),
            operation="topic_exists",
        )
        return bool(rows)

    def insert_topic(self, name: str, region: str) -> int:
        try:
            with self.connection() as conn:
                cur = conn.execute(
                    "INSERT INTO keywords (keyword_name, country_code, is_global) "
                    "VALUES (:keyword_name, :country_code, :is_global)",
                    Topic(name, region).to_db_dict(),
                )
                return cur.lastrowid
        except sqlite3.Error as e:
            raise CatalogError(f"insert_topic failed: {e}", operation="insert_topic") from e

    def image_count(self, topic_id: int) -> int:
        rows = self.execute(
            "SELECT COUNT(*) AS cnt FROM images WHERE keyword_id = ?",
            (topic_id,),
            operation="image_count",
        )
        return rows[0]["cnt"] if rows else 0

    def insert_images(self, topic_id: int, urls: list[str], attribution: Attribution) -> int:
        rows = [CatalogImage(topic_id=topic_id, url=url, attribution=attribution).to_db_dict() for url in urls]
        if not rows:
            return 0
        try:
            with self.connection() as conn:
                conn.executemany(
                    "INSERT INTO images (keyword_id, image_url, uploader_nickname, uploader_country) "
                    "VALUES (:keyword_id, :image_url, :uploader_nickname, :uploader_country)",
                    rows,
                )
        except sqlite3.Error as e:
            raise CatalogError(f"insert_images failed: {e}", operation="insert_images") from e
        return len(rows)

    # --- Read helpers ---

    def get_images(self, topic_id: int) -> list[CatalogImage]:
        rows = self.execute("SELECT * FROM images WHERE keyword_id = ? ORDER BY id", (topic_id,), operation="get_images")
        return [CatalogImage.from_db_row(r) for r in rows]

    def count_topics(self, region: str | None = None) -> int:
        sql = "SELECT COUNT(*) AS cnt FROM keywords"
        params: tuple = ()
        if region:
            sql += " WHERE country_code = ?"
            params = (region,)
        return self.execute(sql, params, operation="count_topics")[0]["cnt"]
