"""YAML config loader with validation and defaults."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import click
import yaml
from dotenv import load_dotenv

from allreview_seeder.errors import ConfigurationError


def get_app_dir() -> Path:
    """Get the platform-specific application config directory.

    - macOS: ~/Library/Application Support/allreview-seeder/
    - Windows: C:\\Users\\<user>\\AppData\\Roaming\\allreview-seeder\\
    - Linux: ~/.config/allreview-seeder/
    """
    return Path(click.get_app_dir("allreview-seeder"))


# ISO 3166-1 alpha-2
DEFAULT_REGIONS = [
    "US", "KR", "JP", "GB", "DE", "FR", "BR", "IN", "CA", "AU",
    "MX", "IT", "ES", "RU", "ID", "TR", "TH", "VN", "PH", "NG",
]

_DEFAULT_CONFIG = {
    "regions": list(DEFAULT_REGIONS),
    "trends": {
        "feed_url": "https://trends.google.com/trending/rss?geo={geo}",
        "geo_map": {},
        "max_per_region": 10,
        "max_title_length": 100,
    },
    "images": {
        "per_topic": 16,
        "duckduckgo": {"enabled": True, "locale": "us-en"},
        "pexels": {"enabled": True, "api_key_env": "PEXELS_API_KEY"},
        "placeholder_template": "https://placehold.co/600x600/{color}/ffffff?text={label}&font=roboto",
    },
    "catalog": {
        "backend": "rest",  # 'rest' or 'sqlite'
        "url_env": "CATALOG_URL",
        "key_env": "CATALOG_KEY",
        "topics_table": "keywords",
        "images_table": "images",
        "sqlite_path": "data/catalog.db",
        "bot": {"name": "Allreview Bot", "region": "GL"},
    },
    "rate_limit": {"topic_delay_seconds": 0.5, "region_delay_seconds": 1.0},
    "http": {
        "timeout": 30,
        "user_agent": "Mozilla/5.0 (compatible; AllreviewBot/1.0)",
    },
    "notifications": {"slack": {"enabled": False, "webhook_url_env": "SLACK_WEBHOOK_URL"}},
    "logging": {"level": "INFO", "file": "data/logs/allreview_seeder.log", "max_size_mb": 10, "backup_count": 5},
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base, returning a new dict."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class Config:
    """Application configuration loaded from YAML with env var support."""

    def __init__(self, data: dict[str, Any], project_root: Path):
        self._data = data
        self.project_root = project_root

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> Config:
        """Load config from YAML file, merging with defaults.

        Resolution order:
        1. Explicit config_path argument (--config flag)
        2. CWD ./config/config.yaml (development mode)
        3. APP_DIR/config.yaml (installed mode)
        """
        if config_path is not None:
            config_path = Path(config_path)
            project_root = config_path.parent.parent if config_path.parent.name == "config" else config_path.parent
        else:
            cwd_config = Path.cwd() / "config" / "config.yaml"
            app_dir_config = get_app_dir() / "config.yaml"

            if cwd_config.exists():
                config_path = cwd_config
                project_root = Path.cwd()
            elif app_dir_config.exists():
                config_path = app_dir_config
                project_root = get_app_dir()
            else:
                # No config found, defaults only with CWD as project root
                config_path = cwd_config
                project_root = Path.cwd()

        env_path = project_root / ".env"
        if env_path.exists():
            load_dotenv(env_path)

        user_config: dict = {}
        if config_path.exists():
            with open(config_path) as f:
                user_config = yaml.safe_load(f) or {}

        data = _deep_merge(_DEFAULT_CONFIG, user_config)
        return cls(data, project_root)

    def get(self, *keys: str, default: Any = None) -> Any:
        """Get a nested config value using dot-separated keys or varargs."""
        if len(keys) == 1 and "." in keys[0]:
            keys = tuple(keys[0].split("."))

        current = self._data
        for key in keys:
            if isinstance(current, dict):
                current = current.get(key)
                if current is None:
                    return default
            else:
                return default
        return current

    @property
    def regions(self) -> list[str]:
        return [str(r).upper() for r in self._data.get("regions") or []]

    @property
    def trends_config(self) -> dict:
        return self._data.get("trends", {})

    @property
    def images(self) -> dict:
        return self._data.get("images", {})

    @property
    def catalog(self) -> dict:
        return self._data.get("catalog", {})

    @property
    def rate_limit(self) -> dict:
        return self._data.get("rate_limit", {})

    @property
    def notifications(self) -> dict:
        return self._data.get("notifications", {})

    @property
    def images_per_topic(self) -> int:
        return int(self.get("images.per_topic", default=16))

    @property
    def sqlite_path(self) -> Path:
        return self.project_root / self.get("catalog.sqlite_path", default="data/catalog.db")

    @property
    def log_file(self) -> Path | None:
        log = self.get("logging.file")
        return self.project_root / log if log else None

    def env(self, key: str, default: str | None = None) -> str | None:
        """Get an environment variable."""
        return os.environ.get(key, default)

    @property
    def pexels_api_key(self) -> str | None:
        return self.env(self.get("images.pexels.api_key_env", default="PEXELS_API_KEY"))

    def require_catalog_credentials(self) -> tuple[str, str]:
        """Return (url, key) for the REST catalog or raise ConfigurationError."""
        url_env = self.get("catalog.url_env", default="CATALOG_URL")
        key_env = self.get("catalog.key_env", default="CATALOG_KEY")
        url = self.env(url_env)
        key = self.env(key_env)
        missing = [name for name, value in ((url_env, url), (key_env, key)) if not value]
        if missing:
            raise ConfigurationError(f"Missing catalog credentials: {', '.join(missing)} not set")
        return url.rstrip("/"), key

    def validate(self) -> list[str]:
        """Return a list of validation warnings."""
        warnings = []

        if not self.regions:
            warnings.append("No regions configured")

        backend = self.get("catalog.backend", default="rest")
        if backend not in ("rest", "sqlite"):
            warnings.append(f"Unknown catalog backend '{backend}'")
        elif backend == "rest":
            for env_key in (self.get("catalog.url_env"), self.get("catalog.key_env")):
                if not self.env(env_key):
                    warnings.append(f"{env_key} not set (required for live runs against the catalog)")

        if self.get("images.pexels.enabled") and not self.pexels_api_key:
            env_key = self.get("images.pexels.api_key_env", default="PEXELS_API_KEY")
            warnings.append(f"{env_key} not set, Pexels fallback will be skipped")

        if self.notifications.get("slack", {}).get("enabled"):
            webhook_env = self.notifications["slack"].get("webhook_url_env", "SLACK_WEBHOOK_URL")
            if not self.env(webhook_env):
                warnings.append(f"Slack enabled but {webhook_env} not set")
        return warnings
