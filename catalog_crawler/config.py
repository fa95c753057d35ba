from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Dict, Any
from pathlib import Path
import os
import json

from .version import __version__, CONFIG_SCHEMA_VERSION

DEFAULT_EXTRACTOR = "catalog_crawler.adapters.generic:GenericCardAdapter"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass
class CrawlConfig:
    """
    Worker-level settings shared by every crawl session.
    Per-request values (url, credentials, limits) live on CrawlRequest;
    max_items and delay_ms here are only the defaults for those requests.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    # Root for per-job output directories created by the API.
    base_dir: str = "/tmp/getcatalog"
    # Bearer token required by the API; empty disables the check.
    worker_token: str = ""
    max_items: int = 500
    delay_ms: int = 800
    # Timeouts are in seconds.
    navigation_timeout: float = 60.0
    action_timeout: float = 10.0
    idle_timeout: float = 60.0
    image_timeout: float = 20.0
    max_scrolls: int = 30
    headless: bool = True
    user_agent: str = f"catalog_crawler/{__version__}"
    # Dotted path so the card heuristic can be swapped without code changes.
    extractor: str = DEFAULT_EXTRACTOR

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "CrawlConfig":
        """
        Build config from environment variables (all optional).
        WORKER_TOKEN is honoured for compatibility with existing deployments.
        """
        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        return cls(
            base_dir=_get("CATALOG_BASE_DIR", "/tmp/getcatalog"),
            worker_token=_get("CATALOG_WORKER_TOKEN", os.getenv("WORKER_TOKEN", "")),
            max_items=int(_get("CATALOG_MAX_ITEMS", "500")),
            delay_ms=int(_get("CATALOG_DELAY_MS", "800")),
            navigation_timeout=float(_get("CATALOG_NAVIGATION_TIMEOUT", "60.0")),
            action_timeout=float(_get("CATALOG_ACTION_TIMEOUT", "10.0")),
            idle_timeout=float(_get("CATALOG_IDLE_TIMEOUT", "60.0")),
            image_timeout=float(_get("CATALOG_IMAGE_TIMEOUT", "20.0")),
            max_scrolls=int(_get("CATALOG_MAX_SCROLLS", "30")),
            headless=_get("CATALOG_HEADLESS", "true").strip().lower() in _TRUTHY,
            user_agent=_get("CATALOG_USER_AGENT", f"catalog_crawler/{__version__}"),
            extractor=_get("CATALOG_EXTRACTOR", DEFAULT_EXTRACTOR),
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "CrawlConfig":
        """
        Load configuration from a JSON file. Older schema versions are migrated first.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data = migrate_config(data)
        return cls(**data)

    # ---------- Validation ----------

    def validate(self) -> None:
        if self.max_items < 0:
            raise ValueError("max_items must be >= 0")
        if self.delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")
        if self.max_scrolls <= 0:
            raise ValueError("max_scrolls must be > 0")
        for name in ("navigation_timeout", "action_timeout", "idle_timeout", "image_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0")
        if not self.extractor:
            raise ValueError("extractor cannot be empty")
        Path(self.base_dir).mkdir(parents=True, exist_ok=True)


_V1_ONLY_KEYS = (
    "start_urls",
    "allowed_domains",
    "max_depth",
    "max_concurrency",
    "retries",
    "engine",
    "exporter",
    "extra_adapters",
    "output_path",
)


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    data = dict(raw)
    schema = data.get("schema_version", 1)

    if schema < 2:
        # v1 described a multi-page link crawler; only the timeout and UA carry over.
        if "request_timeout" in data:
            data.setdefault("navigation_timeout", data["request_timeout"])
        data.pop("request_timeout", None)
        for key in _V1_ONLY_KEYS:
            data.pop(key, None)

    data["schema_version"] = CONFIG_SCHEMA_VERSION
    return data
