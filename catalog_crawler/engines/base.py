from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
from abc import ABC, abstractmethod


@dataclass(frozen=True)
class CrawlRequest:
    """Everything one session needs to know about a single target page."""
    target_url: str
    csv_path: Path
    image_dir: Path
    username: str = ""
    password: str = ""
    max_items: int = 500
    delay_ms: int = 800

    def __post_init__(self) -> None:
        if not self.target_url:
            raise ValueError("target_url cannot be empty")
        if self.max_items < 0:
            raise ValueError("max_items must be >= 0")
        if self.delay_ms < 0:
            raise ValueError("delay_ms must be >= 0")

    @property
    def credentials(self) -> Optional[Tuple[str, str]]:
        # Login needs both halves; a lone username or password is ignored.
        if self.username and self.password:
            return self.username, self.password
        return None


@dataclass(frozen=True)
class CrawlResult:
    item_count: int = 0


class CrawlEngine(ABC):
    """
    Abstract engine interface. Implementations own the crawl lifecycle,
    including every browser resource they acquire.
    """
    @abstractmethod
    async def crawl(self) -> CrawlResult:  # pragma: no cover - interface
        ...
