"""Heuristic product-catalog extraction from arbitrary e-commerce pages."""

from .version import __version__
from .config import CrawlConfig
from .engines.base import CrawlRequest, CrawlResult
from .errors import CatalogCrawlerError, NavigationError, StorageError

__all__ = [
    "__version__",
    "CrawlConfig",
    "CrawlRequest",
    "CrawlResult",
    "CatalogCrawlerError",
    "NavigationError",
    "StorageError",
]
