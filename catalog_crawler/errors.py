from __future__ import annotations


class CatalogCrawlerError(Exception):
    """Base class for failures that abort a crawl session."""


class NavigationError(CatalogCrawlerError):
    """The target page could not be reached or parsed within the navigation budget."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"Failed to load {url}: {reason}")
        self.url = url
        self.reason = reason


class StorageError(CatalogCrawlerError):
    """The CSV artifact could not be written."""
