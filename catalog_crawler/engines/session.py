from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Optional

from playwright.async_api import async_playwright

from .base import CrawlEngine, CrawlRequest, CrawlResult
from .browser_engine import PageController
from ..adapters.base import CardExtractor
from ..config import CrawlConfig
from ..export.csv_exporter import CatalogMaterializer
from ..utils.http import AiohttpImageFetcher, ImageFetcher, create_session
from ..utils.loader import load_symbol

logger = logging.getLogger(__name__)


class CrawlSession(CrawlEngine):
    """
    One crawl of one page: load -> extract -> materialize.
    - The session owns the browser and releases it on every exit path.
    - The extractor only sees a serialized snapshot.
    - Images are fetched sequentially through an ImageFetcher.
    """
    def __init__(
        self,
        config: CrawlConfig,
        request: CrawlRequest,
        *,
        extractor: CardExtractor | None = None,
        fetcher: ImageFetcher | None = None,
    ) -> None:
        self.config = config
        self.request = request
        self.extractor = extractor or load_symbol(config.extractor)()
        self.fetcher = fetcher
        self.controller = PageController(config)

    async def crawl(self) -> CrawlResult:
        req = self.request
        logger.info("Crawling %s (max_items=%s, delay_ms=%s)", req.target_url, req.max_items, req.delay_ms)

        async with self.open_page() as page:
            snapshot = await self.controller.load(page, req)
            # Parsing a large DOM is CPU-bound; keep it off the event loop.
            candidates = await asyncio.to_thread(self.extractor.extract, snapshot.url, snapshot.html)
            logger.info("Found %s candidates on %s", len(candidates), snapshot.url)
            result = await self._materialize(candidates)

        logger.info("Finished %s: %s items", req.target_url, result.item_count)
        return result

    @asynccontextmanager
    async def open_page(self) -> AsyncIterator[Any]:
        """Launch a private browser for this session and yield its only page."""
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=self.config.headless)
            try:
                # The browser keeps its stock UA; user_agent only labels image downloads.
                context = await browser.new_context()
                yield await context.new_page()
            finally:
                await browser.close()

    async def _materialize(self, candidates: list) -> CrawlResult:
        req = self.request
        if self.fetcher is not None:
            return await CatalogMaterializer(self.fetcher).materialize(
                candidates, req.max_items, req.csv_path, req.image_dir
            )

        session = create_session()
        try:
            fetcher = AiohttpImageFetcher(
                session,
                timeout=self.config.image_timeout,
                user_agent=self.config.user_agent,
            )
            return await CatalogMaterializer(fetcher).materialize(
                candidates, req.max_items, req.csv_path, req.image_dir
            )
        finally:
            await session.close()


async def run_crawl(request: CrawlRequest, config: Optional[CrawlConfig] = None) -> CrawlResult:
    """The single pipeline entry point used by the API and the CLI."""
    return await CrawlSession(config or CrawlConfig.from_env(), request).crawl()
