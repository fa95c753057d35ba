# Test configuration and fixtures
import itertools
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

import pytest
from playwright.async_api import Error as PlaywrightError

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from catalog_crawler.adapters.base import ProductCandidate  # noqa: E402
from catalog_crawler.utils.http import FetchOutcome  # noqa: E402


class FakeLocator:
    """Just enough of playwright's Locator for the login heuristic."""

    def __init__(self, page: "FakePage", selector: str) -> None:
        self.page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    async def count(self) -> int:
        return self.page.counts.get(self.selector, 0)

    async def fill(self, value: str, timeout: Optional[float] = None) -> None:
        if self.selector in self.page.failing:
            raise PlaywrightError(f"cannot fill {self.selector}")
        self.page.fills.append((self.selector, value))

    async def click(self, timeout: Optional[float] = None) -> None:
        if self.selector in self.page.failing:
            raise PlaywrightError(f"cannot click {self.selector}")
        self.page.clicks.append(self.selector)


class FakePage:
    """In-memory stand-in for a playwright Page."""

    def __init__(
        self,
        html: str = "<html><body></body></html>",
        heights: Optional[Iterable[int]] = None,
        counts: Optional[Dict[str, int]] = None,
        failing: Optional[Set[str]] = None,
        goto_error: Optional[str] = None,
    ) -> None:
        self.url = "about:blank"
        self.html = html
        self._heights = iter(heights if heights is not None else [1000])
        self._last_height = 0
        self.counts = counts or {}
        self.failing = failing or set()
        self.goto_error = goto_error
        self.fills: List[tuple] = []
        self.clicks: List[str] = []
        self.waits: List[int] = []
        self.load_states: List[str] = []
        self.scrolls = 0
        self.height_reads = 0
        self.stamped = False

    async def goto(self, url: str, wait_until: str = "load", timeout: float = 0) -> None:
        if self.goto_error:
            raise PlaywrightError(self.goto_error)
        self.url = url

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    async def evaluate(self, script: str):
        if "data-current-src" in script:
            self.stamped = True
            return None
        if "scrollTo" in script:
            self.scrolls += 1
            return None
        if "scrollHeight" in script:
            self.height_reads += 1
            self._last_height = next(self._heights, self._last_height)
            return self._last_height
        raise AssertionError(f"unexpected script: {script}")

    async def wait_for_timeout(self, ms: int) -> None:
        self.waits.append(ms)

    async def wait_for_load_state(self, state: str = "load", timeout: float = 0) -> None:
        self.load_states.append(state)

    async def content(self) -> str:
        return self.html


class StubFetcher:
    """ImageFetcher that serves canned bytes and records every URL asked for."""

    def __init__(self, payload: bytes = b"\x89PNG fake", fail: Iterable[str] = ()) -> None:
        self.payload = payload
        self.fail = set(fail)
        self.calls: List[str] = []

    async def fetch(self, url: str) -> FetchOutcome:
        self.calls.append(url)
        if url in self.fail:
            return FetchOutcome(url=url, error="HTTP 404")
        return FetchOutcome(url=url, data=self.payload)


@pytest.fixture
def fake_page_factory():
    return FakePage


@pytest.fixture
def growing_heights():
    """Page height that never stops growing."""
    return itertools.count(1000, 500)


@pytest.fixture
def stub_fetcher_factory():
    return StubFetcher


@pytest.fixture
def stub_fetcher():
    return StubFetcher()


@pytest.fixture
def sample_candidates():
    return [
        ProductCandidate(name="Produto A", price_text="R$ 10,00", image_url="https://shop.test/a.jpg"),
        ProductCandidate(name="Produto B", price_text="20,50", image_url="https://shop.test/b.png?v=2"),
        ProductCandidate(name="Produto C", price_text="$ 7.5", image_url="data:image/gif;base64,R0lGOD"),
    ]


@pytest.fixture
def job_dirs(tmp_path):
    image_dir = tmp_path / "imagens"
    image_dir.mkdir()
    return tmp_path / "produtos.csv", image_dir
