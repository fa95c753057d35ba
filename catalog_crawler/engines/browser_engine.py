# engines/browser_engine.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from playwright.async_api import Error as PlaywrightError

from .base import CrawlRequest
from ..config import CrawlConfig
from ..errors import NavigationError

logger = logging.getLogger(__name__)

PASSWORD_INPUT = 'input[type="password"]'
EMAIL_INPUT = 'input[type="email"]'
USERNAME_INPUTS = (
    'input[name*="user" i], input[name*="email" i], '
    'input[id*="user" i], input[id*="email" i]'
)
LOGIN_LABELS = ("Entrar", "Login", "Sign in")
SUBMIT_CONTROLS = ", ".join(
    [f'button:has-text("{label}")' for label in LOGIN_LABELS] + ['input[type="submit"]']
)

SCROLL_HEIGHT_JS = "() => document.body.scrollHeight"
SCROLL_TO_BOTTOM_JS = "() => window.scrollTo(0, document.body.scrollHeight)"
STAMP_CURRENT_SRC_JS = """
() => {
  for (const img of Array.from(document.images)) {
    img.setAttribute("data-current-src", img.currentSrc || img.src || "");
  }
}
"""


class ScrollState(str, Enum):
    LOADING = "loading"
    STABILIZED = "stabilized"
    CAPPED = "capped"


class ScrollTracker:
    """
    State machine for scroll-to-stable loading.

    LOADING while every height read is larger than the previous one;
    STABILIZED as soon as a read does not grow; CAPPED after ``max_rounds``
    completed scroll rounds. Both end states are terminal.
    """

    def __init__(self, max_rounds: int = 30) -> None:
        self.max_rounds = max_rounds
        self.rounds = 0
        self.last_height = 0
        self.state = ScrollState.LOADING if max_rounds > 0 else ScrollState.CAPPED

    def observe(self, height: int) -> ScrollState:
        if self.state is ScrollState.LOADING:
            if height <= self.last_height:
                self.state = ScrollState.STABILIZED
            else:
                self.last_height = height
        return self.state

    def complete_round(self) -> ScrollState:
        if self.state is ScrollState.LOADING:
            self.rounds += 1
            if self.rounds >= self.max_rounds:
                self.state = ScrollState.CAPPED
        return self.state


@dataclass(frozen=True)
class PageSnapshot:
    url: str
    html: str


class PageController:
    """
    Drives one Playwright page through navigation, optional login and
    scroll-to-stable loading, then serializes the rendered DOM.

    Only navigation can fail the session. Every other step treats a missing
    element or a Playwright error as "not applicable" and moves on.
    """

    def __init__(self, config: CrawlConfig) -> None:
        self.config = config

    async def load(self, page: Any, request: CrawlRequest) -> PageSnapshot:
        await self.navigate(page, request.target_url)
        credentials = request.credentials
        if credentials:
            await self.login(page, *credentials)
        tracker = await self.scroll_to_stable(page, request.delay_ms)
        logger.info("Scrolling %s after %s rounds on %s", tracker.state.value, tracker.rounds, request.target_url)
        return await self.snapshot(page)

    async def navigate(self, page: Any, url: str) -> None:
        try:
            await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=self._ms(self.config.navigation_timeout),
            )
        except PlaywrightError as exc:
            raise NavigationError(url, str(exc)) from exc

    async def login(self, page: Any, username: str, password: str) -> bool:
        """
        Best-effort form login. Returns True when a login form was found and
        submitted, whether or not the site accepted the credentials.
        """
        try:
            has_password = await page.locator(PASSWORD_INPUT).count()
        except PlaywrightError as exc:
            logger.debug("Password field lookup failed: %r", exc)
            has_password = 0
        if not has_password:
            logger.debug("No password field on %s; skipping login", page.url)
            return False

        timeout = self._ms(self.config.action_timeout)
        user_input = await self._username_field(page)
        if user_input is not None:
            await self._attempt("fill username", user_input.fill(username, timeout=timeout))
        await self._attempt(
            "fill password",
            page.locator(PASSWORD_INPUT).first.fill(password, timeout=timeout),
        )
        await self._attempt("click login", page.locator(SUBMIT_CONTROLS).first.click(timeout=timeout))
        await self._attempt(
            "wait for network idle",
            page.wait_for_load_state("networkidle", timeout=self._ms(self.config.idle_timeout)),
        )
        logger.info("Submitted login form on %s", page.url)
        return True

    async def scroll_to_stable(self, page: Any, delay_ms: int) -> ScrollTracker:
        tracker = ScrollTracker(self.config.max_scrolls)
        while tracker.state is ScrollState.LOADING:
            height = await self._scroll_height(page)
            if tracker.observe(height) is not ScrollState.LOADING:
                break
            await self._attempt("scroll", page.evaluate(SCROLL_TO_BOTTOM_JS))
            await page.wait_for_timeout(delay_ms)
            tracker.complete_round()
        return tracker

    async def snapshot(self, page: Any) -> PageSnapshot:
        await self._attempt("stamp image sources", page.evaluate(STAMP_CURRENT_SRC_JS))
        html = await page.content()
        return PageSnapshot(url=page.url, html=html)

    # ---- Helpers ------------------------------------------------------------

    async def _username_field(self, page: Any) -> Any:
        try:
            email = page.locator(EMAIL_INPUT)
            if await email.count():
                return email.first
            named = page.locator(USERNAME_INPUTS)
            if await named.count():
                return named.first
        except PlaywrightError as exc:
            logger.debug("Username field lookup failed: %r", exc)
        return None

    async def _scroll_height(self, page: Any) -> int:
        try:
            return int(await page.evaluate(SCROLL_HEIGHT_JS) or 0)
        except PlaywrightError as exc:
            logger.debug("Reading scroll height failed: %r", exc)
            return 0

    async def _attempt(self, step: str, action: Any) -> bool:
        try:
            await action
        except PlaywrightError as exc:
            logger.debug("Skipped %s: %r", step, exc)
            return False
        return True

    @staticmethod
    def _ms(seconds: float) -> float:
        return seconds * 1000
