from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Protocol
from aiohttp import ClientSession, ClientTimeout
import aiohttp
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchOutcome:
    """Result of one download; failures are values, not exceptions."""
    url: str
    data: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.data is not None and self.error is None


class ImageFetcher(Protocol):
    async def fetch(self, url: str) -> FetchOutcome:
        ...


async def fetch_bytes(
    session: ClientSession,
    url: str,
    *,
    timeout: float = 20.0,
    user_agent: Optional[str] = None,
) -> FetchOutcome:
    """
    Fetch a URL and return its body. Network errors, timeouts and non-2xx
    responses all come back as a failed FetchOutcome.
    """
    headers = {}
    if user_agent:
        headers["User-Agent"] = user_agent

    try:
        async with session.get(url, headers=headers, timeout=ClientTimeout(total=timeout)) as resp:
            resp.raise_for_status()
            return FetchOutcome(url=url, data=await resp.read())
    except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as exc:
        logger.debug("fetch_bytes failed for %s: %r", url, exc)
        return FetchOutcome(url=url, error=repr(exc))


class AiohttpImageFetcher:
    """ImageFetcher backed by a shared aiohttp session owned by the caller."""

    def __init__(self, session: ClientSession, *, timeout: float = 20.0, user_agent: Optional[str] = None) -> None:
        self.session = session
        self.timeout = timeout
        self.user_agent = user_agent

    async def fetch(self, url: str) -> FetchOutcome:
        return await fetch_bytes(self.session, url, timeout=self.timeout, user_agent=self.user_agent)


def create_session() -> ClientSession:
    """
    Create an aiohttp ClientSession for image downloads.
    """
    # Note: caller is responsible for closing the session (await session.close()).
    # Downloads are sequential, so a single connection per host is plenty.
    connector = aiohttp.TCPConnector(limit_per_host=1)
    return aiohttp.ClientSession(connector=connector)
