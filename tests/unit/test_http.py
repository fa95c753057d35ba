"""
Unit tests for image downloads against a local aiohttp server
"""

import asyncio

from aiohttp import web
from aiohttp import test_utils

from catalog_crawler.utils.http import AiohttpImageFetcher, create_session, fetch_bytes

PNG = b"\x89PNG\r\n\x1a\n fake"


def build_app():
    async def image(request):
        assert request.headers.get("User-Agent") == "catalog_crawler/test"
        return web.Response(body=PNG, content_type="image/png")

    async def slow(request):
        await asyncio.sleep(0.5)
        return web.Response(body=PNG)

    app = web.Application()
    app.router.add_get("/a.png", image)
    app.router.add_get("/slow.jpg", slow)
    return app


async def fetch_from_server(path, timeout=5.0):
    server = test_utils.TestServer(build_app())
    await server.start_server()
    session = create_session()
    try:
        fetcher = AiohttpImageFetcher(session, timeout=timeout, user_agent="catalog_crawler/test")
        return await fetcher.fetch(str(server.make_url(path)))
    finally:
        await session.close()
        await server.close()


def test_ok_returns_body():
    outcome = asyncio.run(fetch_from_server("/a.png"))
    assert outcome.ok is True
    assert outcome.data == PNG
    assert outcome.error is None


def test_not_found_is_a_failed_outcome():
    outcome = asyncio.run(fetch_from_server("/missing.jpg"))
    assert outcome.ok is False
    assert "404" in outcome.error


def test_timeout_is_a_failed_outcome():
    outcome = asyncio.run(fetch_from_server("/slow.jpg", timeout=0.1))
    assert outcome.ok is False
    assert outcome.data is None


def test_connection_refused_is_a_failed_outcome():
    async def run():
        session = create_session()
        try:
            return await fetch_bytes(session, f"http://127.0.0.1:{test_utils.unused_port()}/a.jpg", timeout=2.0)
        finally:
            await session.close()

    outcome = asyncio.run(run())
    assert outcome.ok is False


def test_malformed_url_is_a_failed_outcome():
    async def run():
        session = create_session()
        try:
            return await fetch_bytes(session, "http://", timeout=2.0)
        finally:
            await session.close()

    assert asyncio.run(run()).ok is False
