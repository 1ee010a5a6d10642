"""Tests for BadgeProxyProvider against a local aiohttp server."""

import asyncio

from aiohttp import test_utils, web

from fyrechat.chat.badges.cache import BadgeCache
from fyrechat.chat.badges.provider import BadgeProxyProvider

GLOBAL_PAYLOAD = {
    "data": [
        {
            "set_id": "moderator",
            "versions": [
                {"id": "1", "image_url_1x": "https://m/1x", "image_url_2x": "https://m/2x"}
            ],
        }
    ]
}
CHANNEL_PAYLOAD = {
    "data": [{"set_id": "subscriber", "versions": [{"id": "6", "image_url_1x": "https://s/1x"}]}]
}


def _make_app(requests: list[str]) -> web.Application:
    async def global_badges(request):
        requests.append(request.path)
        return web.json_response(GLOBAL_PAYLOAD)

    async def channel_badges(request):
        requests.append(request.path)
        room_id = request.match_info["room_id"]
        if room_id == "42":
            return web.json_response(CHANNEL_PAYLOAD)
        if room_id == "html":
            return web.Response(text="<html>oops</html>", content_type="text/html")
        return web.Response(status=404)

    app = web.Application()
    app.router.add_get("/badges/global", global_badges)
    app.router.add_get("/badges/channels/{room_id}", channel_badges)
    return app


def _run_with_server(coro_factory):
    requests: list[str] = []

    async def run():
        server = test_utils.TestServer(_make_app(requests))
        await server.start_server()
        try:
            base_url = str(server.make_url("")).rstrip("/")
            return await coro_factory(base_url + "/")
        finally:
            await server.close()

    return asyncio.run(run()), requests


def test_fetch_global():
    async def fetch(base_url):
        return await BadgeProxyProvider(base_url).fetch_global()

    table, requests = _run_with_server(fetch)
    assert table == {"moderator/1": "https://m/2x"}
    assert requests == ["/badges/global"]


def test_fetch_channel():
    async def fetch(base_url):
        return await BadgeProxyProvider(base_url).fetch_channel("42")

    table, _ = _run_with_server(fetch)
    assert table == {"subscriber/6": "https://s/1x"}


def test_fetch_channel_not_found():
    async def fetch(base_url):
        return await BadgeProxyProvider(base_url).fetch_channel("404")

    table, _ = _run_with_server(fetch)
    assert table is None


def test_fetch_channel_non_json():
    async def fetch(base_url):
        return await BadgeProxyProvider(base_url).fetch_channel("html")

    table, _ = _run_with_server(fetch)
    assert table is None


def test_unreachable_proxy():
    # Nothing listens on port 9 (discard) locally
    table = asyncio.run(BadgeProxyProvider("http://127.0.0.1:9", timeout=2).fetch_global())
    assert table is None


def test_cache_with_proxy_fetches_once():
    async def load(base_url):
        cache = BadgeCache(BadgeProxyProvider(base_url))
        await asyncio.gather(*(cache.ensure_loaded("42") for _ in range(5)))
        await cache.ensure_loaded("404")
        await cache.ensure_loaded("404")
        return cache

    cache, requests = _run_with_server(load)
    assert cache.get_global() == {"moderator/1": "https://m/2x"}
    assert cache.get_channel("42") == {"subscriber/6": "https://s/1x"}
    assert cache.get_channel("404") == {}
    assert sorted(requests) == [
        "/badges/channels/404",
        "/badges/channels/42",
        "/badges/global",
    ]
