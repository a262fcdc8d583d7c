"""Tests for HttpTransport against a local aiohttp server."""

from __future__ import annotations

from typing import Any

import aiohttp
import pytest
from aiohttp import test_utils, web

from cartsync._transport import HttpTransport
from cartsync.config import CartSyncConfig
from cartsync.exceptions import CartTransportError


def _make_app(carts: dict[str, Any], seen_headers: list[str]) -> web.Application:
    async def get_cart(request: web.Request) -> web.Response:
        seen_headers.append(request.headers.get("Authorization", ""))
        key = request.match_info["key"]
        if key == "broken":
            return web.Response(status=500, text="internal error")
        if key == "garbage":
            return web.Response(status=200, text="not json")
        if key not in carts:
            raise web.HTTPNotFound()
        return web.json_response(carts[key])

    async def put_cart(request: web.Request) -> web.Response:
        carts[request.match_info["key"]] = await request.json()
        return web.Response(status=204)

    app = web.Application()
    app.router.add_get("/api/carts/{key}", get_cart)
    app.router.add_put("/api/carts/{key}", put_cart)
    return app


@pytest.mark.asyncio
async def test_get_and_put_json() -> None:
    carts: dict[str, Any] = {}
    seen_headers: list[str] = []
    async with test_utils.TestServer(_make_app(carts, seen_headers)) as server:
        config = CartSyncConfig(base_url=str(server.make_url("/api")), api_token="secret-token")
        async with aiohttp.ClientSession() as session:
            transport = HttpTransport(config, session)

            assert await transport.get_json("/carts/user-1") is None
            await transport.put_json("/carts/user-1", {"items": {"A": 1}})
            assert await transport.get_json("/carts/user-1") == {"items": {"A": 1}}

    assert carts == {"user-1": {"items": {"A": 1}}}
    assert seen_headers[0] == "Bearer secret-token"


@pytest.mark.asyncio
async def test_error_status_raises_transport_error() -> None:
    async with test_utils.TestServer(_make_app({}, [])) as server:
        config = CartSyncConfig(base_url=str(server.make_url("/api")))
        async with aiohttp.ClientSession() as session:
            transport = HttpTransport(config, session)
            with pytest.raises(CartTransportError) as exc_info:
                await transport.get_json("/carts/broken")

    assert exc_info.value.status_code == 500
    assert exc_info.value.endpoint == "/carts/broken"


@pytest.mark.asyncio
async def test_invalid_json_raises_transport_error() -> None:
    async with test_utils.TestServer(_make_app({}, [])) as server:
        config = CartSyncConfig(base_url=str(server.make_url("/api")))
        async with aiohttp.ClientSession() as session:
            with pytest.raises(CartTransportError):
                await HttpTransport(config, session).get_json("/carts/garbage")


@pytest.mark.asyncio
async def test_connection_failure_raises_transport_error() -> None:
    config = CartSyncConfig(base_url="http://127.0.0.1:1/api", request_timeout=2.0)
    async with aiohttp.ClientSession() as session:
        with pytest.raises(CartTransportError):
            await HttpTransport(config, session).get_json("/carts/user-1")
