from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from pyinfinitive._transport import HttpTransport
from pyinfinitive.config import InfinitiveConfig
from pyinfinitive.exceptions import InfinitiveRequestError


def _app(received: list[tuple[str, Any]]) -> web.Application:
    async def get_config(_request: web.Request) -> web.Response:
        return web.json_response({"coolSetpoint": 74, "mode": "cool"})

    async def put_config(request: web.Request) -> web.Response:
        received.append((request.headers["content-type"], await request.json()))
        return web.Response()

    async def bad_zone(_request: web.Request) -> web.Response:
        return web.json_response([{"error": "invalid zone: 9"}], status=400)

    async def not_json(_request: web.Request) -> web.Response:
        return web.Response(text="<html>oops</html>")

    async def slow(_request: web.Request) -> web.Response:
        await asyncio.sleep(1.0)
        return web.json_response({})

    app = web.Application()
    app.router.add_get("/api/zone/1/config", get_config)
    app.router.add_put("/api/zone/1/config", put_config)
    app.router.add_get("/api/zone/9/config", bad_zone)
    app.router.add_get("/api/heatpump", not_json)
    app.router.add_put("/api/heatpump", not_json)
    app.router.add_get("/api/airhandler", slow)
    return app


@pytest.mark.asyncio
async def test_get_and_put_json() -> None:
    received: list[tuple[str, Any]] = []
    async with TestServer(_app(received)) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(InfinitiveConfig(base_url=str(server.make_url("/"))), http)

        body = await transport.get_json("/api/zone/1/config")
        response = await transport.put_json("/api/zone/1/config", {"fanMode": "high"})

    assert body == {"coolSetpoint": 74, "mode": "cool"}
    assert response is None
    assert received == [("application/json; charset=UTF-8", {"fanMode": "high"})]


@pytest.mark.asyncio
async def test_non_success_status_raises_with_status_code() -> None:
    async with TestServer(_app([])) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(InfinitiveConfig(base_url=str(server.make_url("/"))), http)

        with pytest.raises(InfinitiveRequestError) as excinfo:
            await transport.get_json("/api/zone/9/config")

    assert excinfo.value.status_code == 400
    assert excinfo.value.endpoint == "/api/zone/9/config"
    assert "invalid zone" in str(excinfo.value)


@pytest.mark.asyncio
async def test_invalid_json_fails_get_but_not_put() -> None:
    async with TestServer(_app([])) as server, aiohttp.ClientSession() as http:
        transport = HttpTransport(InfinitiveConfig(base_url=str(server.make_url("/"))), http)

        with pytest.raises(InfinitiveRequestError, match="Invalid JSON"):
            await transport.get_json("/api/heatpump")
        assert await transport.put_json("/api/heatpump", {"x": 1}) == "<html>oops</html>"


@pytest.mark.asyncio
async def test_timeout_raises_request_error() -> None:
    async with TestServer(_app([])) as server, aiohttp.ClientSession() as http:
        config = InfinitiveConfig(base_url=str(server.make_url("/")), request_timeout=0.05)
        transport = HttpTransport(config, http)

        with pytest.raises(InfinitiveRequestError) as excinfo:
            await transport.get_json("/api/airhandler")

    assert excinfo.value.endpoint == "/api/airhandler"


@pytest.mark.asyncio
async def test_connection_refused_raises_request_error() -> None:
    async with TestServer(_app([])) as server:
        base_url = str(server.make_url("/"))

    async with aiohttp.ClientSession() as http:
        transport = HttpTransport(InfinitiveConfig(base_url=base_url), http)
        with pytest.raises(InfinitiveRequestError, match="failed"):
            await transport.put_json("/api/zone/1/config", {"mode": "off"})
