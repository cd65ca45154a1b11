"""
Tests for GarageApiClient against a local fake Garage API.
"""
from contextlib import asynccontextmanager

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from garage_nft.domain import (
    ApiError,
    Environment,
    MalformedResponseError,
    Network,
    TransportError,
    UpstreamHttpError,
)
from garage_nft.infrastructure.api_client import GarageApiClient


async def _collections(request: web.Request) -> web.Response:
    return web.json_response({
        "success": True,
        "data": {"items": [{"id": "0x1"}]},
        "pagination": {"page": 1, "limit": 10, "hasNext": False},
        "query": request.query_string,
    })


async def _not_found(request: web.Request) -> web.Response:
    return web.json_response({"success": False, "error": {"message": "not found", "code": "404"}})


async def _server_error(request: web.Request) -> web.Response:
    return web.json_response({"success": False, "error": {"message": "boom"}}, status=500)


async def _garbage(request: web.Request) -> web.Response:
    return web.Response(text="<html>oops</html>", content_type="text/html")


def _fake_garage() -> web.Application:
    app = web.Application()
    app.router.add_get("/mainnet/collections", _collections)
    app.router.add_get("/testnet/nfts/missing", _not_found)
    app.router.add_get("/mainnet/orders/broken", _server_error)
    app.router.add_get("/mainnet/receipts/tx/html", _garbage)
    return app


@asynccontextmanager
async def garage_client():
    server = TestServer(_fake_garage())
    await server.start_server()
    base = str(server.make_url("")).rstrip("/")
    client = GarageApiClient(
        base_urls={Environment.PRODUCTION: base, Environment.DEVELOPMENT: base},
        timeout=5,
    )
    try:
        yield client
    finally:
        await client.close()
        await server.close()


class TestUrlBuilding:

    def test_build_url_per_environment(self):
        client = GarageApiClient(base_urls={
            Environment.PRODUCTION: "https://garage-api.bako.global/",
            Environment.DEVELOPMENT: "http://localhost:3000",
        })

        assert client.build_url(Network.MAINNET, "collections", Environment.PRODUCTION) == (
            "https://garage-api.bako.global/mainnet/collections"
        )
        assert client.build_url(Network.TESTNET, "/nfts/1", Environment.DEVELOPMENT) == (
            "http://localhost:3000/testnet/nfts/1"
        )


class TestRequest:

    @pytest.mark.asyncio
    async def test_success_envelope(self):
        async with garage_client() as client:
            envelope = await client.request(Network.MAINNET, "collections?limit=5")

        assert envelope.success is True
        assert envelope.data == {"items": [{"id": "0x1"}]}
        assert envelope.pagination.page == 1
        assert envelope.pagination.has_next is False
        assert envelope.extra == {"query": "limit=5"}

    @pytest.mark.asyncio
    async def test_api_error_message_verbatim(self):
        async with garage_client() as client:
            with pytest.raises(ApiError) as exc_info:
                await client.request(Network.TESTNET, "nfts/missing")

        assert str(exc_info.value) == "not found"
        assert exc_info.value.message == "not found"
        assert exc_info.value.code == "404"

    @pytest.mark.asyncio
    async def test_non_2xx_is_upstream_http_error(self):
        async with garage_client() as client:
            with pytest.raises(UpstreamHttpError) as exc_info:
                await client.request(Network.MAINNET, "orders/broken")

        assert exc_info.value.status == 500
        assert "boom" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_unknown_route_is_upstream_http_error(self):
        async with garage_client() as client:
            with pytest.raises(UpstreamHttpError) as exc_info:
                await client.request(Network.MAINNET, "nope")

        assert exc_info.value.status == 404

    @pytest.mark.asyncio
    async def test_invalid_json_is_malformed(self):
        async with garage_client() as client:
            with pytest.raises(MalformedResponseError):
                await client.request(Network.MAINNET, "receipts/tx/html")

    @pytest.mark.asyncio
    async def test_connection_failure_is_transport_error(self):
        client = GarageApiClient(base_urls={Environment.PRODUCTION: "http://127.0.0.1:1"}, timeout=2)
        try:
            with pytest.raises(TransportError):
                await client.request(Network.MAINNET, "collections")
        finally:
            await client.close()


class TestFetchRaw:

    @pytest.mark.asyncio
    async def test_body_and_status_untouched(self):
        async with garage_client() as client:
            raw = await client.fetch_raw(Network.MAINNET, "orders/broken")
            page = await client.fetch_raw(Network.MAINNET, "collections", "limit=3")

        assert raw.status == 500
        assert raw.content_type.startswith("application/json")
        assert b"boom" in raw.body
        assert b'"query": "limit=3"' in page.body
