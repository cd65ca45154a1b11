"""
Infrastructure Layer: Dashboard Web Server
Static assets, a CORS-enabled passthrough to the Garage API and a JSON summary.
"""
from pathlib import Path
from typing import Awaitable, Callable

import structlog
from aiohttp import web

from garage_nft.application.dashboard import DashboardLoader
from garage_nft.domain import Network, TransportError
from garage_nft.infrastructure.api_client import GarageApiClient

logger = structlog.get_logger()

API_PREFIX = "/api/"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE",
    "Access-Control-Allow-Headers": "Content-Type",
}

CLIENT_KEY = web.AppKey("client", GarageApiClient)
LOADER_KEY = web.AppKey("loader", DashboardLoader)
STATIC_DIR_KEY = web.AppKey("static_dir", Path)
NETWORK_KEY = web.AppKey("network", Network)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@web.middleware
async def cors_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    if request.method == "OPTIONS":
        return web.Response(status=204, headers=CORS_HEADERS)
    try:
        response = await handler(request)
    except web.HTTPException as exc:
        exc.headers.update(CORS_HEADERS)
        raise
    response.headers.update(CORS_HEADERS)
    return response


async def handle_api_proxy(request: web.Request) -> web.Response:
    """Forward /api/<path>?<query> to the upstream, status and body unchanged"""
    client = request.app[CLIENT_KEY]
    path = request.rel_url.raw_path[len(API_PREFIX):]
    try:
        raw = await client.fetch_raw(request.app[NETWORK_KEY], path, request.rel_url.raw_query_string)
    except TransportError as e:
        logger.error("api_proxy_error", path=path, error=str(e))
        return web.json_response({"error": "API request failed"}, status=502)

    logger.info("api_proxied", path=path, status=raw.status)
    return web.Response(status=raw.status, body=raw.body, headers={"Content-Type": raw.content_type})


async def handle_summary(request: web.Request) -> web.Response:
    loader = request.app[LOADER_KEY]
    snapshot = await loader.refresh()
    if snapshot is None:
        snapshot = loader.last_snapshot
    if snapshot is None:
        return web.json_response({"error": "Refresh in progress"}, status=503)
    return web.json_response(snapshot.to_dict(), status=200 if snapshot.ok else 502)


async def handle_static(request: web.Request) -> web.StreamResponse:
    root = request.app[STATIC_DIR_KEY].resolve()
    relative = request.match_info.get("path", "") or "index.html"
    target = (root / relative).resolve()

    if root != target and root not in target.parents:
        raise web.HTTPNotFound(text="File not found")
    if target.is_dir():
        target = target / "index.html"
    if not target.is_file():
        raise web.HTTPNotFound(text="File not found")
    return web.FileResponse(target)


async def _on_cleanup(app: web.Application) -> None:
    await app[CLIENT_KEY].close()


def create_app(
    client: GarageApiClient,
    loader: DashboardLoader,
    static_dir: Path,
    network: Network = Network.MAINNET,
) -> web.Application:
    app = web.Application(middlewares=[cors_middleware])
    app[CLIENT_KEY] = client
    app[LOADER_KEY] = loader
    app[STATIC_DIR_KEY] = Path(static_dir)
    app[NETWORK_KEY] = network
    app.on_cleanup.append(_on_cleanup)

    app.router.add_get("/api/{tail:.*}", handle_api_proxy)
    app.router.add_get("/dashboard/summary", handle_summary)
    app.router.add_get("/", handle_static)
    app.router.add_get("/{path:.*}", handle_static)
    return app
