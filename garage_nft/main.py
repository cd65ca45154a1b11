"""
Main Entry Point (Composition Root)
"""
import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

import structlog
from aiohttp import web
from rich.console import Console
from rich.table import Table

from garage_nft.application.dashboard import DashboardLoader
from garage_nft.application.market_service import GarageMarketService
from garage_nft.application.tools import ToolRegistry
from garage_nft.application.ui import DashboardService
from garage_nft.domain import CollectionDirectory, Network, default_directory
from garage_nft.infrastructure.api_client import GarageApiClient
from garage_nft.infrastructure.config import settings
from garage_nft.infrastructure.mcp_server import serve_stdio
from garage_nft.infrastructure.repo import load_directory_entries
from garage_nft.infrastructure.web_server import create_app

logger = structlog.get_logger()


def configure_logging(level: str = "INFO") -> None:
    """JSON logs on stderr; stdout belongs to the MCP transport"""
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def build_directory(collections_file: Optional[Path] = None) -> CollectionDirectory:
    directory = default_directory()
    if collections_file is None:
        return directory

    extra = load_directory_entries(collections_file)
    if extra:
        directory = directory.merged(extra)
    logger.info("directory_ready", count=len(directory), extra=len(extra))
    return directory


# --- Commands ---

async def run_mcp() -> None:
    client = GarageApiClient()
    registry = ToolRegistry(GarageMarketService(client, build_directory(settings.collections_file)))
    try:
        await serve_stdio(registry)
    finally:
        await client.close()
        logger.info("shutdown_complete")


async def run_dashboard(network: Network, interval: float) -> None:
    client = GarageApiClient()
    loader = DashboardLoader(
        client,
        build_directory(settings.collections_file),
        network=network,
        limit=settings.dashboard_limit,
        environment=settings.environment,
    )
    dashboard = DashboardService(network)

    stop_event = asyncio.Event()

    def signal_handler() -> None:
        dashboard.stop()
        logger.info("shutdown_signal_received")
        stop_event.set()

    loop = asyncio.get_running_loop()
    loop.add_signal_handler(signal.SIGINT, signal_handler)
    loop.add_signal_handler(signal.SIGTERM, signal_handler)

    logger.info("starting_loop", network=network.value, interval=interval)
    dashboard.start()
    try:
        await loader.run_periodic(interval, dashboard.show_snapshot, stop_event)
    except Exception as e:
        dashboard.stop()
        logger.critical("fatal_error", error=str(e))
        raise
    finally:
        dashboard.stop()
        await client.close()
        logger.info("shutdown_complete")


def run_server(host: str, port: int, static_dir: Path, network: Network) -> None:
    client = GarageApiClient()
    loader = DashboardLoader(
        client,
        build_directory(settings.collections_file),
        network=network,
        limit=settings.dashboard_limit,
        environment=settings.environment,
    )
    app = create_app(client, loader, static_dir, network)
    logger.info("web_server_starting", host=host, port=port, static_dir=str(static_dir))
    web.run_app(app, host=host, port=port, print=None)


def print_collections() -> None:
    directory = build_directory(settings.collections_file)
    table = Table(title="Known Collections")
    table.add_column("Name", style="cyan")
    table.add_column("Contract Address", style="dim")
    for entry in directory:
        table.add_row(entry.display_name, entry.contract_address)
    Console().print(table)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="garage-nft", description="Garage NFT marketplace tools")
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser("mcp", help="Run the MCP tool server on stdio")

    serve = commands.add_parser("serve", help="Serve the web dashboard and API passthrough")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)
    serve.add_argument("--static-dir", type=Path, default=settings.static_dir)
    serve.add_argument("--network", type=Network, choices=list(Network), default=settings.dashboard_network)

    dashboard = commands.add_parser("dashboard", help="Live terminal dashboard")
    dashboard.add_argument("--network", type=Network, choices=list(Network), default=settings.dashboard_network)
    dashboard.add_argument("--interval", type=float, default=settings.refresh_interval)

    commands.add_parser("collections", help="Print the known collection directory")
    return parser


def run(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(settings.log_level)
    logger.info("startup", command=args.command, environment=settings.environment.value)

    if args.command == "mcp":
        asyncio.run(run_mcp())
    elif args.command == "dashboard":
        asyncio.run(run_dashboard(args.network, args.interval))
    elif args.command == "serve":
        run_server(args.host, args.port, args.static_dir, args.network)
    elif args.command == "collections":
        print_collections()


if __name__ == "__main__":
    run()
