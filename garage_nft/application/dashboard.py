"""
Application Layer: Dashboard Loader
Fetches the collection list and turns it into a dashboard snapshot.
"""
import asyncio
import datetime
from typing import Any, Awaitable, Callable, List, Mapping, Optional

import structlog

from garage_nft.application.ports import IMarketClient
from garage_nft.domain import (
    CollectionDirectory,
    DashboardSnapshot,
    Environment,
    GarageError,
    Network,
    with_query,
)
from garage_nft.domain.analytics import (
    build_summaries,
    market_share,
    summarize,
    top_by_floor_price,
    top_by_sales,
    top_by_volume,
)

logger = structlog.get_logger()

LOAD_ERROR_MESSAGE = "Failed to load marketplace data. Please try again."

RANKING_SIZE = 5
BAR_CHART_SIZE = 8
PIE_CHART_SIZE = 6

SnapshotCallback = Callable[[DashboardSnapshot], Optional[Awaitable[None]]]


def _now() -> str:
    return datetime.datetime.now().isoformat(timespec="seconds")


def _extract_items(data: Any) -> List[Mapping[str, Any]]:
    if isinstance(data, Mapping):
        items = data.get("items")
        if isinstance(items, list):
            return [i for i in items if isinstance(i, Mapping)]
    return []


class DashboardLoader:
    """
    Builds a fresh snapshot per refresh; nothing carries over between cycles.
    A refresh that is still running is never re-entered.
    """

    def __init__(
        self,
        client: IMarketClient,
        directory: CollectionDirectory,
        network: Network = Network.MAINNET,
        limit: int = 50,
        environment: Environment = Environment.PRODUCTION,
    ) -> None:
        self.client = client
        self.directory = directory
        self.network = network
        self.limit = limit
        self.environment = environment
        self._refreshing = False
        self.last_snapshot: Optional[DashboardSnapshot] = None

    @property
    def refreshing(self) -> bool:
        return self._refreshing

    async def refresh(self) -> Optional[DashboardSnapshot]:
        """Returns None when another refresh is already in flight"""
        if self._refreshing:
            logger.info("refresh_skipped", reason="in_progress")
            return None

        self._refreshing = True
        try:
            snapshot = await self._load()
        finally:
            self._refreshing = False

        self.last_snapshot = snapshot
        return snapshot

    async def _load(self) -> DashboardSnapshot:
        endpoint = with_query("collections", f"limit={self.limit}")
        try:
            envelope = await self.client.request(self.network, endpoint, self.environment)
        except GarageError as e:
            logger.error("dashboard_load_failed", error=str(e), error_type=type(e).__name__)
            return DashboardSnapshot(fetched_at=_now(), error=LOAD_ERROR_MESSAGE)

        items = _extract_items(envelope.data)
        logger.info("dashboard_collections_loaded", count=len(items))
        return self.build_snapshot(items)

    def build_snapshot(self, items: List[Mapping[str, Any]]) -> DashboardSnapshot:
        collections = top_by_volume(build_summaries(items, self.directory), len(items))
        stats = summarize(collections)
        sales_chart = top_by_sales(collections, PIE_CHART_SIZE)
        share_base = collections[:PIE_CHART_SIZE]

        return DashboardSnapshot(
            fetched_at=_now(),
            collections=collections,
            stats=stats,
            top_volume=top_by_volume(collections, RANKING_SIZE),
            top_floor_price=top_by_floor_price(collections, RANKING_SIZE),
            top_sales=top_by_sales(collections, RANKING_SIZE),
            volume_chart=collections[:BAR_CHART_SIZE],
            floor_price_chart=[c for c in collections if c.floor_price > 0][:BAR_CHART_SIZE],
            sales_chart=sales_chart,
            market_share=market_share(share_base, stats.total_volume),
        )

    async def run_periodic(
        self,
        interval: float,
        on_snapshot: SnapshotCallback,
        stop_event: asyncio.Event,
    ) -> None:
        """Refresh, publish, wait `interval`; the next cycle starts only after the previous finished"""
        while not stop_event.is_set():
            snapshot = await self.refresh()
            if snapshot is not None:
                outcome = on_snapshot(snapshot)
                if outcome is not None:
                    await outcome
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                pass
