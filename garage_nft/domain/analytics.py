"""
Domain Layer: Market Analytics
Aggregates collection summaries into stats, rankings and market share.
"""
from typing import Any, Callable, Iterable, List, Mapping, Optional, Sequence

from .directory import CollectionDirectory
from .models import CollectionSummary, MarketShare, MarketStats


def _as_float(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _as_int(value: Any) -> int:
    try:
        return int(float(value or 0))
    except (TypeError, ValueError):
        return 0


def build_summaries(items: Iterable[Mapping[str, Any]], directory: CollectionDirectory) -> List[CollectionSummary]:
    """Convert API collection items to summaries, naming them from the directory first"""
    summaries = []
    for item in items:
        collection_id = str(item.get("id", ""))
        metrics = item.get("metrics") or {}
        name = directory.display_name(collection_id)
        if name == collection_id:
            name = item.get("name") or f"{collection_id[:8]}..."
        summaries.append(CollectionSummary(
            id=collection_id,
            name=name,
            floor_price=max(_as_float(metrics.get("floorPrice")), 0.0),
            volume=max(_as_float(metrics.get("volume")), 0.0),
            sales=max(_as_int(metrics.get("sales")), 0),
        ))
    return summaries


def summarize(collections: Sequence[CollectionSummary]) -> MarketStats:
    """
    Totals over every entry; the average floor only counts listed collections
    (floor > 0) and is 0 when none are.
    """
    floors = [c.floor_price for c in collections if c.floor_price > 0]
    return MarketStats(
        total_volume=sum(c.volume for c in collections),
        total_sales=sum(c.sales for c in collections),
        avg_floor_price=sum(floors) / len(floors) if floors else 0.0,
        active_count=sum(1 for c in collections if c.volume > 0),
    )


def _top(
    collections: Iterable[CollectionSummary],
    key: Callable[[CollectionSummary], float],
    n: int,
    positive_only: bool,
) -> List[CollectionSummary]:
    pool = [c for c in collections if key(c) > 0] if positive_only else list(collections)
    # sorted() is stable, ties keep input order
    return sorted(pool, key=key, reverse=True)[:max(n, 0)]


def top_by_volume(collections: Iterable[CollectionSummary], n: int) -> List[CollectionSummary]:
    return _top(collections, lambda c: c.volume, n, positive_only=False)


def top_by_floor_price(collections: Iterable[CollectionSummary], n: int) -> List[CollectionSummary]:
    return _top(collections, lambda c: c.floor_price, n, positive_only=True)


def top_by_sales(collections: Iterable[CollectionSummary], n: int) -> List[CollectionSummary]:
    return _top(collections, lambda c: c.sales, n, positive_only=True)


def share_percent(volume: float, total_volume: float) -> float:
    if total_volume <= 0:
        return 0.0
    return round(volume / total_volume * 100, 1)


def market_share(
    collections: Sequence[CollectionSummary],
    total_volume: Optional[float] = None,
) -> List[MarketShare]:
    """Percent of `total_volume` (defaults to the sum over `collections`) per entry"""
    if total_volume is None:
        total_volume = sum(c.volume for c in collections)
    return [MarketShare(c.name, share_percent(c.volume, total_volume)) for c in collections]
