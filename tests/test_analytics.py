"""
Tests for market statistics, rankings and share.
"""
from garage_nft.domain import CollectionSummary, MarketStats
from garage_nft.domain.analytics import (
    build_summaries,
    market_share,
    share_percent,
    summarize,
    top_by_floor_price,
    top_by_sales,
    top_by_volume,
)

from conftest import MR_JIM


def summary(name: str, volume: float = 0.0, floor_price: float = 0.0, sales: int = 0) -> CollectionSummary:
    return CollectionSummary(id=name, name=name, floor_price=floor_price, volume=volume, sales=sales)


class TestSummarize:

    def test_empty(self):
        assert summarize([]) == MarketStats(total_volume=0, total_sales=0, avg_floor_price=0, active_count=0)

    def test_average_floor_ignores_unlisted(self):
        stats = summarize([
            summary("a", volume=10, floor_price=0, sales=5),
            summary("b", volume=0, floor_price=2, sales=0),
        ])

        assert stats.total_volume == 10
        assert stats.active_count == 1
        assert stats.avg_floor_price == 2
        assert stats.total_sales == 5


class TestRankings:

    def test_ties_keep_input_order(self):
        ranked = top_by_volume([summary("A", 5), summary("B", 10), summary("C", 10)], 2)
        assert [c.name for c in ranked] == ["B", "C"]

    def test_floor_and_sales_drop_zero_entries(self):
        collections = [summary("A", floor_price=0, sales=3), summary("B", floor_price=1.5, sales=0)]

        assert [c.name for c in top_by_floor_price(collections, 5)] == ["B"]
        assert [c.name for c in top_by_sales(collections, 5)] == ["A"]

    def test_truncates(self):
        collections = [summary(str(i), volume=i) for i in range(10)]
        assert [c.name for c in top_by_volume(collections, 3)] == ["9", "8", "7"]
        assert top_by_volume(collections, 0) == []


class TestMarketShare:

    def test_zero_total_is_zero_not_nan(self):
        assert share_percent(5, 0) == 0.0
        assert [s.percent for s in market_share([summary("A"), summary("B")])] == [0.0, 0.0]

    def test_rounded_to_one_decimal(self):
        shares = market_share([summary("A", 1), summary("B", 2)])
        assert [(s.name, s.percent) for s in shares] == [("A", 33.3), ("B", 66.7)]

    def test_explicit_total(self):
        shares = market_share([summary("A", 25)], total_volume=100)
        assert shares[0].percent == 25.0


class TestBuildSummaries:

    def test_names_and_metrics(self, directory):
        items = [
            {"id": MR_JIM, "name": "ignored", "metrics": {"floorPrice": "1.5", "volume": 20, "sales": 4}},
            {"id": "0xabcdef1234567890", "name": "Other", "metrics": {}},
            {"id": "0x9999888877776666"},
        ]

        summaries = build_summaries(items, directory)

        assert [s.name for s in summaries] == ["Mr. Jim", "Other", "0x999988..."]
        assert summaries[0].floor_price == 1.5
        assert summaries[0].volume == 20
        assert summaries[0].sales == 4
        assert summaries[1] == CollectionSummary(id="0xabcdef1234567890", name="Other")
