"""
Tests for GarageMarketService: endpoint building, resolution and enrichment.
"""
import pytest

from garage_nft.application.market_service import GarageMarketService
from garage_nft.domain import (
    ApiError,
    Environment,
    Network,
    OrderDirection,
    OrderStatus,
    QueryOptions,
)

from conftest import BAKTERIA, MR_JIM, FakeMarketClient


@pytest.fixture
def service(fake_client, directory):
    return GarageMarketService(fake_client, directory)


class TestKnownCollections:

    def test_list_known_collections(self, service):
        result = service.list_known_collections()

        assert result["success"] is True
        assert result["data"]["total"] == 2
        assert result["data"]["collections"][0] == {
            "name": "Mr. Jim",
            "contractAddress": MR_JIM,
            "displayName": f"Mr. Jim ({MR_JIM})",
        }
        assert "name or contract address" in result["data"]["message"]


class TestCollections:

    @pytest.mark.asyncio
    async def test_get_collections_defaults_drop_out(self, service, fake_client):
        await service.get_collections(Network.MAINNET, QueryOptions(page=1, limit=10))
        assert fake_client.calls == [(Network.MAINNET, "collections", Environment.PRODUCTION)]

    @pytest.mark.asyncio
    async def test_get_collections_with_filters(self, service, fake_client):
        options = QueryOptions(name="Koby", limit=20, order_direction=OrderDirection.ASC)
        await service.get_collections(Network.TESTNET, options, Environment.DEVELOPMENT)

        network, endpoint, environment = fake_client.calls[0]
        assert network == Network.TESTNET
        assert endpoint == "collections?name=Koby&limit=20&orderDirection=ASC"
        assert environment == Environment.DEVELOPMENT

    @pytest.mark.asyncio
    async def test_featured(self, service, fake_client):
        await service.get_featured_collections(Network.MAINNET)
        await service.get_featured_collections(Network.MAINNET, limit=6)
        assert [c[1] for c in fake_client.calls] == ["collections/featured", "collections/featured?limit=6"]

    @pytest.mark.asyncio
    async def test_details_resolve_name_and_enrich(self, service, fake_client):
        envelope = await service.get_collection_details(Network.MAINNET, "mr. jim", from_date="2024-01-01")

        assert fake_client.last_endpoint == f"collections/{MR_JIM}?fromDate=2024-01-01"
        assert envelope.data["resolvedInfo"]["inputId"] == "mr. jim"
        assert envelope.data["resolvedInfo"]["collectionName"] == "Mr. Jim"

    @pytest.mark.asyncio
    async def test_scoped_listings(self, service, fake_client):
        await service.get_collection_nfts(Network.MAINNET, "Bakteria", QueryOptions(page=0, limit=5))
        await service.get_collection_activities(Network.MAINNET, BAKTERIA)
        await service.get_collection_orders(
            Network.MAINNET, "Bakteria", QueryOptions(status=OrderStatus.CANCELLED, asset_id="0xa1")
        )

        assert [c[1] for c in fake_client.calls] == [
            f"collections/{BAKTERIA}/nfts?limit=5",
            f"collections/{BAKTERIA}/activities",
            f"collections/{BAKTERIA}/orders?status=1&assetId=0xa1",
        ]

    @pytest.mark.asyncio
    async def test_unknown_collection_forwarded_as_is(self, service, fake_client):
        envelope = await service.get_collection_nfts(Network.MAINNET, "Nope")

        assert fake_client.last_endpoint == "collections/Nope/nfts"
        assert envelope.data["resolvedInfo"]["resolvedId"] == "Nope"

    @pytest.mark.asyncio
    async def test_list_data_not_enriched(self, directory):
        client = FakeMarketClient({"success": True, "data": [{"id": 1}]})
        envelope = await GarageMarketService(client, directory).get_collection_nfts(Network.MAINNET, "Mr. Jim")
        assert envelope.data == [{"id": 1}]

    @pytest.mark.asyncio
    async def test_errors_propagate(self, directory):
        client = FakeMarketClient(error=ApiError("not found", "404"))
        with pytest.raises(ApiError):
            await GarageMarketService(client, directory).get_collection_details(Network.MAINNET, "Mr. Jim")


class TestOtherResources:

    @pytest.mark.asyncio
    async def test_endpoints(self, service, fake_client):
        await service.get_nft_details(Network.MAINNET, "nft-1")
        await service.get_nft_activities(Network.MAINNET, "nft-1", QueryOptions(limit=3))
        await service.get_order_details(Network.MAINNET, "order/1")
        await service.get_user_orders(Network.MAINNET, "0xseller", QueryOptions(page=2))
        await service.get_receipt_status(Network.TESTNET, "0xtx")

        assert [c[1] for c in fake_client.calls] == [
            "nfts/nft-1",
            "nfts/nft-1/activities?limit=3",
            "orders/order%2F1",
            "user/orders/0xseller?page=2",
            "receipts/tx/0xtx",
        ]
