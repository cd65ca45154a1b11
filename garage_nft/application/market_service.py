"""
Application Layer: Market Service
One operation per Garage resource: resolve, normalize, request, enrich.
"""
from typing import Any, Dict, Mapping, Optional
from urllib.parse import quote

import structlog

from garage_nft.application.ports import IMarketClient
from garage_nft.domain import (
    ApiEnvelope,
    CollectionDirectory,
    Environment,
    Network,
    QueryOptions,
    enrich,
    normalize_query,
    with_query,
)
from garage_nft.domain.query import (
    FEATURED_DEFAULTS,
    LISTING_DEFAULTS,
    ORDER_LISTING_DEFAULTS,
    SCOPED_LISTING_DEFAULTS,
)

logger = structlog.get_logger()

KNOWN_COLLECTIONS_MESSAGE = "These collections can be referenced by name or contract address in other tools"


def _segment(value: str) -> str:
    return quote(str(value), safe="")


class GarageMarketService:
    """
    Main Application Service.
    Every call issues at most one upstream request and awaits it.
    """

    def __init__(self, client: IMarketClient, directory: CollectionDirectory) -> None:
        self.client = client
        self.directory = directory

    def list_known_collections(self) -> Dict[str, Any]:
        collections = [
            {
                "name": entry.display_name,
                "contractAddress": entry.contract_address,
                "displayName": self.directory.describe(entry.contract_address),
            }
            for entry in self.directory.entries()
        ]
        return {
            "success": True,
            "data": {
                "collections": collections,
                "total": len(collections),
                "message": KNOWN_COLLECTIONS_MESSAGE,
            },
        }

    # --- Collections ---

    async def get_collections(
        self,
        network: Network,
        options: Optional[QueryOptions] = None,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        query = normalize_query(options, LISTING_DEFAULTS)
        return await self.client.request(network, with_query("collections", query), environment)

    async def get_featured_collections(
        self,
        network: Network,
        limit: Optional[int] = None,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        query = normalize_query({"limit": limit}, FEATURED_DEFAULTS)
        return await self.client.request(network, with_query("collections/featured", query), environment)

    async def get_collection_details(
        self,
        network: Network,
        collection_id: str,
        from_date: Optional[str] = None,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        resolved = self.directory.resolve(collection_id)
        query = normalize_query({"fromDate": from_date})
        endpoint = with_query(f"collections/{_segment(resolved)}", query)
        return await self._scoped(network, endpoint, environment, collection_id, resolved)

    async def get_collection_nfts(
        self,
        network: Network,
        collection_id: str,
        options: Optional[QueryOptions] = None,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        return await self._collection_listing(
            network, collection_id, "nfts", options, SCOPED_LISTING_DEFAULTS, environment
        )

    async def get_collection_orders(
        self,
        network: Network,
        collection_id: str,
        options: Optional[QueryOptions] = None,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        return await self._collection_listing(
            network, collection_id, "orders", options, ORDER_LISTING_DEFAULTS, environment
        )

    async def get_collection_activities(
        self,
        network: Network,
        collection_id: str,
        options: Optional[QueryOptions] = None,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        return await self._collection_listing(
            network, collection_id, "activities", options, SCOPED_LISTING_DEFAULTS, environment
        )

    # --- NFTs, orders, receipts ---

    async def get_nft_details(
        self,
        network: Network,
        nft_id: str,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        return await self.client.request(network, f"nfts/{_segment(nft_id)}", environment)

    async def get_nft_activities(
        self,
        network: Network,
        nft_id: str,
        options: Optional[QueryOptions] = None,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        query = normalize_query(options, SCOPED_LISTING_DEFAULTS)
        endpoint = with_query(f"nfts/{_segment(nft_id)}/activities", query)
        return await self.client.request(network, endpoint, environment)

    async def get_order_details(
        self,
        network: Network,
        order_id: str,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        return await self.client.request(network, f"orders/{_segment(order_id)}", environment)

    async def get_user_orders(
        self,
        network: Network,
        seller_address: str,
        options: Optional[QueryOptions] = None,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        query = normalize_query(options, SCOPED_LISTING_DEFAULTS)
        endpoint = with_query(f"user/orders/{_segment(seller_address)}", query)
        return await self.client.request(network, endpoint, environment)

    async def get_receipt_status(
        self,
        network: Network,
        tx_id: str,
        environment: Environment = Environment.PRODUCTION,
    ) -> ApiEnvelope:
        return await self.client.request(network, f"receipts/tx/{_segment(tx_id)}", environment)

    # --- Helpers ---

    async def _collection_listing(
        self,
        network: Network,
        collection_id: str,
        resource: str,
        options: Optional[QueryOptions],
        defaults: Mapping[str, Any],
        environment: Environment,
    ) -> ApiEnvelope:
        resolved = self.directory.resolve(collection_id)
        query = normalize_query(options, defaults)
        endpoint = with_query(f"collections/{_segment(resolved)}/{resource}", query)
        return await self._scoped(network, endpoint, environment, collection_id, resolved)

    async def _scoped(
        self,
        network: Network,
        endpoint: str,
        environment: Environment,
        input_id: str,
        resolved_id: str,
    ) -> ApiEnvelope:
        if input_id != resolved_id:
            logger.info("collection_resolved", input_id=input_id, resolved_id=resolved_id)
        envelope = await self.client.request(network, endpoint, environment)
        return enrich(envelope, input_id, resolved_id, self.directory)
