"""
Application Layer: Tool Registry
Exposes every Garage resource as a named, schema-validated tool.
Failures never escape `ToolRegistry.call`; they come back as `Error:` text.
"""
import json
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Type

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from garage_nft.application.market_service import GarageMarketService
from garage_nft.domain import (
    ApiEnvelope,
    Environment,
    Network,
    OrderDirection,
    OrderStatus,
    QueryOptions,
    UnknownToolError,
)

logger = structlog.get_logger()

COLLECTION_ID_HELP = (
    "Collection identifier - can be collection name (e.g., 'Mr. Jim', 'Bakteria', 'BearBros') "
    "or contract address"
)

# --- Argument models ---


class NoArguments(BaseModel):
    model_config = ConfigDict(extra="forbid")


class NetworkArguments(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    network: Network = Field(..., description="Blockchain network (mainnet or testnet)")
    environment: Environment = Field(
        Environment.PRODUCTION, description="API environment (default: production)"
    )


class PagedArguments(NetworkArguments):
    limit: Optional[int] = Field(None, ge=1, description="Number of items per page (default: 10)")
    page: Optional[int] = Field(None, ge=0, description="Page number (default: 0)")
    order_by: Optional[str] = Field(None, alias="orderBy", description="Sort field (default: created_at)")
    order_direction: Optional[OrderDirection] = Field(
        None, alias="orderDirection", description="Sort direction (default: DESC)"
    )

    def query_options(self) -> QueryOptions:
        return QueryOptions(
            limit=self.limit,
            page=self.page,
            order_by=self.order_by,
            order_direction=self.order_direction,
        )


class CollectionsArguments(PagedArguments):
    name: Optional[str] = Field(None, description="Filter collections by name")
    page: Optional[int] = Field(None, ge=0, description="Page number (default: 1)")
    from_date: Optional[str] = Field(None, alias="fromDate", description="Filter from date (ISO format)")

    def query_options(self) -> QueryOptions:
        return QueryOptions(
            name=self.name,
            limit=self.limit,
            page=self.page,
            order_by=self.order_by,
            order_direction=self.order_direction,
            from_date=self.from_date,
        )


class FeaturedArguments(NetworkArguments):
    limit: Optional[int] = Field(None, ge=1, description="Number of featured collections (default: 3)")


class CollectionArguments(NetworkArguments):
    collection_id: str = Field(..., alias="collectionId", min_length=1, description=COLLECTION_ID_HELP)


class CollectionDetailsArguments(CollectionArguments):
    from_date: Optional[str] = Field(None, alias="fromDate", description="Filter metrics from date (ISO format)")


class CollectionPagedArguments(PagedArguments):
    collection_id: str = Field(..., alias="collectionId", min_length=1, description=COLLECTION_ID_HELP)


class CollectionOrdersArguments(CollectionPagedArguments):
    status: Optional[OrderStatus] = Field(
        None, description="Order status (0: ACTIVE, 1: CANCELLED, 2: COMPLETED, default: 0)"
    )
    asset_id: Optional[str] = Field(None, alias="assetId", description="Filter by specific asset ID")

    def query_options(self) -> QueryOptions:
        return QueryOptions(
            limit=self.limit,
            page=self.page,
            order_by=self.order_by,
            order_direction=self.order_direction,
            status=self.status,
            asset_id=self.asset_id,
        )


class NftArguments(NetworkArguments):
    nft_id: str = Field(..., alias="nftId", min_length=1, description="Unique NFT identifier")


class NftActivitiesArguments(PagedArguments):
    nft_id: str = Field(..., alias="nftId", min_length=1, description="Unique NFT identifier")


class OrderArguments(NetworkArguments):
    order_id: str = Field(..., alias="orderId", min_length=1, description="Unique order identifier")


class UserOrdersArguments(PagedArguments):
    seller_address: str = Field(..., alias="sellerAddress", min_length=1, description="User's wallet address")


class ReceiptArguments(NetworkArguments):
    tx_id: str = Field(..., alias="txId", min_length=1, description="Transaction ID (b256 format)")


# --- Tool table ---

Handler = Callable[[GarageMarketService, Any], Awaitable[Any]]


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    arguments: Type[BaseModel]
    handler: Handler

    def input_schema(self) -> Dict[str, Any]:
        schema = self.arguments.model_json_schema(by_alias=True)
        schema.pop("title", None)
        schema.setdefault("properties", {})
        if self.arguments is NoArguments:
            schema["additionalProperties"] = False
        return schema


@dataclass(frozen=True)
class ToolResult:
    text: str
    is_error: bool = False

    @classmethod
    def failure(cls, message: str) -> "ToolResult":
        return cls(text=f"Error: {message}", is_error=True)


async def _list_known(service: GarageMarketService, args: NoArguments) -> Dict[str, Any]:
    return service.list_known_collections()


TOOLS: List[ToolSpec] = [
    ToolSpec(
        name="garage_list_known_collections",
        description="List all known collections with their names and contract addresses",
        arguments=NoArguments,
        handler=_list_known,
    ),
    ToolSpec(
        name="garage_get_collections",
        description="Get all collections from Garage NFT marketplace with optional filtering and pagination",
        arguments=CollectionsArguments,
        handler=lambda s, a: s.get_collections(a.network, a.query_options(), a.environment),
    ),
    ToolSpec(
        name="garage_get_featured_collections",
        description="Get featured collections from Garage NFT marketplace",
        arguments=FeaturedArguments,
        handler=lambda s, a: s.get_featured_collections(a.network, a.limit, a.environment),
    ),
    ToolSpec(
        name="garage_get_collection_details",
        description=(
            "Get detailed information about a specific collection. "
            "You can use collection name (e.g., 'Mr. Jim', 'Bakteria') or contract address."
        ),
        arguments=CollectionDetailsArguments,
        handler=lambda s, a: s.get_collection_details(a.network, a.collection_id, a.from_date, a.environment),
    ),
    ToolSpec(
        name="garage_get_collection_nfts",
        description=(
            "Get NFTs belonging to a specific collection. "
            "You can use collection name (e.g., 'Mr. Jim', 'Bakteria') or contract address."
        ),
        arguments=CollectionPagedArguments,
        handler=lambda s, a: s.get_collection_nfts(a.network, a.collection_id, a.query_options(), a.environment),
    ),
    ToolSpec(
        name="garage_get_collection_orders",
        description=(
            "Get orders for a specific collection. "
            "You can use collection name (e.g., 'Mr. Jim', 'Bakteria') or contract address."
        ),
        arguments=CollectionOrdersArguments,
        handler=lambda s, a: s.get_collection_orders(a.network, a.collection_id, a.query_options(), a.environment),
    ),
    ToolSpec(
        name="garage_get_collection_activities",
        description=(
            "Get activity history for a specific collection. "
            "You can use collection name (e.g., 'Mr. Jim', 'Bakteria') or contract address."
        ),
        arguments=CollectionPagedArguments,
        handler=lambda s, a: s.get_collection_activities(
            a.network, a.collection_id, a.query_options(), a.environment
        ),
    ),
    ToolSpec(
        name="garage_get_nft_details",
        description="Get detailed information about a specific NFT",
        arguments=NftArguments,
        handler=lambda s, a: s.get_nft_details(a.network, a.nft_id, a.environment),
    ),
    ToolSpec(
        name="garage_get_nft_activities",
        description="Get activity history for a specific NFT",
        arguments=NftActivitiesArguments,
        handler=lambda s, a: s.get_nft_activities(a.network, a.nft_id, a.query_options(), a.environment),
    ),
    ToolSpec(
        name="garage_get_order_details",
        description="Get detailed information about a specific order",
        arguments=OrderArguments,
        handler=lambda s, a: s.get_order_details(a.network, a.order_id, a.environment),
    ),
    ToolSpec(
        name="garage_get_user_orders",
        description="Get orders created by a specific user address",
        arguments=UserOrdersArguments,
        handler=lambda s, a: s.get_user_orders(a.network, a.seller_address, a.query_options(), a.environment),
    ),
    ToolSpec(
        name="garage_get_receipt_status",
        description="Check the processing status of a transaction receipt",
        arguments=ReceiptArguments,
        handler=lambda s, a: s.get_receipt_status(a.network, a.tx_id, a.environment),
    ),
]


def _describe_validation(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(p) for p in item.get("loc", ())) or "arguments"
        parts.append(f"{location}: {item.get('msg')}")
    return "; ".join(parts)


class ToolRegistry:
    """Name -> tool lookup plus the call boundary used by the protocol server"""

    def __init__(self, service: GarageMarketService, tools: Optional[List[ToolSpec]] = None) -> None:
        self.service = service
        self._tools: Dict[str, ToolSpec] = {t.name: t for t in (tools or TOOLS)}

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def list_tools(self) -> List[ToolSpec]:
        return list(self._tools.values())

    def get(self, name: str) -> ToolSpec:
        try:
            return self._tools[name]
        except KeyError:
            raise UnknownToolError(name) from None

    async def dispatch(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        """Validate and run a tool; raises on any failure"""
        tool = self.get(name)
        args = tool.arguments.model_validate(dict(arguments or {}))
        result = await tool.handler(self.service, args)
        if isinstance(result, ApiEnvelope):
            return result.to_dict()
        return result

    async def call(self, name: str, arguments: Optional[Mapping[str, Any]] = None) -> ToolResult:
        try:
            payload = await self.dispatch(name, arguments)
        except ValidationError as e:
            logger.warning("tool_invalid_arguments", tool=name, errors=e.error_count())
            return ToolResult.failure(f"Invalid arguments for {name}: {_describe_validation(e)}")
        except Exception as e:
            logger.error("tool_failed", tool=name, error=str(e), error_type=type(e).__name__)
            return ToolResult.failure(str(e))

        logger.info("tool_succeeded", tool=name)
        return ToolResult(text=json.dumps(payload, indent=2, default=str))
