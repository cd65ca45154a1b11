"""
Domain Layer
"""
from .models import (
    ApiEnvelope,
    ApiError,
    ApiErrorInfo,
    CollectionEntry,
    CollectionSummary,
    ContractAddress,
    DashboardSnapshot,
    DomainError,
    Environment,
    GarageError,
    InvalidConfigurationError,
    MalformedResponseError,
    MarketShare,
    MarketStats,
    Network,
    OrderDirection,
    OrderStatus,
    Pagination,
    ResolvedIdentifier,
    TransportError,
    UnknownToolError,
    UpstreamHttpError,
)
from .directory import KNOWN_COLLECTIONS, CollectionDirectory, default_directory
from .query import QueryOptions, normalize_query, with_query
from .enrichment import enrich

__all__ = [
    "ApiEnvelope",
    "ApiError",
    "ApiErrorInfo",
    "CollectionEntry",
    "CollectionSummary",
    "ContractAddress",
    "DashboardSnapshot",
    "DomainError",
    "Environment",
    "GarageError",
    "InvalidConfigurationError",
    "MalformedResponseError",
    "MarketShare",
    "MarketStats",
    "Network",
    "OrderDirection",
    "OrderStatus",
    "Pagination",
    "ResolvedIdentifier",
    "TransportError",
    "UnknownToolError",
    "UpstreamHttpError",
    "KNOWN_COLLECTIONS",
    "CollectionDirectory",
    "default_directory",
    "QueryOptions",
    "normalize_query",
    "with_query",
    "enrich",
]
