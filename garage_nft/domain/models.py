"""
Domain Layer: Entities and Value Objects
Pure Python, No external dependencies.
"""
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Dict, List, Mapping, NewType, Optional

# --- Value Objects ---

ContractAddress = NewType("ContractAddress", str)


class Network(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class OrderDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class OrderStatus(IntEnum):
    ACTIVE = 0
    CANCELLED = 1
    COMPLETED = 2


@dataclass(frozen=True)
class CollectionEntry:
    """Known collection: contract address and its human readable name"""
    contract_address: ContractAddress
    display_name: str


@dataclass(frozen=True)
class ResolvedIdentifier:
    """Outcome of resolving a user supplied collection identifier"""
    input_id: str
    resolved_id: str
    collection_name: str
    display_name: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "inputId": self.input_id,
            "resolvedId": self.resolved_id,
            "collectionName": self.collection_name,
            "displayName": self.display_name,
        }


# --- API Envelope ---

@dataclass(frozen=True)
class ApiErrorInfo:
    message: str
    code: Optional[str] = None


@dataclass(frozen=True)
class Pagination:
    page: Optional[int] = None
    limit: Optional[int] = None
    total: Optional[int] = None
    total_pages: Optional[int] = None
    has_next: Optional[bool] = None
    has_prev: Optional[bool] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Pagination":
        return cls(
            page=payload.get("page"),
            limit=payload.get("limit"),
            total=payload.get("total"),
            total_pages=payload.get("totalPages"),
            has_next=payload.get("hasNext"),
            has_prev=payload.get("hasPrev"),
        )

    def to_dict(self) -> Dict[str, Any]:
        values = {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }
        return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True)
class ApiEnvelope:
    """
    Uniform response wrapper of the Garage API.
    `data` is present iff success, `error` iff not.
    """
    success: bool
    data: Any = None
    error: Optional[ApiErrorInfo] = None
    pagination: Optional[Pagination] = None
    # Top-level keys the envelope does not model, echoed back untouched
    extra: Mapping[str, Any] = field(default_factory=dict)

    _KNOWN_KEYS = frozenset({"success", "data", "error", "pagination"})

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "ApiEnvelope":
        error = None
        raw_error = payload.get("error")
        if isinstance(raw_error, Mapping):
            code = raw_error.get("code")
            error = ApiErrorInfo(
                message=str(raw_error.get("message", "")),
                code=str(code) if code is not None else None,
            )
        elif raw_error:
            error = ApiErrorInfo(message=str(raw_error))

        pagination = None
        raw_pagination = payload.get("pagination")
        if isinstance(raw_pagination, Mapping):
            pagination = Pagination.from_payload(raw_pagination)

        return cls(
            success=bool(payload.get("success", False)),
            data=payload.get("data"),
            error=error,
            pagination=pagination,
            extra={k: v for k, v in payload.items() if k not in cls._KNOWN_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"success": self.success, **self.extra}
        if self.data is not None:
            result["data"] = self.data
        if self.pagination is not None:
            result["pagination"] = self.pagination.to_dict()
        if self.error is not None:
            result["error"] = {"message": self.error.message, "code": self.error.code}
        return result


# --- Dashboard Entities ---

@dataclass(frozen=True)
class CollectionSummary:
    """Per-refresh view of a collection used by the dashboards"""
    id: str
    name: str
    floor_price: float = 0.0
    volume: float = 0.0
    sales: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "floorPrice": self.floor_price,
            "volume": self.volume,
            "sales": self.sales,
        }


@dataclass(frozen=True)
class MarketStats:
    total_volume: float = 0.0
    total_sales: int = 0
    avg_floor_price: float = 0.0
    active_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalVolume": self.total_volume,
            "totalSales": self.total_sales,
            "avgFloorPrice": self.avg_floor_price,
            "activeCount": self.active_count,
        }


@dataclass(frozen=True)
class MarketShare:
    name: str
    percent: float


@dataclass
class DashboardSnapshot:
    """Everything one dashboard refresh produces"""
    fetched_at: str
    collections: List[CollectionSummary] = field(default_factory=list)
    stats: MarketStats = field(default_factory=MarketStats)
    top_volume: List[CollectionSummary] = field(default_factory=list)
    top_floor_price: List[CollectionSummary] = field(default_factory=list)
    top_sales: List[CollectionSummary] = field(default_factory=list)
    volume_chart: List[CollectionSummary] = field(default_factory=list)
    floor_price_chart: List[CollectionSummary] = field(default_factory=list)
    sales_chart: List[CollectionSummary] = field(default_factory=list)
    market_share: List[MarketShare] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        def rows(items: List[CollectionSummary]) -> List[Dict[str, Any]]:
            return [c.to_dict() for c in items]

        return {
            "fetchedAt": self.fetched_at,
            "error": self.error,
            "stats": self.stats.to_dict(),
            "collections": rows(self.collections),
            "rankings": {
                "volume": rows(self.top_volume),
                "floorPrice": rows(self.top_floor_price),
                "sales": rows(self.top_sales),
            },
            "charts": {
                "volume": rows(self.volume_chart),
                "floorPrice": rows(self.floor_price_chart),
                "sales": rows(self.sales_chart),
                "marketShare": [{"name": s.name, "percent": s.percent} for s in self.market_share],
            },
        }


# --- Exceptions ---

class DomainError(Exception):
    """Base domain exception"""


class InvalidConfigurationError(DomainError):
    """Raised when config is invalid"""


class GarageError(DomainError):
    """Base for every failure surfaced by the Garage integration"""


class TransportError(GarageError):
    """Network level failure (DNS, connection, timeout)"""


class UpstreamHttpError(GarageError):
    """Upstream answered with a non-2xx status"""

    def __init__(self, status: int, detail: Optional[str] = None) -> None:
        self.status = status
        self.detail = detail
        message = f"API request failed with status {status}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class MalformedResponseError(GarageError):
    """Upstream body is not a JSON envelope"""


class ApiError(GarageError):
    """Well-formed envelope with success=false"""

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class UnknownToolError(GarageError):
    """Tool name not present in the registry"""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown tool: {name}")
