"""
Domain Layer: Query Normalizer
Turns optional filters into the canonical upstream query string.
"""
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlencode

from .models import OrderDirection, OrderStatus

# Selectors for our own plumbing, never forwarded upstream
INTERNAL_FIELDS = frozenset({"environment", "network"})

# Documented server defaults per resource family
LISTING_DEFAULTS: Mapping[str, Any] = {
    "limit": 10,
    "page": 1,
    "orderBy": "created_at",
    "orderDirection": OrderDirection.DESC,
}
SCOPED_LISTING_DEFAULTS: Mapping[str, Any] = {
    "limit": 10,
    "page": 0,
    "orderBy": "created_at",
    "orderDirection": OrderDirection.DESC,
}
ORDER_LISTING_DEFAULTS: Mapping[str, Any] = {
    **SCOPED_LISTING_DEFAULTS,
    "status": OrderStatus.ACTIVE,
}
FEATURED_DEFAULTS: Mapping[str, Any] = {"limit": 3}


@dataclass(frozen=True)
class QueryOptions:
    """
    Named optional filters accepted by the listing endpoints.
    None means "use server default" and never reaches the query string.
    """
    name: Optional[str] = None
    limit: Optional[int] = None
    page: Optional[int] = None
    order_by: Optional[str] = None
    order_direction: Optional[OrderDirection] = None
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    status: Optional[OrderStatus] = None
    asset_id: Optional[str] = None

    _WIRE_NAMES = {
        "order_by": "orderBy",
        "order_direction": "orderDirection",
        "from_date": "fromDate",
        "to_date": "toDate",
        "asset_id": "assetId",
    }

    def to_params(self) -> Dict[str, Any]:
        """Set fields under their upstream names, in declaration order"""
        params: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not None:
                params[self._WIRE_NAMES.get(f.name, f.name)] = value
        return params


def _stringify(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _is_default(key: str, value: Any, defaults: Mapping[str, Any]) -> bool:
    if key not in defaults:
        return False
    default = defaults[key]
    if isinstance(default, Enum):
        default = default.value
    if isinstance(value, Enum):
        value = value.value
    return value == default


def normalize_query(
    options: Union[QueryOptions, Mapping[str, Any], None],
    defaults: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Build `key=value&...` from `options`.

    Dropped: unset values, internal-only selectors and values equal to the
    resource's documented default. Survivors keep input order.

    `defaults` is per resource family: `page=1` is the default only for the
    top-level `collections` listing (`LISTING_DEFAULTS`), while scoped
    listings start at page 0 and must still forward `page=1`. Without a
    defaults set only unset and internal fields are dropped, so
    `{"page": 1, "environment": "production"}` yields `"page=1"`.
    """
    if options is None:
        return ""
    if isinstance(options, QueryOptions):
        options = options.to_params()
    defaults = defaults or {}

    pairs: List[Tuple[str, str]] = []
    for key, value in options.items():
        if value is None or key in INTERNAL_FIELDS:
            continue
        if _is_default(key, value, defaults):
            continue
        pairs.append((key, _stringify(value)))
    return urlencode(pairs)


def with_query(path: str, query: str) -> str:
    """Append the query string; never leaves a dangling '?'"""
    return f"{path}?{query}" if query else path
