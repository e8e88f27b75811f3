"""Cache key derivation for product endpoints."""

from decimal import Decimal
from enum import Enum
import hashlib
import json
from typing import Any, Dict

from pydantic.alias_generators import to_camel

from products_api.models.query import QuerySpec
from products_api.services.query_normalizer import normalize
from products_api.utils import logger

KEY_NAMESPACE = "Products"
SEARCH_KEY_PREFIX = f"{KEY_NAMESPACE}:Search:"
# Returned when a search query cannot be serialized. Never read or written.
SEARCH_ERROR_KEY = f"{SEARCH_KEY_PREFIX}ERR"


class EndpointKind(str, Enum):
    """Cached endpoint families."""

    LIST = "list"
    COUNT = "count"
    GET_BY_ID = "get_by_id"
    SEARCH = "search"


def derive_key(kind: EndpointKind, params: Any = None) -> str:
    """
    Derive the cache key for an endpoint call.

    Fixed-parameter endpoints get a readable literal key. Search bodies are
    normalized, serialized canonically and hashed with SHA-256.

    Args:
        kind: Endpoint family
        params: Product id for GET_BY_ID, raw or normalized query for LIST and SEARCH

    Returns:
        str: Cache key
    """
    if kind is EndpointKind.COUNT:
        return f"{KEY_NAMESPACE}:Count"
    if kind is EndpointKind.GET_BY_ID:
        return f"{KEY_NAMESPACE}:GetById:{int(params)}"
    if kind is EndpointKind.LIST:
        spec = normalize(params)
        return f"{KEY_NAMESPACE}:Get:page={spec.page};pageSize={spec.page_size}"
    return search_key(params)


def search_key(query: Any) -> str:
    """SHA-256 key for an arbitrary search body, or SEARCH_ERROR_KEY when it cannot be serialized."""
    try:
        payload = canonical_json(normalize(query))
    except (TypeError, ValueError) as e:
        logger.warning("⚠️ Could not serialize search query for cache key: %s", e)
        return SEARCH_ERROR_KEY
    digest = hashlib.sha256(payload.encode("utf-8")).hexdigest().upper()
    return f"{SEARCH_KEY_PREFIX}{digest}"


def is_cacheable(key: str) -> bool:
    return key != SEARCH_ERROR_KEY


def canonical_json(spec: QuerySpec) -> str:
    """Stable JSON for a QuerySpec: sorted camelCase keys, absent fields omitted."""
    return json.dumps(_canonical_fields(spec), sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _canonical_fields(spec: QuerySpec) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for name, value in spec.model_dump(exclude_none=True).items():
        if isinstance(value, tuple):
            if not value:
                continue
            value = list(value)
        elif isinstance(value, Decimal):
            # 10, 10.0 and 10.00 are the same bound
            value = format(value.normalize(), "f")
        elif isinstance(value, Enum):
            value = value.value
        fields[to_camel(name)] = value
    return fields
