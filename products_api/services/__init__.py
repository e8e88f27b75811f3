"""
Service layer: query normalization, faceted search and response caching.
"""

from .cache_keys import EndpointKind, derive_key
from .cache_service import CacheService, CacheStatus, create_cache_service, should_bypass_cache
from .product_store import InMemoryProductStore, ProductStore, SqlProductStore
from .query_normalizer import normalize
from .search_service import ProductSearchService

__all__ = [
    "CacheService",
    "CacheStatus",
    "EndpointKind",
    "InMemoryProductStore",
    "ProductSearchService",
    "ProductStore",
    "SqlProductStore",
    "create_cache_service",
    "derive_key",
    "normalize",
    "should_bypass_cache",
]
