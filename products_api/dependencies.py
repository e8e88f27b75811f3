"""Shared application dependencies."""

from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from products_api.services.cache_service import CacheService
from products_api.services.search_service import ProductSearchService
from products_api.utils.config import redis_storage_uri

# Services are built once in the application lifespan and kept on app.state;
# these getters hand them to routes so tests can swap them freely.


def get_search_service(request: Request) -> ProductSearchService:
    """Dependency function returning the application's search service."""
    return request.app.state.search_service


def get_cache_service(request: Request) -> CacheService:
    """Dependency function returning the application's response cache."""
    return request.app.state.cache_service


# --- Rate Limiter Instance ---
# Shares Redis with the response cache when configured. If Redis cannot be
# reached the limiter counts in memory instead of failing the request.
limiter = Limiter(
    key_func=get_remote_address,
    storage_uri=redis_storage_uri(),
    strategy="fixed-window",
    default_limits=["1000/minute"],
    in_memory_fallback_enabled=True,
    swallow_errors=True,
)
