"""API routes for cached, faceted product listings."""

import json
from typing import Dict, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Request, status
from fastapi.responses import Response

from products_api.dependencies import get_cache_service, get_search_service, limiter
from products_api.models.query import ProductQuery
from products_api.services.cache_keys import EndpointKind, derive_key
from products_api.services.cache_service import CachedPayload, CacheService, should_bypass_cache
from products_api.services.query_normalizer import normalize
from products_api.services.search_service import ProductSearchService
from products_api.utils import logger
from products_api.utils.config import API_RATE_LIMIT

router = APIRouter()


def _cache_headers(cached: CachedPayload) -> Dict[str, str]:
    return {"X-Cache-Status": cached.status.value, "X-Cache-Key": cached.key}


def _json_response(cached: CachedPayload, extra_headers: Optional[Dict[str, str]] = None) -> Response:
    headers = _cache_headers(cached)
    if extra_headers:
        headers.update(extra_headers)
    return Response(content=cached.payload, media_type="application/json", headers=headers)


@router.get("/")
@limiter.limit("30/minute")
async def health_check(request: Request, cache: CacheService = Depends(get_cache_service)):
    """
    Health check endpoint to verify API status.

    Returns:
        dict: Status message and the active cache tier
    """
    return {"message": "Products API is running!", "cache": cache.backend_name}


@router.get("/products")
@limiter.limit(API_RATE_LIMIT)
async def list_products(
    request: Request,
    page: Optional[str] = Query(default=None),
    page_size: Optional[str] = Query(default=None, alias="pageSize"),
    search_service: ProductSearchService = Depends(get_search_service),
    cache: CacheService = Depends(get_cache_service),
):
    """
    Paged product listing without filters.

    Paging values are read leniently; unreadable ones fall back to defaults.

    Returns:
        PageResult JSON with X-Cache-Status and X-Cache-Key headers
    """
    spec = normalize({"page": page, "pageSize": page_size})
    cache_key = derive_key(EndpointKind.LIST, spec)

    async def compute() -> str:
        result = await search_service.search(spec)
        return result.model_dump_json(by_alias=True)

    cached = await cache.fetch(cache_key, compute, bypass=should_bypass_cache(request.headers))
    return _json_response(cached)


@router.get("/products/count")
@limiter.limit(API_RATE_LIMIT)
async def count_products(
    request: Request,
    search_service: ProductSearchService = Depends(get_search_service),
    cache: CacheService = Depends(get_cache_service),
):
    """Total number of products, as a bare JSON integer."""
    cache_key = derive_key(EndpointKind.COUNT)

    async def compute() -> str:
        return str(await search_service.count_products())

    cached = await cache.fetch(cache_key, compute, bypass=should_bypass_cache(request.headers))
    return _json_response(cached)


@router.post("/products/search")
@limiter.limit(API_RATE_LIMIT)
async def search_products(
    request: Request,
    query: Optional[ProductQuery] = Body(default=None),
    search_service: ProductSearchService = Depends(get_search_service),
    cache: CacheService = Depends(get_cache_service),
):
    """
    Filtered, sorted and faceted product search.

    Args:
        query: Optional search body; missing or malformed fields fall back to defaults

    Returns:
        PageResult JSON with X-Cache-Status and X-Cache-Key headers
    """
    spec = normalize(query)
    cache_key = derive_key(EndpointKind.SEARCH, spec)

    async def compute() -> str:
        result = await search_service.search(spec)
        return result.model_dump_json(by_alias=True)

    cached = await cache.fetch(cache_key, compute, bypass=should_bypass_cache(request.headers))
    return _json_response(cached)


@router.get("/products/{product_id}")
@limiter.limit(API_RATE_LIMIT)
async def get_product(
    request: Request,
    product_id: int,
    search_service: ProductSearchService = Depends(get_search_service),
    cache: CacheService = Depends(get_cache_service),
):
    """
    Single product by id.

    Raises:
        HTTPException: 404 when no product has this id
    """
    cache_key = derive_key(EndpointKind.GET_BY_ID, product_id)

    async def compute() -> Optional[str]:
        product = await search_service.get_product(product_id)
        return product.model_dump_json(by_alias=True) if product is not None else None

    cached = await cache.fetch(cache_key, compute, bypass=should_bypass_cache(request.headers))
    if cached.payload is None:
        logger.info("Lookup miss for product %s", product_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found", headers=_cache_headers(cached))

    returned_id = json.loads(cached.payload).get("id")
    return _json_response(
        cached,
        {"X-Requested-Id": str(product_id), "X-Returned-Id": "" if returned_id is None else str(returned_id)},
    )
