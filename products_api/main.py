"""Main module for the Products API."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from products_api.api import routes
from products_api.dependencies import limiter
from products_api.services.cache_service import create_cache_service
from products_api.services.product_store import SqlProductStore
from products_api.services.search_service import ProductSearchService
from products_api.utils import ProductStoreError, logger
from products_api.utils.config import CORS_ALLOWED_ORIGINS


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Lifespan manager for the application.
    Builds the response cache and the search service once per process.
    """
    # Startup logic
    logger.info("Application startup...")
    cache_service = await create_cache_service()
    store = SqlProductStore()
    application.state.cache_service = cache_service
    application.state.search_service = ProductSearchService(store)
    logger.info("Search service and %s cache attached to app.state.", cache_service.backend_name)

    yield

    # Shutdown logic
    logger.info("Application shutdown...")
    await cache_service.close()
    await store.close()


# Initialize FastAPI app with lifespan manager
app = FastAPI(
    title="Products API",
    description="Paginated, filterable and faceted product listings with a tiered response cache.",
    version="1.0.0",
    lifespan=lifespan,
)
app.state.limiter = limiter

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials="*" not in CORS_ALLOWED_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Cache-Status", "X-Cache-Key", "X-Requested-Id", "X-Returned-Id"],
)

# Include API routers
app.include_router(routes.router, prefix="/api", tags=["products"])


async def _product_store_error_handler(request: Request, exc: ProductStoreError) -> JSONResponse:
    logger.error("💥 Product store failure for %s: %s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": "Service temporarily unavailable, please try again later."})


app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)  # type: ignore
app.add_exception_handler(ProductStoreError, _product_store_error_handler)  # type: ignore
