from decimal import Decimal
import logging
from typing import List

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from products_api.main import app as fastapi_app
from products_api.models.product import Product
from products_api.services.cache_service import CacheService, MemoryCacheBackend
from products_api.services.product_store import InMemoryProductStore, SqlProductStore
from products_api.services.search_service import ProductSearchService
from products_api.utils.init_db import Base, ProductRow

# Configure logger for tests
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

# Shared in-memory SQLite database; StaticPool keeps one connection so the schema survives
TEST_DATABASE_URL = "sqlite+aiosqlite://"


def _product(id, title, brand, category, colour, size, price, rating, on_promotion, description) -> Product:
    return Product(
        id=id,
        title=title,
        description=description,
        brand=brand,
        category=category,
        colour=colour,
        size=size,
        price=Decimal(price),
        rating=rating,
        on_promotion=on_promotion,
        image_urls=[f"https://img.example.com/{id}.jpg"],
    )


@pytest.fixture
def sample_products() -> List[Product]:
    """
    Small catalogue used across engine and route tests.

    Brands: Apple x4, Acme x2, Zest x2. Categories: Laptops x3, Phones x2,
    Watches x2, Shoes x1. Product 4 has no size. Promotions: 2, 5, 8.
    """
    return [
        _product(1, "Alpha Laptop", "Apple", "Laptops", "Silver", "13in", "1200", 4.8, False, "Thin and light aluminium laptop"),
        _product(2, "Budget Laptop", "Acme", "Laptops", "Black", "15in", "500", 3.2, True, "Affordable everyday laptop"),
        _product(3, "Creator Laptop", "Apple", "Laptops", "Black", "15in", "800", 4.1, False, "Laptop for creative work"),
        _product(4, "Desk Phone", "Acme", "Phones", "Black", None, "60", 2.5, False, "Corded office phone"),
        _product(5, "Echo Phone", "Apple", "Phones", "White", "6in", "999", 4.6, True, "Flagship smartphone"),
        _product(6, "Fit Watch", "Zest", "Watches", "Red", "M", "199", 3.9, False, "Fitness tracker"),
        _product(7, "Glow Watch", "Apple", "Watches", "White", "M", "399", 4.4, False, "Smart display on your wrist"),
        _product(8, "Hiking Boots", "Zest", "Shoes", "Brown", "42", "150", 4.1, True, "Waterproof leather boots"),
    ]


async def _seeded_sql_store(products: List[Product]) -> SqlProductStore:
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool, connect_args={"check_same_thread": False})
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
        await conn.execute(ProductRow.__table__.insert(), [p.model_dump() for p in products])
    return SqlProductStore(engine=engine)


@pytest_asyncio.fixture
async def sql_store(sample_products):
    """SqlProductStore over a seeded in-memory SQLite database."""
    store = await _seeded_sql_store(sample_products)
    try:
        yield store
    finally:
        await store.close()


@pytest.fixture
def memory_store(sample_products) -> InMemoryProductStore:
    return InMemoryProductStore(sample_products)


@pytest_asyncio.fixture(params=["memory", "sql"])
async def store(request, sample_products):
    """Runs a test once against each store implementation."""
    if request.param == "memory":
        yield InMemoryProductStore(sample_products)
        return

    sql = await _seeded_sql_store(sample_products)
    try:
        yield sql
    finally:
        await sql.close()


@pytest.fixture
def search_service(store) -> ProductSearchService:
    return ProductSearchService(store)


@pytest.fixture
def cache_service() -> CacheService:
    return CacheService(MemoryCacheBackend())


# --- Application and Client Fixtures ---


@pytest.fixture
def app(memory_store, cache_service) -> FastAPI:
    """The FastAPI app with an in-memory store and cache on app.state (lifespan not run)."""
    fastapi_app.state.search_service = ProductSearchService(memory_store)
    fastapi_app.state.cache_service = cache_service
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app: FastAPI):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
