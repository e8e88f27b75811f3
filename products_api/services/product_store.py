"""Record store boundary: read-only, predicate-filterable access to products."""

from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from decimal import Decimal
from typing import AsyncIterator, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.sql.elements import ColumnElement

from products_api.models.product import Product
from products_api.models.query import SortField
from products_api.services.predicates import And, Equals, In, Predicate, Range, TextSearch
from products_api.utils import ProductStoreError, logger
from products_api.utils.config import DATABASE_URL
from products_api.utils.init_db import ProductRow


class ProductStore(ABC):
    """
    Read-only view over the product catalogue.

    Every method takes the conjunction of predicates to apply. Results are
    assumed consistent for the duration of one search.
    """

    @abstractmethod
    async def count(self, predicate: And) -> int:
        """Number of products matching ``predicate``."""

    @abstractmethod
    async def fetch_page(self, predicate: And, sort_by: SortField, descending: bool, offset: int, limit: int) -> List[Product]:
        """Matching products ordered by ``sort_by`` then id ascending, sliced by offset/limit."""

    @abstractmethod
    async def group_counts(self, predicate: And, field: str) -> Dict[str, int]:
        """Count matches per non-null value of ``field``."""

    @abstractmethod
    async def price_bounds(self, predicate: And) -> Tuple[Optional[Decimal], Optional[Decimal]]:
        """Lowest and highest price among matches, ``(None, None)`` when nothing matches."""

    @abstractmethod
    async def distinct_ratings(self, predicate: And) -> List[float]:
        """Distinct rating values among matches."""

    @abstractmethod
    async def exists(self, predicate: And) -> bool:
        """Whether at least one product matches."""

    @abstractmethod
    async def get(self, product_id: int) -> Optional[Product]:
        """Product by id, or None."""


def matches(predicate: Predicate, product: Product) -> bool:
    """Evaluate a predicate against a single product."""
    if isinstance(predicate, And):
        return all(matches(p, product) for p in predicate.predicates)
    if isinstance(predicate, Equals):
        return getattr(product, predicate.field) == predicate.value
    if isinstance(predicate, In):
        return getattr(product, predicate.field) in predicate.values
    if isinstance(predicate, Range):
        value = getattr(product, predicate.field)
        if value is None:
            return False
        if predicate.lower is not None and value < predicate.lower:
            return False
        if predicate.upper is not None and value > predicate.upper:
            return False
        return True
    if isinstance(predicate, TextSearch):
        term = predicate.term.lower()
        return any(term in (getattr(product, f) or "").lower() for f in predicate.fields)
    raise TypeError(f"Unsupported predicate: {predicate!r}")


class InMemoryProductStore(ProductStore):
    """Product store over a fixed list of products, used for tests and local runs."""

    def __init__(self, products: Iterable[Product] = ()):
        self.products: List[Product] = sorted(products, key=lambda p: p.id)

    def _select(self, predicate: And) -> List[Product]:
        return [p for p in self.products if matches(predicate, p)]

    async def count(self, predicate: And) -> int:
        return len(self._select(predicate))

    async def fetch_page(self, predicate: And, sort_by: SortField, descending: bool, offset: int, limit: int) -> List[Product]:
        # self.products is id-ordered and sorted() is stable, so ties stay id ascending
        ordered = sorted(self._select(predicate), key=lambda p: getattr(p, sort_by.value), reverse=descending)
        return ordered[offset : offset + limit]

    async def group_counts(self, predicate: And, field: str) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for product in self._select(predicate):
            value = getattr(product, field)
            if value is not None:
                counts[value] = counts.get(value, 0) + 1
        return counts

    async def price_bounds(self, predicate: And) -> Tuple[Optional[Decimal], Optional[Decimal]]:
        prices = [p.price for p in self._select(predicate)]
        if not prices:
            return None, None
        return min(prices), max(prices)

    async def distinct_ratings(self, predicate: And) -> List[float]:
        return sorted({p.rating for p in self._select(predicate)})

    async def exists(self, predicate: And) -> bool:
        return any(matches(predicate, p) for p in self.products)

    async def get(self, product_id: int) -> Optional[Product]:
        return next((p for p in self.products if p.id == product_id), None)


def _to_sql(predicate: Predicate) -> ColumnElement[bool]:
    """Translate a predicate into a SQLAlchemy boolean expression."""
    if isinstance(predicate, And):
        return and_(*[_to_sql(p) for p in predicate.predicates])
    if isinstance(predicate, Equals):
        return getattr(ProductRow, predicate.field) == predicate.value
    if isinstance(predicate, In):
        return getattr(ProductRow, predicate.field).in_(predicate.values)
    if isinstance(predicate, Range):
        column = getattr(ProductRow, predicate.field)
        bounds = []
        if predicate.lower is not None:
            bounds.append(column >= predicate.lower)
        if predicate.upper is not None:
            bounds.append(column <= predicate.upper)
        return and_(*bounds)
    if isinstance(predicate, TextSearch):
        term = predicate.term.lower()
        return or_(*[func.lower(getattr(ProductRow, f)).contains(term, autoescape=True) for f in predicate.fields])
    raise TypeError(f"Unsupported predicate: {predicate!r}")


def _where(stmt, predicate: And):
    clauses = [_to_sql(p) for p in predicate.predicates]
    return stmt.where(*clauses) if clauses else stmt


def _to_product(row: ProductRow) -> Product:
    return Product(
        id=row.id,
        title=row.title,
        description=row.description,
        brand=row.brand,
        category=row.category,
        colour=row.colour,
        size=row.size,
        price=row.price,
        rating=row.rating,
        on_promotion=row.on_promotion,
        image_urls=list(row.image_urls or []),
    )


class SqlProductStore(ProductStore):
    """Product store backed by a relational database through SQLAlchemy."""

    def __init__(self, engine: Optional[AsyncEngine] = None, database_url: Optional[str] = None):
        """
        Initialize the store.

        Args:
            engine: Existing async engine to use
            database_url: URL to create an engine from when ``engine`` is not given
        """
        if engine is None:
            db_url = database_url or DATABASE_URL
            if not db_url:
                raise ValueError("DATABASE_URL is not set in environment or config.")
            engine = create_async_engine(str(db_url))
        self.engine = engine
        self.async_session = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)

    @asynccontextmanager
    async def _session(self, operation: str) -> AsyncIterator[AsyncSession]:
        try:
            async with self.async_session() as session:
                yield session
        except SQLAlchemyError as e:
            logger.error("❌ Database error during %s: %s", operation, str(e))
            raise ProductStoreError(f"Product store unavailable during {operation}") from e

    async def count(self, predicate: And) -> int:
        async with self._session("count") as session:
            result = await session.execute(_where(select(func.count()).select_from(ProductRow), predicate))
            return int(result.scalar_one())

    async def fetch_page(self, predicate: And, sort_by: SortField, descending: bool, offset: int, limit: int) -> List[Product]:
        column = getattr(ProductRow, sort_by.value)
        stmt = (
            _where(select(ProductRow), predicate)
            .order_by(column.desc() if descending else column.asc(), ProductRow.id.asc())
            .offset(offset)
            .limit(limit)
        )
        async with self._session("page fetch") as session:
            result = await session.execute(stmt)
            return [_to_product(row) for row in result.scalars().all()]

    async def group_counts(self, predicate: And, field: str) -> Dict[str, int]:
        column = getattr(ProductRow, field)
        stmt = _where(select(column, func.count()), predicate).group_by(column)
        async with self._session(f"{field} facet") as session:
            result = await session.execute(stmt)
            return {value: int(count) for value, count in result.all() if value is not None}

    async def price_bounds(self, predicate: And) -> Tuple[Optional[Decimal], Optional[Decimal]]:
        stmt = _where(select(func.min(ProductRow.price), func.max(ProductRow.price)), predicate)
        async with self._session("price bounds") as session:
            result = await session.execute(stmt)
            low, high = result.one()
            return low, high

    async def distinct_ratings(self, predicate: And) -> List[float]:
        stmt = _where(select(ProductRow.rating).distinct(), predicate)
        async with self._session("rating facet") as session:
            result = await session.execute(stmt)
            return [r for r in result.scalars().all() if r is not None]

    async def exists(self, predicate: And) -> bool:
        stmt = _where(select(ProductRow.id), predicate).limit(1)
        async with self._session("exists") as session:
            result = await session.execute(stmt)
            return result.first() is not None

    async def get(self, product_id: int) -> Optional[Product]:
        async with self._session("lookup") as session:
            row = await session.get(ProductRow, product_id)
            return _to_product(row) if row is not None else None

    async def close(self) -> None:
        await self.engine.dispose()
