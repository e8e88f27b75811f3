"""Filtering and faceting engine for product listings."""

from decimal import Decimal
import math
from typing import Dict, Optional

from products_api.models.product import Product
from products_api.models.query import QuerySpec
from products_api.models.search import FacetOptions, PageResult
from products_api.services.predicates import FACET_DIMENSIONS, MATCH_ALL, And, Dimension, Equals, compile_filters
from products_api.services.product_store import ProductStore
from products_api.utils import logger


class ProductSearchService:
    """
    Executes normalized queries against a product store.

    Attributes:
        store: Record store the predicates are evaluated against
    """

    def __init__(self, store: ProductStore):
        self.store = store

    async def search(self, spec: QuerySpec) -> PageResult:
        """
        Run a paged, sorted, faceted search.

        Facet counts for category, brand, colour and size apply every active
        filter except the one on the facet's own dimension. Price bounds,
        rating floors and the promotion flag apply all active filters.

        Args:
            spec: Normalized query

        Returns:
            PageResult: Requested page, total match count and facet options
        """
        base = compile_filters(spec) if spec.has_filters else MATCH_ALL

        total_count = await self.store.count(base)
        products = await self.store.fetch_page(base, spec.sort_by, spec.descending, spec.offset, spec.page_size)

        counts = {dim: await self._facet_counts(spec, dim) for dim in FACET_DIMENSIONS}

        low, high = await self.store.price_bounds(base)
        ratings = await self.store.distinct_ratings(base)
        has_promotions = await self.store.exists(base.with_(Equals("on_promotion", True)))

        filters = FacetOptions(
            categories=sorted(counts[Dimension.CATEGORY]),
            brands=sorted(counts[Dimension.BRAND]),
            colours=sorted(counts[Dimension.COLOUR]),
            sizes=sorted(counts[Dimension.SIZE]),
            category_counts=counts[Dimension.CATEGORY],
            brand_counts=counts[Dimension.BRAND],
            colour_counts=counts[Dimension.COLOUR],
            size_counts=counts[Dimension.SIZE],
            min_price=low if low is not None else Decimal("0"),
            max_price=high if high is not None else Decimal("0"),
            ratings=sorted({math.floor(r) for r in ratings}),
            has_promotions=has_promotions,
        )
        logger.info("Search matched %d products (page %d, size %d)", total_count, spec.page, spec.page_size)
        return PageResult(products=products, total_count=total_count, filters=filters)

    async def _facet_counts(self, spec: QuerySpec, dimension: Dimension) -> Dict[str, int]:
        """Value counts for ``dimension`` with every active filter except its own."""
        predicate: And = compile_filters(spec, exclude=dimension) if spec.has_filters else MATCH_ALL
        return await self.store.group_counts(predicate, dimension.value)

    async def get_product(self, product_id: int) -> Optional[Product]:
        """
        Look up a single product.

        Returns:
            The product, or None when no product has this id
        """
        product = await self.store.get(product_id)
        if product is None:
            logger.info("Product %s not found", product_id)
        return product

    async def count_products(self) -> int:
        """Total number of products in the catalogue."""
        return await self.store.count(MATCH_ALL)
