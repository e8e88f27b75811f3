"""Normalizer turning raw, possibly malformed product queries into a QuerySpec."""

from decimal import Decimal
from typing import Any, Iterable, Mapping, Optional, Tuple, Union

from pydantic import ValidationError

from products_api.models.query import MAX_PAGE, ProductQuery, QuerySpec, SortDirection, SortField
from products_api.utils import logger

DEFAULT_PAGE = 1
DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_DESCENDING = {"desc", "descending"}

RawQuery = Union[ProductQuery, Mapping[str, Any], QuerySpec, None]


def normalize(raw: RawQuery) -> QuerySpec:
    """
    Clean and canonicalize a raw query into a QuerySpec.

    Never raises: anomalies (out-of-range paging, inverted price bounds, blank
    filter values, unreadable fields) are corrected silently.

    Args:
        raw: A ProductQuery, a mapping with camelCase or snake_case keys, an
            already normalized QuerySpec, or None

    Returns:
        QuerySpec: The normalized query
    """
    if isinstance(raw, QuerySpec):
        return raw
    query = _to_product_query(raw)

    page = query.page if query.page is not None and query.page > 0 else DEFAULT_PAGE
    page = min(page, MAX_PAGE)
    page_size = query.page_size if query.page_size is not None and query.page_size > 0 else DEFAULT_PAGE_SIZE
    page_size = min(page_size, MAX_PAGE_SIZE)

    categories = list(query.categories or [])
    if query.category is not None:
        categories.append(query.category)

    min_price = _positive(query.min_price)
    max_price = _positive(query.max_price)
    if min_price is not None and max_price is not None and max_price < min_price:
        # Inverted bounds would exclude everything
        min_price, max_price = max_price, min_price

    min_rating = query.min_rating if query.min_rating is not None and query.min_rating > 0 else None

    free_text = query.query.strip() if query.query else None

    return QuerySpec(
        ids=tuple(sorted(set(query.ids or []))),
        categories=_clean_strings(categories),
        brands=_clean_strings(query.brands),
        colours=_clean_strings(query.colours),
        sizes=_clean_strings(query.sizes),
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
        on_promotion=query.on_promotion,
        free_text=free_text or None,
        page=page,
        page_size=page_size,
        sort_by=resolve_sort_field(query.sort_by),
        sort_direction=resolve_sort_direction(query.sort_direction),
    )


def resolve_sort_field(value: Optional[str]) -> SortField:
    """Map a sort name to a SortField, falling back to title."""
    if not value:
        return SortField.TITLE
    try:
        return SortField(value.strip().lower())
    except ValueError:
        return SortField.TITLE


def resolve_sort_direction(value: Optional[str]) -> SortDirection:
    """Only "desc" or "descending" (any case) sort descending."""
    if value and value.strip().lower() in _DESCENDING:
        return SortDirection.DESC
    return SortDirection.ASC


def _to_product_query(raw: Union[ProductQuery, Mapping[str, Any], None]) -> ProductQuery:
    if raw is None:
        return ProductQuery()
    if isinstance(raw, ProductQuery):
        return raw
    try:
        return ProductQuery.model_validate(raw)
    except ValidationError as e:
        logger.warning("⚠️ Unreadable product query, using defaults: %s", e.errors()[:1])
        return ProductQuery()


def _positive(value: Optional[Decimal]) -> Optional[Decimal]:
    return value if value is not None and value > 0 else None


def _clean_strings(values: Optional[Iterable[Optional[str]]]) -> Tuple[str, ...]:
    if not values:
        return ()
    cleaned = {v.strip() for v in values if v is not None and v.strip()}
    return tuple(sorted(cleaned))
