"""
Predicate vocabulary for product filtering.

A small tagged variant that record stores translate into their own filter
mechanism (SQL expressions, in-memory checks). Field names are Product
attribute names.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from products_api.models.query import QuerySpec


class Dimension(str, Enum):
    """Filterable dimensions of the product schema."""

    IDS = "id"
    CATEGORY = "category"
    BRAND = "brand"
    COLOUR = "colour"
    SIZE = "size"
    PRICE = "price"
    RATING = "rating"
    PROMOTION = "on_promotion"
    FREE_TEXT = "free_text"


FACET_DIMENSIONS = (Dimension.CATEGORY, Dimension.BRAND, Dimension.COLOUR, Dimension.SIZE)

TEXT_SEARCH_FIELDS = ("title", "description", "brand", "category")


@dataclass(frozen=True)
class Equals:
    field: str
    value: Any


@dataclass(frozen=True)
class In:
    field: str
    values: Tuple[Any, ...]


@dataclass(frozen=True)
class Range:
    """Inclusive range; either bound may be open."""

    field: str
    lower: Optional[Union[Decimal, float]] = None
    upper: Optional[Union[Decimal, float]] = None


@dataclass(frozen=True)
class TextSearch:
    """Case-insensitive substring match on any of ``fields``."""

    term: str
    fields: Tuple[str, ...] = TEXT_SEARCH_FIELDS


@dataclass(frozen=True)
class And:
    """Conjunction; an empty conjunction matches everything."""

    predicates: Tuple["Predicate", ...] = ()

    def with_(self, predicate: "Predicate") -> "And":
        return And(self.predicates + (predicate,))


Predicate = Union[Equals, In, Range, TextSearch, And]

MATCH_ALL = And()


def build_filters(spec: QuerySpec) -> Dict[Dimension, Predicate]:
    """
    Build one predicate per active filter dimension.

    Args:
        spec: Normalized query

    Returns:
        Dict mapping each active dimension to its predicate
    """
    filters: Dict[Dimension, Predicate] = {}
    if not spec.has_filters:
        return filters

    if spec.ids:
        filters[Dimension.IDS] = In("id", spec.ids)
    if spec.categories:
        filters[Dimension.CATEGORY] = In("category", spec.categories)
    if spec.brands:
        filters[Dimension.BRAND] = In("brand", spec.brands)
    if spec.colours:
        filters[Dimension.COLOUR] = In("colour", spec.colours)
    if spec.sizes:
        filters[Dimension.SIZE] = In("size", spec.sizes)
    if spec.free_text:
        filters[Dimension.FREE_TEXT] = TextSearch(spec.free_text)
    if spec.min_price is not None or spec.max_price is not None:
        filters[Dimension.PRICE] = Range("price", spec.min_price, spec.max_price)
    if spec.min_rating is not None:
        filters[Dimension.RATING] = Range("rating", lower=spec.min_rating)
    if spec.on_promotion is not None:
        filters[Dimension.PROMOTION] = Equals("on_promotion", spec.on_promotion)
    return filters


def compile_filters(spec: QuerySpec, exclude: Optional[Dimension] = None) -> And:
    """Conjoin every active filter, leaving out the ``exclude`` dimension."""
    return And(tuple(p for dim, p in build_filters(spec).items() if dim is not exclude))
