"""Query models: the lenient request body and the normalized, immutable query."""

from decimal import Decimal, InvalidOperation
from enum import Enum
import math
from typing import Any, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class SortField(str, Enum):
    """Attributes a listing can be ordered by."""

    TITLE = "title"
    PRICE = "price"
    RATING = "rating"
    BRAND = "brand"
    CATEGORY = "category"


class SortDirection(str, Enum):
    """Ordering direction."""

    ASC = "asc"
    DESC = "desc"


def _as_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_decimal(value: Any) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    return number if number.is_finite() else None


def _as_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _as_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
        return str(value)
    return None


def _as_list(value: Any) -> Optional[List[Any]]:
    if value is None:
        return None
    if isinstance(value, (str, int, float, Decimal)):
        return [value]
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return None


class ProductQuery(BaseModel):
    """
    Raw search request as received from a client.

    Every field is optional and validation is lenient: values that cannot be
    read are treated as absent instead of rejected. Cleaning and
    canonicalisation happen in the query normalizer.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"categories": ["Laptops"], "brands": ["Acme"], "sortBy": "price", "sortDirection": "desc", "page": 1, "pageSize": 20}},
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    ids: Optional[List[int]] = Field(default=None, description="Restrict to these product ids")
    category: Optional[str] = Field(default=None, description="Single category (legacy)")
    categories: Optional[List[str]] = Field(default=None, description="Categories to include")
    brands: Optional[List[str]] = Field(default=None, description="Brands to include")
    colours: Optional[List[str]] = Field(default=None, description="Colours to include")
    sizes: Optional[List[str]] = Field(default=None, description="Sizes to include")
    min_price: Optional[Decimal] = Field(default=None, description="Lower price bound")
    max_price: Optional[Decimal] = Field(default=None, description="Upper price bound")
    min_rating: Optional[float] = Field(default=None, description="Minimum rating")
    on_promotion: Optional[bool] = Field(default=None, description="Promotion flag")
    page: Optional[int] = Field(default=None, description="1-based page number")
    page_size: Optional[int] = Field(default=None, description="Items per page")
    sort_by: Optional[str] = Field(default=None, description="title, price, rating, brand or category")
    sort_direction: Optional[str] = Field(default=None, description="asc or desc")
    query: Optional[str] = Field(default=None, description="Free text across title, description, brand and category")

    @field_validator("ids", mode="before")
    @classmethod
    def coerce_ids(cls, v: Any) -> Optional[List[int]]:
        items = _as_list(v)
        if items is None:
            return None
        return [i for i in (_as_int(item) for item in items) if i is not None]

    @field_validator("categories", "brands", "colours", "sizes", mode="before")
    @classmethod
    def coerce_string_list(cls, v: Any) -> Optional[List[str]]:
        items = _as_list(v)
        if items is None:
            return None
        return [s for s in (_as_str(item) for item in items) if s is not None]

    @field_validator("category", "sort_by", "sort_direction", "query", mode="before")
    @classmethod
    def coerce_string(cls, v: Any) -> Optional[str]:
        return _as_str(v)

    @field_validator("min_price", "max_price", mode="before")
    @classmethod
    def coerce_decimal(cls, v: Any) -> Optional[Decimal]:
        return _as_decimal(v)

    @field_validator("min_rating", mode="before")
    @classmethod
    def coerce_float(cls, v: Any) -> Optional[float]:
        return _as_float(v)

    @field_validator("page", "page_size", mode="before")
    @classmethod
    def coerce_int(cls, v: Any) -> Optional[int]:
        return _as_int(v)

    @field_validator("on_promotion", mode="before")
    @classmethod
    def coerce_bool(cls, v: Any) -> Optional[bool]:
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            lowered = v.strip().lower()
            if lowered in ("true", "1", "yes"):
                return True
            if lowered in ("false", "0", "no"):
                return False
            return None
        if isinstance(v, int) and v in (0, 1):
            return bool(v)
        return None


# Largest page whose offset still fits a signed 64-bit SQL OFFSET at the maximum page size
MAX_PAGE = (2**63 - 1) // 100 + 1


class QuerySpec(BaseModel):
    """
    Normalized, immutable filter/sort/paging request.

    List filters are deduplicated, trimmed and sorted so two logically equal
    queries compare (and serialize) identically. An empty tuple or ``None``
    means the dimension is unconstrained.
    """

    model_config = ConfigDict(frozen=True)

    ids: Tuple[int, ...] = ()
    categories: Tuple[str, ...] = ()
    brands: Tuple[str, ...] = ()
    colours: Tuple[str, ...] = ()
    sizes: Tuple[str, ...] = ()
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    min_rating: Optional[float] = None
    on_promotion: Optional[bool] = None
    free_text: Optional[str] = None
    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    page_size: int = Field(default=20, ge=1, le=100)
    sort_by: SortField = SortField.TITLE
    sort_direction: SortDirection = SortDirection.ASC

    @property
    def has_filters(self) -> bool:
        """True when at least one filter dimension constrains the result set."""
        return bool(
            self.ids
            or self.categories
            or self.brands
            or self.colours
            or self.sizes
            or self.min_price is not None
            or self.max_price is not None
            or self.min_rating is not None
            or self.on_promotion is not None
            or self.free_text
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def descending(self) -> bool:
        return self.sort_direction is SortDirection.DESC
