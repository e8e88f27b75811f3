"""Search result models returned by the faceting engine."""

from decimal import Decimal
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from products_api.models.product import Product


class FacetOptions(BaseModel):
    """
    Filter options available under the current constraints.

    The value lists are the sorted keys of the matching count maps. Counts for
    a dimension are computed with every active filter except that dimension's
    own filter.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    categories: List[str] = Field(default_factory=list)
    brands: List[str] = Field(default_factory=list)
    colours: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    category_counts: Dict[str, int] = Field(default_factory=dict)
    brand_counts: Dict[str, int] = Field(default_factory=dict)
    colour_counts: Dict[str, int] = Field(default_factory=dict)
    size_counts: Dict[str, int] = Field(default_factory=dict)
    min_price: Decimal = Field(default=Decimal("0"))
    max_price: Decimal = Field(default=Decimal("0"))
    ratings: List[int] = Field(default_factory=list, description="Distinct integer rating floors, ascending")
    has_promotions: bool = False


class PageResult(BaseModel):
    """One page of products plus the total match count and facet options."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    products: List[Product] = Field(default_factory=list)
    total_count: int = 0
    filters: FacetOptions = Field(default_factory=FacetOptions)
