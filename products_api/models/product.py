"""Product data model shared by the record stores and the API."""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Product(BaseModel):
    """
    Catalogue product as read from the record store.

    Attributes:
        id: Store-assigned identifier
        title: Product name/title
        description: Optional long description
        brand: Brand name
        category: Product category
        colour: Optional colour
        size: Optional size label
        price: Price in decimal format
        rating: Average rating
        on_promotion: Whether the product is currently promoted
        image_urls: Ordered image URLs
    """

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "Gaming Laptop",
                "brand": "Acme",
                "category": "Laptops",
                "price": "999.99",
                "rating": 4.5,
                "onPromotion": False,
            }
        },
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        extra="ignore",
    )

    id: int = Field(..., description="Store-assigned product identifier")
    title: str = Field(..., min_length=1, description="Product name/title")
    description: Optional[str] = Field(default=None, description="Product description")
    brand: str = Field(..., min_length=1, description="Brand name")
    category: str = Field(..., min_length=1, description="Product category")
    colour: Optional[str] = Field(default=None, description="Colour")
    size: Optional[str] = Field(default=None, description="Size label")
    price: Decimal = Field(..., ge=0, description="Price in decimal format")
    rating: float = Field(default=0.0, description="Average rating")
    on_promotion: bool = Field(default=False, description="Currently on promotion")
    image_urls: List[str] = Field(default_factory=list, description="Ordered image URLs")
