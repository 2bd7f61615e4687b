from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime


class ProductVisibilityResponse(BaseModel):
    id: str
    product_id: str
    sales_channel_id: str
    visibility: int

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class WishlistProductResponse(BaseModel):
    """A product's membership in a wishlist"""
    id: str
    wishlist_id: str
    product_id: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class ProductResponse(BaseModel):
    id: str
    product_number: str
    name: str
    description: Optional[str] = None
    price: float
    stock: Optional[int] = None
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    # Only present when requested as associations
    wishlists: Optional[List[WishlistProductResponse]] = None
    visibilities: Optional[List[ProductVisibilityResponse]] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True
