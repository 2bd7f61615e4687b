from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Any, Dict, List, Optional, get_args

from sqlalchemy import inspect

from core.criteria import Criteria
from core.exceptions import InvalidCriteriaError
from core.repository import to_attribute_name
from schemas.products import ProductResponse


class WishlistResponse(BaseModel):
    id: str
    customer_id: str
    sales_channel_id: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class ProductListingResponse(BaseModel):
    entity: str
    total: int
    page: int
    limit: Optional[int] = None
    elements: List[ProductResponse]


class LoadWishlistResponse(BaseModel):
    wishlist: WishlistResponse
    products: ProductListingResponse


def entity_payload(entity, associations: Dict[str, Criteria]) -> Dict[str, Any]:
    """Column values plus the requested associations only.

    Reading relationships through ``from_attributes`` would lazy load every
    association whether or not the caller asked for it.
    """
    mapper = inspect(entity).mapper
    data = {attr.key: getattr(entity, attr.key) for attr in mapper.column_attrs}
    for name, nested in associations.items():
        key = mapper.relationships[to_attribute_name(name)].key
        value = getattr(entity, key)
        if isinstance(value, list):
            data[key] = [entity_payload(item, nested.associations) for item in value]
        else:
            data[key] = entity_payload(value, nested.associations) if value is not None else None
    return data


def _nested_model(annotation):
    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        return annotation
    for arg in get_args(annotation):
        model = _nested_model(arg)
        if model is not None:
            return model
    return None


def check_associations(associations: Dict[str, Criteria], model=ProductResponse, path: str = "") -> None:
    """Reject associations the response cannot serialise"""
    for name, nested in associations.items():
        field = model.model_fields.get(to_attribute_name(name))
        nested_model = _nested_model(field.annotation) if field is not None else None
        if nested_model is None:
            raise InvalidCriteriaError(f"Association '{path}{name}' is not available",
                                       association=f"{path}{name}")
        check_associations(nested.associations, nested_model, f"{path}{name}.")


def build_load_wishlist_response(wishlist, products) -> LoadWishlistResponse:
    associations = products.criteria.associations
    return LoadWishlistResponse(
        wishlist=WishlistResponse.model_validate(wishlist),
        products=ProductListingResponse(
            entity=products.entity,
            total=products.total,
            page=products.page,
            limit=products.limit,
            elements=[
                ProductResponse.model_validate(entity_payload(product, associations))
                for product in products
            ],
        ),
    )
