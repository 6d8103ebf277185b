from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime


class OrderDetailOut(BaseModel):
    id_order_detail: int
    id_order: int
    id_product: int
    quantity: int
    unit_price: float

    model_config = ConfigDict(from_attributes=True)


class ProductReviewOut(BaseModel):
    id_review: int
    id_product: int
    id_user: Optional[int] = None
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CartItemOut(BaseModel):
    id_cart: int
    id_product: int
    id_user: Optional[int] = None
    quantity: int

    model_config = ConfigDict(from_attributes=True)


class WishlistItemOut(BaseModel):
    id_wishlist: int
    id_product: int
    id_user: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class OrderReturnOut(BaseModel):
    id_return: int
    id_order: int
    id_product: int
    quantity: int
    reason: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
