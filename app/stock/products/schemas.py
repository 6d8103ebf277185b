from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr
from typing import List, Optional, Union
from datetime import datetime

from app.stock.category.schemas import CategoryOut
from app.stock.history.schemas import StockHistoryOut
from app.stock.related.schemas import (
    CartItemOut,
    OrderDetailOut,
    OrderReturnOut,
    ProductReviewOut,
    WishlistItemOut,
)


def _aliased(alias: str, **kwargs):
    # Read by attribute name (ORM rows) or by alias, always written as the alias
    name = "".join(f"_{c.lower()}" if c.isupper() else c for c in alias)
    return Field(
        validation_alias=AliasChoices(name, alias),
        serialization_alias=alias,
        **kwargs,
    )


# -------------------------------
# Create (multipart form, raw strings)
# -------------------------------
class ProductCreateForm(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    code_product: Optional[str] = None
    price: Optional[str] = None
    stock: Optional[str] = None
    id_category: Optional[str] = None


# -------------------------------
# Update (partial)
# -------------------------------
class ProductUpdate(BaseModel):
    """
    Every field is optional. Keys left out of the body keep their value;
    anything sent, ``0`` and ``""`` included, overwrites it.
    Numbers may arrive as strings and are coerced by the service.
    Booleans are never numbers.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    price: Optional[Union[StrictFloat, StrictInt, StrictStr]] = None
    stock: Optional[Union[StrictInt, StrictFloat, StrictStr]] = None
    image: Optional[str] = None
    id_category: Optional[Union[StrictInt, StrictStr]] = None


# -------------------------------
# Output
# -------------------------------
class ProductOut(BaseModel):
    id_product: int
    name: str
    description: Optional[str] = None
    code_product: str = _aliased("codeProduct")
    price: float
    stock: int
    image: Optional[str] = None
    id_category: int
    is_deleted: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductDetailOut(ProductOut):
    """Product with every related collection expanded."""
    category: Optional[CategoryOut] = None
    order_details: List[OrderDetailOut] = _aliased("orderDetails", default_factory=list)
    product_reviews: List[ProductReviewOut] = _aliased("productReviews", default_factory=list)
    stock_history: List[StockHistoryOut] = _aliased("stockHistory", default_factory=list)
    cart: List[CartItemOut] = Field(default_factory=list)
    wishlist: List[WishlistItemOut] = Field(default_factory=list)
    order_returns: List[OrderReturnOut] = _aliased("orderReturns", default_factory=list)


# -------------------------------
# Envelopes
# -------------------------------
class ProductPage(BaseModel):
    success: bool = True
    data: List[ProductOut]
    page: int
    limit: int
    total: int
    total_pages: int = _aliased("totalPages")


class ProductScroll(BaseModel):
    success: bool = True
    data: List[ProductOut]
    limit: int
    total: int
    next_cursor: Optional[int] = _aliased("nextCursor", default=None)


class ProductCreated(BaseModel):
    success: bool = True
    message: str
    product: ProductOut
    stock_history: StockHistoryOut = _aliased("stockHistory")


class ProductMutation(BaseModel):
    success: bool = True
    message: str
    product: ProductOut
