# storefront/schemas/cart.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.models.product import ProductStatus
from storefront.schemas.product import ORMBase


# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, gt=0)


# Request schema for updating cart item quantity (0 removes the line)
class CartUpdateItem(BaseModel):
    quantity: int = Field(ge=0)


# Product snapshot embedded in each cart line
class CartProductOut(ORMBase):
    id: int
    name: str
    slug: str
    price: float
    images: List[str] = []
    status: ProductStatus
    quantity: int


# Response schema for a single cart line item
class CartItemOut(BaseModel):
    id: int
    product_id: int
    quantity: int
    price: float
    line_total: float
    product: CartProductOut


# Response schema for the entire cart summary
class CartOut(BaseModel):
    id: int
    user_id: Optional[int] = None
    session_id: Optional[str] = None
    items: List[CartItemOut]
    total_items: int
    subtotal: float
    currency: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
