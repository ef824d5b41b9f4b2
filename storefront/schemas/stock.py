# storefront/schemas/stock.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from storefront.models.product import ProductStatus
from storefront.models.stock import StockMovementType

StockStatus = Literal["in_stock", "low_stock", "out_of_stock"]


# Schema for a manual stock change from the inventory screen
class StockAdjustment(BaseModel):
    product_id: int
    type: StockMovementType
    quantity: int
    reason: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("quantity")
    @classmethod
    def non_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("quantity must not be zero")
        return v


# Schema for returning stock movement details
class StockMovementOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    product_sku: Optional[str] = None
    type: StockMovementType
    quantity: int
    reason: Optional[str] = None
    reference: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    stock_after: Optional[int] = None


# Paginated response for stock movement history
class StockMovementPage(BaseModel):
    items: List[StockMovementOut]
    total: int
    page: int
    limit: int
    total_pages: int


class InventoryItemOut(BaseModel):
    id: int
    name: str
    sku: Optional[str] = None
    category: Optional[str] = None
    quantity: int
    low_stock_alert: int
    track_quantity: bool
    cost_price: Optional[float] = None
    status: ProductStatus
    stock_status: StockStatus


class InventorySummary(BaseModel):
    total_products: int
    low_stock: int
    out_of_stock: int
    total_value: float


class InventoryPage(BaseModel):
    summary: InventorySummary
    items: List[InventoryItemOut]
    total: int
    page: int
    limit: int
    total_pages: int
