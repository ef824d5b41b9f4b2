# storefront/schemas/product.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from storefront.models.product import ProductStatus


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class CategoryRef(ORMBase):
    id: int
    name: str
    slug: str


# Fields accepted when an admin creates a product
class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: Decimal = Field(gt=0)
    compare_price: Optional[Decimal] = Field(default=None, gt=0)
    cost_price: Optional[Decimal] = Field(default=None, ge=0)
    sku: Optional[str] = None
    barcode: Optional[str] = None
    track_quantity: bool = True
    quantity: int = Field(default=0, ge=0)
    low_stock_alert: int = Field(default=10, ge=0)
    weight: Optional[Decimal] = Field(default=None, ge=0)
    dimensions: Optional[str] = None
    status: ProductStatus = ProductStatus.DRAFT
    featured: bool = False
    images: List[str] = Field(default_factory=list)
    category_id: Optional[int] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None


# Schema for partial product updates - all fields optional
class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0)
    compare_price: Optional[Decimal] = Field(default=None, gt=0)
    cost_price: Optional[Decimal] = Field(default=None, ge=0)
    sku: Optional[str] = None
    barcode: Optional[str] = None
    track_quantity: Optional[bool] = None
    quantity: Optional[int] = Field(default=None, ge=0)
    low_stock_alert: Optional[int] = Field(default=None, ge=0)
    weight: Optional[Decimal] = Field(default=None, ge=0)
    dimensions: Optional[str] = None
    status: Optional[ProductStatus] = None
    featured: Optional[bool] = None
    images: Optional[List[str]] = None
    category_id: Optional[int] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None


# Full product representation for the back office
class ProductOut(ORMBase):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: float
    compare_price: Optional[float] = None
    cost_price: Optional[float] = None
    sku: Optional[str] = None
    barcode: Optional[str] = None
    track_quantity: bool
    quantity: int
    low_stock_alert: int
    weight: Optional[float] = None
    dimensions: Optional[str] = None
    status: ProductStatus
    featured: bool
    images: List[str] = []
    category_id: Optional[int] = None
    category: Optional[CategoryRef] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Paginated response for admin product listings
class ProductListPage(BaseModel):
    items: List[ProductOut]
    total: int
    page: int
    limit: int
    total_pages: int


# Public storefront view; cost price and stock internals stay private
class ShopProductOut(ORMBase):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    short_description: Optional[str] = None
    price: float
    compare_price: Optional[float] = None
    sku: Optional[str] = None
    featured: bool
    images: List[str] = []
    in_stock: bool
    quantity: int
    category: Optional[CategoryRef] = None
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None


class ShopProductPage(BaseModel):
    items: List[ShopProductOut]
    total: int
    page: int
    page_size: int
    total_pages: int
