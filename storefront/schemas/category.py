# storefront/schemas/category.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.schemas.product import ORMBase, CategoryRef


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: str = Field(min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: bool = True
    sort_order: int = 0


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class CategoryOut(ORMBase):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    is_active: bool
    sort_order: int
    parent: Optional[CategoryRef] = None
    children: List[CategoryRef] = []
    product_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Category entry for the storefront navigation
class ShopCategoryOut(ORMBase):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image: Optional[str] = None
    parent_id: Optional[int] = None
    product_count: int = 0
