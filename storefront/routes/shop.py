# storefront/routes/shop.py
import math
from decimal import Decimal
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import or_, func
from sqlalchemy.orm import Session, joinedload

from storefront.database import get_db
from storefront.models.category import Category
from storefront.models.product import Product, ProductStatus
from storefront.schemas.category import ShopCategoryOut
from storefront.schemas.product import ShopProductOut, ShopProductPage

router = APIRouter(
    prefix="/shop",
    tags=["Shop"]
)


# Active categories with the number of live products in each
@router.get("/categories", response_model=List[ShopCategoryOut])
def list_categories(db: Session = Depends(get_db)):
    counts = dict(
        db.query(Product.category_id, func.count(Product.id))
        .filter(Product.status == ProductStatus.ACTIVE, Product.category_id.isnot(None))
        .group_by(Product.category_id)
        .all()
    )
    categories = (
        db.query(Category)
        .filter(Category.is_active.is_(True))
        .order_by(Category.sort_order.asc(), Category.name.asc())
        .all()
    )
    return [
        ShopCategoryOut(
            id=c.id, name=c.name, slug=c.slug, description=c.description,
            image=c.image, parent_id=c.parent_id, product_count=counts.get(c.id, 0),
        )
        for c in categories
    ]


@router.get("/products", response_model=ShopProductPage)
def list_products(
    search: Optional[str] = Query(None, description="Search by name, description or SKU"),
    category: Optional[str] = Query(None, description="Category slug; includes its direct subcategories"),
    featured: Optional[bool] = Query(None),
    on_sale: Optional[bool] = Query(None, description="Only products with a compare price above the price"),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    page: int = Query(1, ge=1),
    page_size: int = Query(12, ge=1, le=100),
    sort: Literal["newest", "price_asc", "price_desc", "name"] = "newest",
    db: Session = Depends(get_db),
):
    # Only live products are visible in the storefront
    query = db.query(Product).options(joinedload(Product.category)).filter(
        Product.status == ProductStatus.ACTIVE
    )

    if search:
        like = f"%{search}%"
        query = query.filter(
            or_(
                Product.name.ilike(like),
                Product.description.ilike(like),
                Product.sku.ilike(like),
            )
        )

    if category:
        cat = db.query(Category).filter(Category.slug == category).first()
        if not cat:
            raise HTTPException(status_code=404, detail="Category not found")
        ids = [cat.id] + [child.id for child in cat.children]
        query = query.filter(Product.category_id.in_(ids))

    if featured is not None:
        query = query.filter(Product.featured == featured)
    if on_sale:
        query = query.filter(Product.compare_price.isnot(None), Product.compare_price > Product.price)
    if min_price is not None:
        query = query.filter(Product.price >= min_price)
    if max_price is not None:
        query = query.filter(Product.price <= max_price)

    ordering = {
        "newest": (Product.created_at.desc(), Product.id.desc()),
        "price_asc": (Product.price.asc(), Product.id.asc()),
        "price_desc": (Product.price.desc(), Product.id.asc()),
        "name": (Product.name.asc(), Product.id.asc()),
    }
    query = query.order_by(*ordering[sort])

    total = query.count()
    items = query.offset((page - 1) * page_size).limit(page_size).all()

    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if total else 0,
    }


@router.get("/products/{slug}", response_model=ShopProductOut)
def get_product(slug: str, db: Session = Depends(get_db)):
    product = (
        db.query(Product)
        .options(joinedload(Product.category))
        .filter(Product.slug == slug, Product.status == ProductStatus.ACTIVE)
        .first()
    )
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
