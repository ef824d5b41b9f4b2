# storefront/routes/admin/products.py
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from storefront.database import get_db
from storefront.models.category import Category
from storefront.models.order import OrderItem
from storefront.models.product import Product, ProductStatus
from storefront.models.stock import StockMovementType
from storefront.models.users import User
from storefront.schemas.product import ProductCreate, ProductUpdate, ProductOut, ProductListPage
from storefront.utils.audit import write_log, client_ip
from storefront.utils.pricing import money
from storefront.utils.stock import apply_stock_change, sync_status
from storefront.utils.tokenJWT import admin_required

router = APIRouter(prefix="/products", tags=["Admin: Products"])

MONEY_FIELDS = ("price", "compare_price", "cost_price", "weight")


def _get_product(db: Session, product_id: int) -> Product:
    product = (
        db.query(Product)
        .options(joinedload(Product.category))
        .filter(Product.id == product_id)
        .first()
    )
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


def _check_unique(db: Session, *, slug: Optional[str], sku: Optional[str], exclude_id: Optional[int] = None):
    if slug is not None:
        q = db.query(Product).filter(Product.slug == slug)
        if exclude_id is not None:
            q = q.filter(Product.id != exclude_id)
        if q.first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Product slug already exists")
    if sku:
        q = db.query(Product).filter(Product.sku == sku)
        if exclude_id is not None:
            q = q.filter(Product.id != exclude_id)
        if q.first():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Product SKU already exists")


def _check_category(db: Session, category_id: Optional[int]):
    if category_id is not None and not db.query(Category).filter(Category.id == category_id).first():
        raise HTTPException(status_code=400, detail="Category not found")


def _clean(data: dict) -> dict:
    for key in MONEY_FIELDS:
        if data.get(key) is not None:
            data[key] = money(data[key])
    # Empty SKUs are stored as NULL so the unique index ignores them
    if "sku" in data and not data["sku"]:
        data["sku"] = None
    return data


@router.get("", response_model=ProductListPage)
def list_products(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    category: Optional[int] = Query(None, description="Category id"),
    status: Optional[ProductStatus] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(Product)

    if category is not None:
        query = query.filter(Product.category_id == category)
    if status is not None:
        query = query.filter(Product.status == status)
    if search:
        like = f"%{search}%"
        query = query.filter(
            or_(
                Product.name.ilike(like),
                Product.description.ilike(like),
                Product.sku.ilike(like),
            )
        )

    total = query.count()
    items = (
        query.options(joinedload(Product.category))
        .order_by(Product.created_at.desc(), Product.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


@router.get("/{product_id}", response_model=ProductOut)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return _get_product(db, product_id)


@router.post("", response_model=ProductOut, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    data = _clean(payload.model_dump())
    _check_unique(db, slug=data["slug"], sku=data["sku"])
    _check_category(db, data["category_id"])

    # Opening stock goes through the movement ledger
    opening_quantity = data.pop("quantity")
    product = Product(**data, quantity=0)
    db.add(product)
    db.flush()

    if opening_quantity > 0:
        apply_stock_change(
            db, product, opening_quantity,
            movement_type=StockMovementType.IN,
            user_id=current_user.id,
            reason="Initial stock",
        )
    else:
        sync_status(product)

    db.commit()
    db.refresh(product)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "slug": product.slug},
    )
    return _get_product(db, product.id)


@router.put("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = _get_product(db, product_id)
    data = _clean(payload.model_dump(exclude_unset=True))

    for required in ("name", "slug", "price", "status", "track_quantity", "featured", "images", "low_stock_alert"):
        if required in data and data[required] is None:
            raise HTTPException(status_code=400, detail=f"{required} cannot be null")

    _check_unique(db, slug=data.get("slug"), sku=data.get("sku"), exclude_id=product.id)
    if "category_id" in data:
        _check_category(db, data["category_id"])

    new_quantity = data.pop("quantity", None)
    for key, value in data.items():
        setattr(product, key, value)

    if new_quantity is not None and new_quantity != product.quantity:
        apply_stock_change(
            db, product, new_quantity - product.quantity,
            movement_type=StockMovementType.ADJUSTMENT,
            user_id=current_user.id,
            reason="Product edit",
        )
    elif "status" not in data:
        sync_status(product)

    db.commit()

    write_log(
        db, user_id=current_user.id, action="PRODUCT_UPDATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product_id, "fields": sorted(payload.model_fields_set)},
    )
    return _get_product(db, product_id)


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = _get_product(db, product_id)

    if db.query(OrderItem).filter(OrderItem.product_id == product.id).first():
        raise HTTPException(
            status_code=400,
            detail="Product has orders; set its status to INACTIVE instead",
        )

    pid, pname = product.id, product.name
    db.delete(product)
    db.commit()

    write_log(
        db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": pid},
    )
    return {"message": f"Product '{pname}' deleted successfully"}
