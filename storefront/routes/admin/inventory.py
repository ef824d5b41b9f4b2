# storefront/routes/admin/inventory.py
import math
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from storefront.database import get_db
from storefront.models.product import Product
from storefront.models.stock import StockMovement, StockMovementType
from storefront.models.users import User
from storefront.schemas.stock import (
    StockAdjustment, StockMovementOut, StockMovementPage,
    InventoryItemOut, InventoryPage, InventorySummary, StockStatus,
)
from storefront.utils.audit import write_log, client_ip
from storefront.utils.pricing import money
from storefront.utils.stock import apply_stock_change, stock_status
from storefront.utils.tokenJWT import admin_required

router = APIRouter(prefix="/inventory", tags=["Admin: Inventory"])


def _movement_out(m: StockMovement, stock_after: Optional[int] = None) -> StockMovementOut:
    return StockMovementOut(
        id=m.id,
        product_id=m.product_id,
        product_name=m.product.name if m.product else "Unknown",
        product_sku=m.product.sku if m.product else None,
        type=m.type,
        quantity=m.quantity,
        reason=m.reason,
        reference=m.reference,
        notes=m.notes,
        created_by=m.created_by,
        created_at=m.created_at,
        stock_after=stock_after,
    )


def _summary(products) -> InventorySummary:
    low = out = 0
    value = Decimal("0")
    for p in products:
        state = stock_status(p)
        if state == "low_stock":
            low += 1
        elif state == "out_of_stock":
            out += 1
        value += money(p.cost_price) * p.quantity
    return InventorySummary(
        total_products=len(products), low_stock=low, out_of_stock=out, total_value=money(value),
    )


# Stock overview per product plus the headline numbers of the inventory screen
@router.get("", response_model=InventoryPage)
def list_inventory(
    search: Optional[str] = Query(None, description="Name or SKU"),
    stock_status_filter: Optional[StockStatus] = Query(None, alias="stock_status"),
    category: Optional[int] = Query(None, description="Category id"),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(Product).options(joinedload(Product.category))
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Product.name.ilike(like), Product.sku.ilike(like)))
    if category is not None:
        query = query.filter(Product.category_id == category)

    products = query.order_by(Product.name.asc(), Product.id.asc()).all()
    summary = _summary(products)

    if stock_status_filter:
        products = [p for p in products if stock_status(p) == stock_status_filter]

    total = len(products)
    window = products[(page - 1) * limit: page * limit]
    items = [
        InventoryItemOut(
            id=p.id,
            name=p.name,
            sku=p.sku,
            category=p.category.name if p.category else None,
            quantity=p.quantity,
            low_stock_alert=p.low_stock_alert,
            track_quantity=p.track_quantity,
            cost_price=p.cost_price,
            status=p.status,
            stock_status=stock_status(p),
        )
        for p in window
    ]
    return {
        "summary": summary,
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


@router.get("/movements", response_model=StockMovementPage)
def list_movements(
    product_id: Optional[int] = Query(None),
    type: Optional[StockMovementType] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(StockMovement)
    if product_id is not None:
        query = query.filter(StockMovement.product_id == product_id)
    if type is not None:
        query = query.filter(StockMovement.type == type)

    total = query.count()
    rows = (
        query.options(joinedload(StockMovement.product))
        .order_by(StockMovement.created_at.desc(), StockMovement.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "items": [_movement_out(m) for m in rows],
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


@router.post("/adjust", response_model=StockMovementOut)
def adjust_stock(
    payload: StockAdjustment,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    product = db.query(Product).filter(Product.id == payload.product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    # IN and OUT take a magnitude; ADJUSTMENT takes the signed delta as given
    if payload.type == StockMovementType.IN:
        delta = abs(payload.quantity)
    elif payload.type == StockMovementType.OUT:
        delta = -abs(payload.quantity)
    else:
        delta = payload.quantity

    movement = apply_stock_change(
        db, product, delta,
        movement_type=payload.type,
        user_id=current_user.id,
        reason=payload.reason,
        reference=payload.reference,
        notes=payload.notes,
    )
    db.commit()
    db.refresh(movement)

    write_log(
        db, user_id=current_user.id, action="STOCK_ADJUSTMENT", resource="inventory", status="SUCCESS",
        ip=client_ip(request),
        meta={"movement_id": movement.id, "product_id": product.id, "delta": delta},
    )
    return _movement_out(movement, stock_after=product.quantity)
