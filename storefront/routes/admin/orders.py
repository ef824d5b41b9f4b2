# storefront/routes/admin/orders.py
import math
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from storefront.database import get_db
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.users import User
from storefront.schemas.order import OrderOut, AdminOrdersPage, OrderUpdate
from storefront.utils.audit import write_log, client_ip
from storefront.utils.checkout import restock_order
from storefront.utils.tokenJWT import admin_required

router = APIRouter(prefix="/orders", tags=["Admin: Orders"])

# Orders in these states are closed for further status changes
TERMINAL_STATUSES = {OrderStatus.CANCELLED, OrderStatus.REFUNDED}
# Stock is still in the warehouse until the order ships
RESTOCKABLE_STATUSES = {OrderStatus.PENDING, OrderStatus.PROCESSING}


def _with_relations(query):
    return query.options(
        joinedload(Order.user),
        joinedload(Order.items).joinedload(OrderItem.product),
    )


def _get_order(db: Session, order_id: int) -> Order:
    order = _with_relations(db.query(Order)).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("", response_model=AdminOrdersPage)
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: Optional[OrderStatus] = Query(None),
    search: Optional[str] = Query(None, description="Order number, customer e-mail or billing name"),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(Order)

    if status is not None:
        query = query.filter(Order.status == status)
    if search:
        like = f"%{search}%"
        query = query.filter(
            or_(
                Order.order_number.ilike(like),
                Order.customer_email.ilike(like),
                Order.billing_name.ilike(like),
            )
        )

    total = query.count()
    rows = (
        _with_relations(query)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "items": rows,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


# Registered before /{order_id} so "recent" is not parsed as an id
@router.get("/recent", response_model=List[OrderOut])
def recent_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return (
        _with_relations(db.query(Order))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .limit(10)
        .all()
    )


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return _get_order(db, order_id)


@router.put("/{order_id}", response_model=OrderOut)
def update_order(
    order_id: int,
    payload: OrderUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    order = _get_order(db, order_id)
    old_status, new_status = order.status, payload.status

    if new_status is not None and new_status != old_status:
        if old_status in TERMINAL_STATUSES:
            raise HTTPException(status_code=400, detail=f"Cannot change status from {old_status.value}")

        now = datetime.now(timezone.utc)
        if new_status == OrderStatus.SHIPPED:
            order.shipped_at = now
        elif new_status == OrderStatus.DELIVERED:
            order.delivered_at = now
            if order.shipped_at is None:
                order.shipped_at = now
        elif new_status == OrderStatus.CANCELLED and old_status in RESTOCKABLE_STATUSES:
            restock_order(db, order, current_user.id, reason="Order cancelled")

        order.status = new_status

    if payload.payment_status is not None:
        order.payment_status = payload.payment_status
    if payload.tracking_number is not None:
        order.tracking_number = payload.tracking_number or None

    db.commit()

    write_log(
        db, user_id=current_user.id, action="ORDER_UPDATE", resource="orders", status="SUCCESS",
        ip=client_ip(request),
        meta={
            "order_id": order_id,
            "old": old_status.value,
            "new": (new_status or old_status).value,
            "tracking_number": payload.tracking_number,
        },
    )
    return _get_order(db, order_id)
