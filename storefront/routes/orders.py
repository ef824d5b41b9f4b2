# storefront/routes/orders.py
import math

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session, joinedload

from storefront.database import get_db
from storefront.models.order import Order, OrderItem
from storefront.models.users import User
from storefront.schemas.order import CheckoutPayload, OrderOut, OrdersPage
from storefront.utils.audit import write_log, client_ip
from storefront.utils.cart import CartOwner, get_cart_owner, require_owner, find_cart
from storefront.utils.checkout import place_order
from storefront.utils.tokenJWT import get_current_user

router = APIRouter(tags=["Orders"])


# Turn the caller's cart (user or guest) into a pending order
@router.post("/checkout", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def checkout(
    payload: CheckoutPayload,
    request: Request,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    require_owner(owner)
    cart = find_cart(db, owner)
    if cart is None or not cart.items:
        raise HTTPException(status_code=400, detail="Cart is empty")

    order = place_order(db, cart, payload, owner.user_id)

    write_log(
        db, user_id=owner.user_id, action="ORDER_CREATE", resource="orders", status="SUCCESS",
        ip=client_ip(request),
        meta={"order_id": order.id, "order_number": order.order_number, "total": str(order.total_amount)},
    )
    return order


# List the caller's orders, newest first
@router.get("/orders", response_model=OrdersPage)
def list_my_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    q = db.query(Order).filter(Order.user_id == current_user.id)
    total = q.count()
    rows = (
        q.options(joinedload(Order.items).joinedload(OrderItem.product))
        .order_by(Order.created_at.desc(), Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return {
        "items": rows,
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": math.ceil(total / page_size) if total else 0,
    }


# Get details of a specific order
@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    o = db.query(Order).options(
        joinedload(Order.items).joinedload(OrderItem.product)
    ).filter(Order.id == order_id).first()

    if not o or (o.user_id != current_user.id and not current_user.is_admin):
        raise HTTPException(status_code=404, detail="Order not found")
    return o
