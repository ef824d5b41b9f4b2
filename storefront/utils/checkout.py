# storefront/utils/checkout.py
import logging
import secrets
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from storefront.models.cart import Cart
from storefront.models.order import Order, OrderItem, OrderStatus, PaymentStatus
from storefront.models.product import Product
from storefront.models.stock import StockMovementType
from storefront.schemas.order import CheckoutPayload
from storefront.utils.cart import ensure_purchasable
from storefront.utils.pricing import money, line_total, tax_for, shipping_for
from storefront.utils.stock import apply_stock_change

logger = logging.getLogger(__name__)


def new_order_number() -> str:
    return f"ORD-{datetime.now(timezone.utc):%Y%m%d}-{secrets.token_hex(3).upper()}"


def _address_fields(payload: CheckoutPayload) -> dict:
    billing = payload.billing
    shipping = payload.shipping

    fields = {
        "billing_name": billing.name,
        "billing_email": billing.email,
        "billing_phone": billing.phone,
        "billing_address1": billing.address1,
        "billing_address2": billing.address2,
        "billing_city": billing.city,
        "billing_state": billing.state,
        "billing_zip": billing.zip,
        "billing_country": billing.country,
    }

    # Ship to the billing address unless a separate one was given
    if shipping is None:
        fields.update({
            "shipping_name": billing.name,
            "shipping_email": billing.email,
            "shipping_phone": billing.phone,
            "shipping_address1": billing.address1,
            "shipping_address2": billing.address2,
            "shipping_city": billing.city,
            "shipping_state": billing.state,
            "shipping_zip": billing.zip,
            "shipping_country": billing.country,
        })
    else:
        fields.update({
            "shipping_name": shipping.name,
            "shipping_email": shipping.email,
            "shipping_phone": shipping.phone,
            "shipping_address1": shipping.address1,
            "shipping_address2": shipping.address2,
            "shipping_city": shipping.city,
            "shipping_state": shipping.state,
            "shipping_zip": shipping.zip,
            "shipping_country": shipping.country,
        })
    return fields


def place_order(db: Session, cart: Cart, payload: CheckoutPayload, user_id: Optional[int]) -> Order:
    """Convert the cart into a pending order.

    Every line is validated before anything is written, then stock is
    decremented, the order persisted and the cart emptied in one commit.
    """
    if not cart.items:
        raise HTTPException(status_code=400, detail="Cart is empty")

    # Validate availability for the whole cart first
    lines = []
    for ci in cart.items:
        product = db.query(Product).filter(Product.id == ci.product_id).first()
        if product is None:
            raise HTTPException(status_code=400, detail="A product in the cart no longer exists")
        try:
            ensure_purchasable(product, ci.quantity)
        except HTTPException as exc:
            raise HTTPException(status_code=400, detail=f"{product.name}: {exc.detail}")
        lines.append((ci, product))

    subtotal = money(sum((line_total(ci.price, ci.quantity) for ci, _ in lines), Decimal("0")))
    tax_amount = tax_for(subtotal)
    shipping_amount = shipping_for(subtotal)
    discount_amount = Decimal("0.00")
    total_amount = money(subtotal + tax_amount + shipping_amount - discount_amount)

    order = Order(
        order_number=new_order_number(),
        user_id=user_id,
        status=OrderStatus.PENDING,
        payment_status=PaymentStatus.PENDING,
        customer_email=payload.customer_email,
        customer_phone=payload.customer_phone,
        subtotal=subtotal,
        tax_amount=tax_amount,
        shipping_amount=shipping_amount,
        discount_amount=discount_amount,
        total_amount=total_amount,
        **_address_fields(payload),
    )
    db.add(order)

    for ci, product in lines:
        order.items.append(OrderItem(
            product_id=product.id,
            quantity=ci.quantity,
            price=money(ci.price),
            total=line_total(ci.price, ci.quantity),
        ))
        if product.track_quantity:
            apply_stock_change(
                db, product, -ci.quantity,
                movement_type=StockMovementType.OUT,
                user_id=user_id,
                reason="Order placed",
                reference=order.order_number,
            )

    # Cart lines become order lines
    for ci, _ in lines:
        db.delete(ci)

    db.commit()
    db.refresh(order)
    logger.info("Order %s placed: %d lines, total %s", order.order_number, len(lines), total_amount)
    return order


def restock_order(db: Session, order: Order, user_id: Optional[int], reason: str) -> None:
    """Return tracked stock for every line of an order. Does not commit."""
    for item in order.items:
        product = item.product
        if product is None or not product.track_quantity:
            continue
        apply_stock_change(
            db, product, item.quantity,
            movement_type=StockMovementType.IN,
            user_id=user_id,
            reason=reason,
            reference=order.order_number,
        )
