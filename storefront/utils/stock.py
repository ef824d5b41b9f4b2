# storefront/utils/stock.py
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from storefront.models.product import Product, ProductStatus
from storefront.models.stock import StockMovement, StockMovementType


def stock_status(product: Product) -> str:
    """Classify on-hand quantity for the inventory screen."""
    if not product.track_quantity:
        return "in_stock"
    if product.quantity <= 0:
        return "out_of_stock"
    if product.quantity <= product.low_stock_alert:
        return "low_stock"
    return "in_stock"


def sync_status(product: Product) -> None:
    # Only live products follow stock; drafts and inactive products keep their status
    if not product.track_quantity:
        return
    if product.quantity <= 0 and product.status == ProductStatus.ACTIVE:
        product.status = ProductStatus.OUT_OF_STOCK
    elif product.quantity > 0 and product.status == ProductStatus.OUT_OF_STOCK:
        product.status = ProductStatus.ACTIVE


def apply_stock_change(
    db: Session,
    product: Product,
    delta: int,
    *,
    movement_type: StockMovementType,
    user_id: Optional[int] = None,
    reason: Optional[str] = None,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
) -> StockMovement:
    """Change on-hand quantity by `delta` and record the movement.

    Does not commit; the caller owns the transaction.
    """
    new_quantity = product.quantity + delta
    if new_quantity < 0:
        raise HTTPException(
            status_code=400,
            detail=f"Stock for {product.name} cannot go below zero (on hand: {product.quantity})",
        )

    product.quantity = new_quantity
    sync_status(product)

    movement = StockMovement(
        product_id=product.id,
        type=movement_type,
        quantity=delta,
        reason=reason,
        reference=reference,
        notes=notes,
        created_by=user_id,
    )
    db.add(movement)
    return movement
