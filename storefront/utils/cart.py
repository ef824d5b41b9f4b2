# storefront/utils/cart.py
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.models.cart import Cart, CartItem
from storefront.models.product import Product, ProductStatus
from storefront.models.users import User
from storefront.schemas.cart import CartOut, CartItemOut, CartProductOut
from storefront.utils.pricing import money, line_total, subtotal_of
from storefront.utils.tokenJWT import get_optional_user


@dataclass
class CartOwner:
    user: Optional[User] = None
    session_id: Optional[str] = None

    @property
    def user_id(self) -> Optional[int]:
        return self.user.id if self.user else None

    @property
    def known(self) -> bool:
        return self.user is not None or bool(self.session_id)


# Resolve who owns the cart: a bearer token wins over the guest session header
def get_cart_owner(
    user: Optional[User] = Depends(get_optional_user),
    x_session_id: Optional[str] = Header(None),
) -> CartOwner:
    session_id = (x_session_id or "").strip() or None
    return CartOwner(user=user, session_id=session_id)


def require_owner(owner: CartOwner) -> None:
    if not owner.known:
        raise HTTPException(status_code=400, detail="User ID or Session ID required")


def find_cart(db: Session, owner: CartOwner) -> Optional[Cart]:
    if owner.user is not None:
        return db.query(Cart).filter(Cart.user_id == owner.user.id).first()
    if owner.session_id:
        return db.query(Cart).filter(Cart.session_id == owner.session_id).first()
    return None


def get_or_create_cart(db: Session, owner: CartOwner) -> Cart:
    # Retrieve the owner's cart or create an empty one
    require_owner(owner)
    cart = find_cart(db, owner)
    if not cart:
        if owner.user is not None:
            cart = Cart(user_id=owner.user.id)
        else:
            cart = Cart(session_id=owner.session_id)
        db.add(cart)
        db.commit()
        db.refresh(cart)
    return cart


def ensure_purchasable(product: Product, quantity: int) -> None:
    """Reject a cart line the product cannot currently satisfy."""
    if product.status != ProductStatus.ACTIVE:
        raise HTTPException(status_code=400, detail="Product is not available")
    if product.track_quantity and product.quantity < quantity:
        raise HTTPException(status_code=400, detail=f"Only {product.quantity} items available in stock")


def add_item(db: Session, cart: Cart, product: Product, quantity: int) -> CartItem:
    ensure_purchasable(product, quantity)

    item = db.query(CartItem).filter(
        CartItem.cart_id == cart.id, CartItem.product_id == product.id
    ).first()

    if item:
        # The merged quantity has to fit the stock as well
        new_quantity = item.quantity + quantity
        ensure_purchasable(product, new_quantity)
        item.quantity = new_quantity
    else:
        item = CartItem(
            cart_id=cart.id,
            product_id=product.id,
            quantity=quantity,
            price=money(product.price),
        )
        db.add(item)
    return item


def set_item_quantity(db: Session, item: CartItem, quantity: int) -> None:
    if quantity == 0:
        db.delete(item)
        return
    product = item.product
    if product is not None and product.track_quantity and product.quantity < quantity:
        raise HTTPException(status_code=400, detail=f"Only {product.quantity} items available in stock")
    item.quantity = quantity


def find_item(db: Session, cart: Optional[Cart], item_id: int) -> CartItem:
    item = None
    if cart is not None:
        item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.cart_id == cart.id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")
    return item


def cart_to_out(cart: Cart) -> CartOut:
    items_out = []
    total_items = 0

    for it in cart.items:
        total_items += it.quantity
        items_out.append(CartItemOut(
            id=it.id,
            product_id=it.product_id,
            quantity=it.quantity,
            price=money(it.price),
            line_total=line_total(it.price, it.quantity),
            product=CartProductOut.model_validate(it.product),
        ))

    subtotal = subtotal_of((it.price, it.quantity) for it in cart.items)
    return CartOut(
        id=cart.id,
        user_id=cart.user_id,
        session_id=cart.session_id,
        items=items_out,
        total_items=total_items,
        subtotal=subtotal,
        currency=settings.CURRENCY,
        created_at=cart.created_at,
        updated_at=cart.updated_at,
    )


def merge_carts(db: Session, guest_cart: Cart, user_cart: Cart) -> int:
    """Move guest lines into the user's cart, capped by tracked stock.

    Lines whose product is no longer purchasable are dropped. Returns the
    number of lines that made it into the user's cart. Does not commit.
    """
    existing = {it.product_id: it for it in user_cart.items}
    merged = 0

    for guest_item in list(guest_cart.items):
        product = guest_item.product
        if product is None or product.status != ProductStatus.ACTIVE:
            continue

        current = existing.get(product.id)
        wanted = guest_item.quantity + (current.quantity if current else 0)
        if product.track_quantity:
            wanted = min(wanted, product.quantity)
        if wanted <= 0:
            continue

        if current:
            current.quantity = wanted
        else:
            db.add(CartItem(
                cart_id=user_cart.id,
                product_id=product.id,
                quantity=wanted,
                price=money(guest_item.price),
            ))
        merged += 1

    db.delete(guest_cart)
    return merged
