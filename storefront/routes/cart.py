# storefront/routes/cart.py
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.cart import Cart
from storefront.models.product import Product
from storefront.models.users import User
from storefront.schemas.cart import CartAddItem, CartUpdateItem, CartOut
from storefront.utils.audit import write_log, client_ip
from storefront.utils.cart import (
    CartOwner, get_cart_owner, require_owner, find_cart, get_or_create_cart,
    add_item, set_item_quantity, find_item, cart_to_out, merge_carts,
)
from storefront.utils.tokenJWT import get_current_user

router = APIRouter(prefix="/cart", tags=["Cart"])


def _log(db: Session, request: Request, owner: CartOwner, action: str, meta: dict):
    write_log(
        db,
        user_id=owner.user_id,
        action=action,
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"session_id": owner.session_id, **meta},
    )


# Signed-in user's cart
@router.get("", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    cart = get_or_create_cart(db, CartOwner(user=current_user))
    return cart_to_out(cart)


# Guest cart by session id
@router.get("/session/{session_id}", response_model=CartOut)
def get_session_cart(session_id: str, db: Session = Depends(get_db)):
    cart = get_or_create_cart(db, CartOwner(session_id=session_id))
    return cart_to_out(cart)


@router.post("/add", response_model=CartOut, status_code=status.HTTP_201_CREATED)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    require_owner(owner)

    product = db.query(Product).filter(Product.id == payload.product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    cart = get_or_create_cart(db, owner)
    item = add_item(db, cart, product, payload.quantity)
    db.commit()
    db.refresh(cart)

    out = cart_to_out(cart)
    _log(db, request, owner, "CART_ADD", {
        "product_id": product.id, "quantity": payload.quantity,
        "line_quantity": item.quantity, "subtotal": str(out.subtotal),
    })
    return out


@router.put("/item/{item_id}", response_model=CartOut)
def update_cart_item(
    item_id: int,
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    require_owner(owner)
    cart = find_cart(db, owner)
    item = find_item(db, cart, item_id)

    set_item_quantity(db, item, payload.quantity)
    db.commit()
    db.refresh(cart)

    out = cart_to_out(cart)
    _log(db, request, owner, "CART_UPDATE", {"item_id": item_id, "quantity": payload.quantity})
    return out


@router.delete("/item/{item_id}", response_model=CartOut)
def delete_cart_item(
    item_id: int,
    request: Request,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    require_owner(owner)
    cart = find_cart(db, owner)
    item = find_item(db, cart, item_id)

    db.delete(item)
    db.commit()
    db.refresh(cart)

    out = cart_to_out(cart)
    _log(db, request, owner, "CART_DELETE", {"item_id": item_id, "cart_items": len(out.items)})
    return out


@router.delete("/clear", response_model=CartOut)
def clear_cart(
    request: Request,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    cart = get_or_create_cart(db, owner)
    removed = len(cart.items)
    cart.items.clear()
    db.commit()
    db.refresh(cart)

    _log(db, request, owner, "CART_CLEAR", {"removed": removed})
    return cart_to_out(cart)


# Move a guest cart into the signed-in user's cart (after login)
@router.post("/merge", response_model=CartOut)
def merge_guest_cart(
    request: Request,
    db: Session = Depends(get_db),
    owner: CartOwner = Depends(get_cart_owner),
):
    if owner.user is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    if not owner.session_id:
        raise HTTPException(status_code=400, detail="Session ID required")

    user_cart = get_or_create_cart(db, CartOwner(user=owner.user))
    guest_cart = db.query(Cart).filter(Cart.session_id == owner.session_id).first()

    merged = 0
    if guest_cart and guest_cart.id != user_cart.id:
        merged = merge_carts(db, guest_cart, user_cart)
        db.commit()
        db.refresh(user_cart)

    _log(db, request, owner, "CART_MERGE", {"merged_lines": merged})
    return cart_to_out(user_cart)
