# storefront/routes/admin/users.py
import math
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from storefront.database import get_db
from storefront.models.cart import Cart
from storefront.models.log import Log
from storefront.models.order import Order
from storefront.models.stock import StockMovement
from storefront.models.users import User
from storefront.schemas.user import RoleUpdate, BanUpdate, UserResponse, UsersPage
from storefront.utils.audit import write_log, client_ip
from storefront.utils.tokenJWT import admin_required

router = APIRouter(prefix="/users", tags=["Admin: Users"])


def _get_user(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


# Retrieve a list of users with filtering, sorting, and pagination
@router.get("", response_model=UsersPage)
def list_users(
    q: Optional[str] = Query(None, description="Search by e-mail or name"),
    role: Optional[str] = Query(None, description="Filter by role"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    sort_by: Literal["id", "email", "name", "role", "created_at"] = "id",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(User)

    if q:
        like = f"%{q.lower()}%"
        query = query.filter(or_(User.email.ilike(like), User.name.ilike(like)))
    if role:
        query = query.filter(User.role.ilike(role))

    sort_map = {
        "id": User.id,
        "email": User.email,
        "name": User.name,
        "role": User.role,
        "created_at": User.created_at,
    }
    col = sort_map.get(sort_by, User.id)
    query = query.order_by(col.asc() if order == "asc" else col.desc())

    total = query.count()
    users = query.offset((page - 1) * limit).limit(limit).all()

    return {
        "items": users,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


@router.put("/{user_id}/role", response_model=UserResponse)
def update_user_role(
    user_id: int,
    payload: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    user = _get_user(db, user_id)
    if user.id == current_user.id and payload.role != "admin":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot remove your own admin role")

    old_role = user.role
    user.role = payload.role
    db.commit()
    db.refresh(user)

    write_log(
        db, user_id=current_user.id, action="USER_ROLE_CHANGE", resource="users", status="SUCCESS",
        ip=client_ip(request), meta={"user_id": user.id, "old": old_role, "new": user.role},
    )
    return user


@router.put("/{user_id}/ban", response_model=UserResponse)
def update_user_ban(
    user_id: int,
    payload: BanUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    user = _get_user(db, user_id)
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot ban your own account")

    user.banned = payload.banned
    user.ban_reason = payload.reason if payload.banned else None
    db.commit()
    db.refresh(user)

    write_log(
        db, user_id=current_user.id, action="USER_BAN" if user.banned else "USER_UNBAN", resource="users",
        status="SUCCESS", ip=client_ip(request), meta={"user_id": user.id, "reason": user.ban_reason},
    )
    return user


# Delete a user account; orders and history stay, detached from the user
@router.delete("/{user_id}")
def delete_user(
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    user = _get_user(db, user_id)

    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="You cannot delete your own account")

    db.query(Order).filter(Order.user_id == user.id).update({Order.user_id: None}, synchronize_session=False)
    db.query(StockMovement).filter(StockMovement.created_by == user.id).update(
        {StockMovement.created_by: None}, synchronize_session=False
    )
    db.query(Log).filter(Log.user_id == user.id).update({Log.user_id: None}, synchronize_session=False)
    cart = db.query(Cart).filter(Cart.user_id == user.id).first()
    if cart:
        db.delete(cart)

    email = user.email
    db.delete(user)
    db.commit()

    write_log(
        db, user_id=current_user.id, action="USER_DELETE", resource="users", status="SUCCESS",
        ip=client_ip(request), meta={"user_id": user_id, "email": email},
    )
    return {"message": f"User {email} has been deleted"}
