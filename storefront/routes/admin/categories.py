# storefront/routes/admin/categories.py
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload, selectinload

from storefront.database import get_db
from storefront.models.category import Category
from storefront.models.product import Product
from storefront.models.users import User
from storefront.schemas.category import CategoryCreate, CategoryUpdate, CategoryOut
from storefront.utils.audit import write_log, client_ip
from storefront.utils.tokenJWT import admin_required

router = APIRouter(prefix="/categories", tags=["Admin: Categories"])


def _product_counts(db: Session) -> dict:
    rows = (
        db.query(Product.category_id, func.count(Product.id))
        .filter(Product.category_id.isnot(None))
        .group_by(Product.category_id)
        .all()
    )
    return dict(rows)


def _to_out(category: Category, counts: dict) -> CategoryOut:
    out = CategoryOut.model_validate(category)
    out.product_count = counts.get(category.id, 0)
    return out


def _get_category(db: Session, category_id: int) -> Category:
    category = (
        db.query(Category)
        .options(joinedload(Category.parent), selectinload(Category.children))
        .filter(Category.id == category_id)
        .first()
    )
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


def _check_slug(db: Session, slug: str, exclude_id: Optional[int] = None):
    q = db.query(Category).filter(Category.slug == slug)
    if exclude_id is not None:
        q = q.filter(Category.id != exclude_id)
    if q.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Category slug already exists")


def _check_parent(db: Session, parent_id: Optional[int], category: Optional[Category] = None):
    if parent_id is None:
        return
    parent = db.query(Category).filter(Category.id == parent_id).first()
    if not parent:
        raise HTTPException(status_code=400, detail="Parent category not found")
    if category is None:
        return
    # Walk up from the new parent; meeting the category itself means a cycle
    node = parent
    while node is not None:
        if node.id == category.id:
            raise HTTPException(status_code=400, detail="A category cannot be nested under itself or its subcategories")
        node = node.parent


@router.get("", response_model=List[CategoryOut])
def list_categories(
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    categories = (
        db.query(Category)
        .options(joinedload(Category.parent), selectinload(Category.children))
        .order_by(Category.sort_order.asc(), Category.name.asc())
        .all()
    )
    counts = _product_counts(db)
    return [_to_out(c, counts) for c in categories]


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return _to_out(_get_category(db, category_id), _product_counts(db))


@router.post("", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
def create_category(
    payload: CategoryCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    _check_slug(db, payload.slug)
    _check_parent(db, payload.parent_id)

    category = Category(**payload.model_dump())
    db.add(category)
    db.commit()
    db.refresh(category)

    write_log(
        db, user_id=current_user.id, action="CATEGORY_CREATE", resource="categories",
        status="SUCCESS", ip=client_ip(request), meta={"id": category.id, "slug": category.slug},
    )
    return _to_out(_get_category(db, category.id), _product_counts(db))


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    category = _get_category(db, category_id)
    data = payload.model_dump(exclude_unset=True)

    for required in ("name", "slug", "is_active", "sort_order"):
        if required in data and data[required] is None:
            raise HTTPException(status_code=400, detail=f"{required} cannot be null")

    if "slug" in data:
        _check_slug(db, data["slug"], exclude_id=category.id)
    if "parent_id" in data:
        _check_parent(db, data["parent_id"], category)

    for key, value in data.items():
        setattr(category, key, value)
    db.commit()

    write_log(
        db, user_id=current_user.id, action="CATEGORY_UPDATE", resource="categories",
        status="SUCCESS", ip=client_ip(request), meta={"id": category_id, "fields": sorted(data)},
    )
    return _to_out(_get_category(db, category_id), _product_counts(db))


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    category = _get_category(db, category_id)

    # Subcategories move up one level, products become uncategorised
    for child in list(category.children):
        child.parent = category.parent
    db.query(Product).filter(Product.category_id == category.id).update(
        {Product.category_id: None}, synchronize_session=False
    )

    name = category.name
    db.delete(category)
    db.commit()

    write_log(
        db, user_id=current_user.id, action="CATEGORY_DELETE", resource="categories",
        status="SUCCESS", ip=client_ip(request), meta={"id": category_id},
    )
    return {"message": f"Category '{name}' deleted successfully"}
