# storefront/routes/admin/organizations.py
import math
import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from storefront.database import get_db
from storefront.models.organization import Organization, Member
from storefront.models.users import User
from storefront.schemas.organization import (
    OrganizationCreate, OrganizationUpdate, OrganizationOut, OrganizationDetail,
    OrganizationsPage, MemberCreate, MemberOut,
)
from storefront.utils.audit import write_log, client_ip
from storefront.utils.tokenJWT import admin_required

router = APIRouter(prefix="/organizations", tags=["Admin: Organizations"])


def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.strip().lower()).strip("-")
    return slug or "organization"


def _get_org(db: Session, org_id: int) -> Organization:
    org = (
        db.query(Organization)
        .options(selectinload(Organization.members).selectinload(Member.user))
        .filter(Organization.id == org_id)
        .first()
    )
    if not org:
        raise HTTPException(status_code=404, detail="Organization not found")
    return org


def _check_slug(db: Session, slug: str, exclude_id: Optional[int] = None):
    q = db.query(Organization).filter(Organization.slug == slug)
    if exclude_id is not None:
        q = q.filter(Organization.id != exclude_id)
    if q.first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Organization slug already exists")


def _detail(org: Organization) -> OrganizationDetail:
    members = [
        MemberOut(
            id=m.id, user_id=m.user_id, email=m.user.email, name=m.user.name,
            role=m.role, created_at=m.created_at,
        )
        for m in org.members
    ]
    return OrganizationDetail(
        id=org.id, name=org.name, slug=org.slug, logo=org.logo, created_at=org.created_at,
        member_count=len(members), members=members,
    )


@router.get("", response_model=OrganizationsPage)
def list_organizations(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    query = db.query(Organization)
    if search:
        like = f"%{search}%"
        query = query.filter(or_(Organization.name.ilike(like), Organization.slug.ilike(like)))

    total = query.count()
    orgs = query.order_by(Organization.name.asc()).offset((page - 1) * limit).limit(limit).all()

    counts = dict(
        db.query(Member.organization_id, func.count(Member.id))
        .filter(Member.organization_id.in_([o.id for o in orgs]))
        .group_by(Member.organization_id)
        .all()
    ) if orgs else {}

    items = [
        OrganizationOut(
            id=o.id, name=o.name, slug=o.slug, logo=o.logo, created_at=o.created_at,
            member_count=counts.get(o.id, 0),
        )
        for o in orgs
    ]
    return {
        "items": items,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": math.ceil(total / limit) if total else 0,
    }


@router.get("/{org_id}", response_model=OrganizationDetail)
def get_organization(
    org_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    return _detail(_get_org(db, org_id))


@router.post("", response_model=OrganizationDetail, status_code=status.HTTP_201_CREATED)
def create_organization(
    payload: OrganizationCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    slug = slugify(payload.slug or payload.name)
    _check_slug(db, slug)

    org = Organization(name=payload.name.strip(), slug=slug, logo=payload.logo)
    db.add(org)
    db.commit()
    db.refresh(org)

    write_log(
        db, user_id=current_user.id, action="ORGANIZATION_CREATE", resource="organizations",
        status="SUCCESS", ip=client_ip(request), meta={"id": org.id, "slug": org.slug},
    )
    return _detail(_get_org(db, org.id))


@router.put("/{org_id}", response_model=OrganizationDetail)
def update_organization(
    org_id: int,
    payload: OrganizationUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    org = _get_org(db, org_id)
    data = payload.model_dump(exclude_unset=True)

    if data.get("slug"):
        data["slug"] = slugify(data["slug"])
        _check_slug(db, data["slug"], exclude_id=org.id)
    elif "slug" in data:
        del data["slug"]
    if "name" in data and data["name"] is None:
        del data["name"]

    for key, value in data.items():
        setattr(org, key, value)
    db.commit()

    write_log(
        db, user_id=current_user.id, action="ORGANIZATION_UPDATE", resource="organizations",
        status="SUCCESS", ip=client_ip(request), meta={"id": org_id, "fields": sorted(data)},
    )
    return _detail(_get_org(db, org_id))


@router.delete("/{org_id}")
def delete_organization(
    org_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    org = _get_org(db, org_id)
    name = org.name
    db.delete(org)
    db.commit()

    write_log(
        db, user_id=current_user.id, action="ORGANIZATION_DELETE", resource="organizations",
        status="SUCCESS", ip=client_ip(request), meta={"id": org_id},
    )
    return {"message": f"Organization '{name}' deleted successfully"}


@router.post("/{org_id}/members", response_model=OrganizationDetail, status_code=status.HTTP_201_CREATED)
def add_member(
    org_id: int,
    payload: MemberCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    org = _get_org(db, org_id)
    if not db.query(User).filter(User.id == payload.user_id).first():
        raise HTTPException(status_code=404, detail="User not found")
    if any(m.user_id == payload.user_id for m in org.members):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User is already a member")

    db.add(Member(organization_id=org.id, user_id=payload.user_id, role=payload.role))
    db.commit()

    write_log(
        db, user_id=current_user.id, action="MEMBER_ADD", resource="organizations",
        status="SUCCESS", ip=client_ip(request), meta={"org_id": org_id, "user_id": payload.user_id},
    )
    return _detail(_get_org(db, org_id))


@router.delete("/{org_id}/members/{user_id}", response_model=OrganizationDetail)
def remove_member(
    org_id: int,
    user_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    _get_org(db, org_id)
    member = db.query(Member).filter(Member.organization_id == org_id, Member.user_id == user_id).first()
    if not member:
        raise HTTPException(status_code=404, detail="Member not found")

    db.delete(member)
    db.commit()

    write_log(
        db, user_id=current_user.id, action="MEMBER_REMOVE", resource="organizations",
        status="SUCCESS", ip=client_ip(request), meta={"org_id": org_id, "user_id": user_id},
    )
    return _detail(_get_org(db, org_id))
