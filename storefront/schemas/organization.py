# storefront/schemas/organization.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from storefront.schemas.product import ORMBase


class OrganizationCreate(BaseModel):
    name: str = Field(min_length=1)
    slug: Optional[str] = None
    logo: Optional[str] = None


class OrganizationUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    slug: Optional[str] = Field(default=None, min_length=1)
    logo: Optional[str] = None


class MemberCreate(BaseModel):
    user_id: int
    role: str = Field(default="member", pattern="^(owner|admin|member)$")


class MemberOut(BaseModel):
    id: int
    user_id: int
    email: str
    name: str
    role: str
    created_at: Optional[datetime] = None


class OrganizationOut(ORMBase):
    id: int
    name: str
    slug: str
    logo: Optional[str] = None
    created_at: Optional[datetime] = None
    member_count: int = 0


class OrganizationDetail(OrganizationOut):
    members: List[MemberOut] = []


class OrganizationsPage(BaseModel):
    items: List[OrganizationOut]
    total: int
    page: int
    limit: int
    total_pages: int
