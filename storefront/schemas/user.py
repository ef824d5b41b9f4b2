# storefront/schemas/user.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from storefront.utils.hashing import MAX_PASSWORD_BYTES, password_too_long


# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr


# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str


# Schema for user registration requests
class UserCreate(UserBase):
    password: str = Field(min_length=8)
    name: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, v: str) -> str:
        if password_too_long(v):
            raise ValueError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    name: str
    role: str
    banned: bool = False
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


# Schema for administrative role updates
class RoleUpdate(BaseModel):
    role: str = Field(pattern="^(customer|admin)$")


class BanUpdate(BaseModel):
    banned: bool
    reason: Optional[str] = None


class UsersPage(BaseModel):
    items: List[UserResponse]
    total: int
    page: int
    limit: int
    total_pages: int
