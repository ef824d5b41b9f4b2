# storefront/models/users.py
from sqlalchemy import Column, Integer, String, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from storefront.database import Base


# Represents a user account with authentication details and system role
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="customer")

    # Banned accounts keep their data but can no longer sign in
    banned = Column(Boolean, nullable=False, default=False)
    ban_reason = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    memberships = relationship("Member", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return (self.role or "").lower() == "admin"
