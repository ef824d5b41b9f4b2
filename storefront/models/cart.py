# storefront/models/cart.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Numeric, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import relationship
from storefront.database import Base


# Shopping cart owned either by a signed-in user or by a guest session id
class Cart(Base):
    __tablename__ = "carts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=True, index=True)
    session_id = Column(String, unique=True, nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    items = relationship("CartItem", back_populates="cart", cascade="all, delete-orphan", order_by="CartItem.id")


# A single product line within a cart
class CartItem(Base):
    __tablename__ = "cart_items"

    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(Integer, ForeignKey("carts.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    quantity = Column(Integer, CheckConstraint("quantity > 0"), nullable=False, default=1)
    price = Column(Numeric(10, 2), nullable=False)  # Unit price at the moment of addition
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    cart = relationship("Cart", back_populates="items")
    product = relationship("Product", back_populates="cart_items")

    __table_args__ = (
        # One line per product; repeated adds merge into it
        UniqueConstraint("cart_id", "product_id", name="uq_cartitem_cart_product"),
    )
