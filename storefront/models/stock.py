# storefront/models/stock.py
import enum
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Enum, func
from sqlalchemy.orm import relationship
from storefront.database import Base


class StockMovementType(str, enum.Enum):
    IN = "IN"
    OUT = "OUT"
    ADJUSTMENT = "ADJUSTMENT"


class StockMovement(Base):
    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(Enum(StockMovementType), nullable=False, index=True)

    # Signed change applied to the product's on-hand quantity
    quantity = Column(Integer, nullable=False)

    reason = Column(String, nullable=True)
    reference = Column(String, nullable=True)  # e.g. order number or purchase order
    notes = Column(String, nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)

    product = relationship("Product", back_populates="stock_movements")
    user = relationship("User")
