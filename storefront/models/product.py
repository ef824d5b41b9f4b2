# storefront/models/product.py
import enum
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, Numeric, ForeignKey, DateTime, JSON, Enum,
    CheckConstraint, func,
)
from sqlalchemy.orm import relationship
from storefront.database import Base


class ProductStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    OUT_OF_STOCK = "OUT_OF_STOCK"


# Model Product
# A single sellable catalog entry: pricing, stock tracking and storefront metadata.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    slug = Column(String, unique=True, nullable=False, index=True)
    description = Column(Text, nullable=True)
    short_description = Column(String, nullable=True)

    # Prices, guarded by check constraints
    price = Column(Numeric(10, 2), CheckConstraint("price >= 0"), nullable=False)
    compare_price = Column(Numeric(10, 2), nullable=True)  # "was" price shown on deals
    cost_price = Column(Numeric(10, 2), nullable=True)

    sku = Column(String, unique=True, nullable=True, index=True)
    barcode = Column(String, nullable=True)

    # Stock data; quantity is only enforced when track_quantity is set
    track_quantity = Column(Boolean, nullable=False, default=True)
    quantity = Column(Integer, CheckConstraint("quantity >= 0"), nullable=False, default=0)
    low_stock_alert = Column(Integer, nullable=False, default=10)

    weight = Column(Numeric(10, 2), nullable=True)
    dimensions = Column(String, nullable=True)

    status = Column(Enum(ProductStatus), nullable=False, default=ProductStatus.DRAFT, index=True)
    featured = Column(Boolean, nullable=False, default=False)
    images = Column(JSON, nullable=False, default=list)

    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)

    seo_title = Column(String, nullable=True)
    seo_description = Column(String, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    category = relationship("Category", back_populates="products")
    cart_items = relationship("CartItem", back_populates="product", cascade="all, delete-orphan")
    stock_movements = relationship("StockMovement", back_populates="product", cascade="all, delete-orphan")

    @property
    def in_stock(self) -> bool:
        return not self.track_quantity or self.quantity > 0
