# storefront/schemas/order.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from storefront.config import settings
from storefront.models.order import OrderStatus, PaymentStatus
from storefront.schemas.product import ORMBase


class BillingAddress(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    address1: str = Field(min_length=1)
    address2: Optional[str] = None
    city: str = Field(min_length=1)
    state: Optional[str] = None
    zip: str = Field(min_length=1)
    country: str = Field(min_length=2)


class ShippingAddress(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address1: str = Field(min_length=1)
    address2: Optional[str] = None
    city: str = Field(min_length=1)
    state: Optional[str] = None
    zip: str = Field(min_length=1)
    country: str = Field(min_length=2)


# Input schema for turning the current cart into an order
class CheckoutPayload(BaseModel):
    customer_email: EmailStr
    customer_phone: Optional[str] = None
    billing: BillingAddress
    # Falls back to the billing address when omitted
    shipping: Optional[ShippingAddress] = None


class OrderProductOut(ORMBase):
    id: int
    name: str
    slug: str
    sku: Optional[str] = None
    images: List[str] = []


# Output schema for an individual order line item
class OrderItemOut(ORMBase):
    id: int
    product_id: int
    quantity: int
    price: float
    total: float
    product: Optional[OrderProductOut] = None


class OrderUserOut(ORMBase):
    id: int
    name: str
    email: str


# Output schema representing the full order details
class OrderOut(ORMBase):
    id: int
    order_number: str
    user_id: Optional[int] = None
    user: Optional[OrderUserOut] = None
    status: OrderStatus
    payment_status: PaymentStatus
    customer_email: str
    customer_phone: Optional[str] = None

    billing_name: str
    billing_email: str
    billing_phone: Optional[str] = None
    billing_address1: str
    billing_address2: Optional[str] = None
    billing_city: str
    billing_state: Optional[str] = None
    billing_zip: str
    billing_country: str

    shipping_name: str
    shipping_email: Optional[str] = None
    shipping_phone: Optional[str] = None
    shipping_address1: str
    shipping_address2: Optional[str] = None
    shipping_city: str
    shipping_state: Optional[str] = None
    shipping_zip: str
    shipping_country: str

    subtotal: float
    tax_amount: float
    shipping_amount: float
    discount_amount: float
    total_amount: float
    currency: str = Field(default_factory=lambda: settings.CURRENCY)

    tracking_number: Optional[str] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    items: List[OrderItemOut] = []


# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderOut]
    total: int
    page: int
    page_size: int
    total_pages: int


class AdminOrdersPage(BaseModel):
    items: List[OrderOut]
    total: int
    page: int
    limit: int
    total_pages: int


# Back-office order edit
class OrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None
    tracking_number: Optional[str] = None
