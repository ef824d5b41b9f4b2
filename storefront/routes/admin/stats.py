# storefront/routes/admin/stats.py
from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from storefront.config import settings
from storefront.database import get_db
from storefront.models.order import Order, OrderStatus
from storefront.models.product import Product
from storefront.models.users import User
from storefront.utils.pricing import money
from storefront.utils.tokenJWT import admin_required

router = APIRouter(prefix="/stats", tags=["Admin: Stats"])

# Orders in these states never turned into revenue
NON_REVENUE_STATUSES = (OrderStatus.CANCELLED, OrderStatus.REFUNDED)


class DashboardStats(BaseModel):
    total_revenue: float
    currency: str
    total_orders: int
    orders_by_status: Dict[str, int]
    total_products: int
    low_stock_products: int
    out_of_stock_products: int
    total_customers: int


@router.get("", response_model=DashboardStats)
def dashboard_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required),
):
    revenue = (
        db.query(func.coalesce(func.sum(Order.total_amount), 0))
        .filter(Order.status.notin_(NON_REVENUE_STATUSES))
        .scalar()
    )

    by_status = {s.value: 0 for s in OrderStatus}
    for st, count in db.query(Order.status, func.count(Order.id)).group_by(Order.status).all():
        by_status[st.value] = count

    tracked = db.query(Product).filter(Product.track_quantity.is_(True))
    low_stock = tracked.filter(Product.quantity > 0, Product.quantity <= Product.low_stock_alert).count()
    out_of_stock = tracked.filter(Product.quantity <= 0).count()

    return DashboardStats(
        total_revenue=money(revenue),
        currency=settings.CURRENCY,
        total_orders=sum(by_status.values()),
        orders_by_status=by_status,
        total_products=db.query(Product).count(),
        low_stock_products=low_stock,
        out_of_stock_products=out_of_stock,
        total_customers=db.query(User).filter(func.lower(User.role) == "customer").count(),
    )
