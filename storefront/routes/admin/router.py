# storefront/routes/admin/router.py
from fastapi import APIRouter

from storefront.routes.admin.categories import router as categories_router
from storefront.routes.admin.inventory import router as inventory_router
from storefront.routes.admin.logs import router as logs_router
from storefront.routes.admin.orders import router as orders_router
from storefront.routes.admin.organizations import router as organizations_router
from storefront.routes.admin.products import router as products_router
from storefront.routes.admin.stats import router as stats_router
from storefront.routes.admin.users import router as users_router

# Every back-office endpoint lives under /admin and requires the admin role
router = APIRouter(prefix="/admin")

router.include_router(organizations_router)
router.include_router(users_router)
router.include_router(products_router)
router.include_router(categories_router)
router.include_router(orders_router)
router.include_router(inventory_router)
router.include_router(stats_router)
router.include_router(logs_router)
