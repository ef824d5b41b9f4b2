# storefront/main.py
import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

load_dotenv()

from storefront.config import settings  # noqa: E402
from storefront.database import init_db  # noqa: E402

# Router imports
from storefront.routes.auth import router as auth_router  # noqa: E402
from storefront.routes.shop import router as shop_router  # noqa: E402
from storefront.routes.cart import router as cart_router  # noqa: E402
from storefront.routes.orders import router as orders_router  # noqa: E402
from storefront.routes.admin.router import router as admin_router  # noqa: E402

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    logger.info("Storefront API started")
    yield


app = FastAPI(title="Storefront API", version="1.0.0", lifespan=lifespan)

# CORS: local Vite/Next dev servers plus the configured frontend
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ORM failures surface as a generic 500; details go to the log only
@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


# Router registration
app.include_router(auth_router)
app.include_router(shop_router)
app.include_router(cart_router)
app.include_router(orders_router)
app.include_router(admin_router)


@app.get("/")
def read_root():
    return {"message": "Storefront API is running"}
