# storefront/database.py
import importlib

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.config import settings

MODEL_MODULES = (
    "users",
    "organization",
    "category",
    "product",
    "cart",
    "order",
    "stock",
    "log",
)


def normalize_url(url: str) -> str:
    # Heroku-style postgres:// is not a dialect name SQLAlchemy 2 accepts
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def engine_options(url: str) -> dict:
    if url.startswith("sqlite"):
        # FastAPI runs sync endpoints in a thread pool
        return {"connect_args": {"check_same_thread": False}}
    return {"pool_pre_ping": True}


SQLALCHEMY_DATABASE_URL = normalize_url(settings.DATABASE_URL)

engine = create_engine(SQLALCHEMY_DATABASE_URL, **engine_options(SQLALCHEMY_DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create every table known to the models; existing tables are left alone."""
    for name in MODEL_MODULES:
        importlib.import_module(f"storefront.models.{name}")

    Base.metadata.create_all(bind=bind or engine)
