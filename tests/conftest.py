from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.main import app
from storefront.database import Base, get_db, init_db
from storefront.models.category import Category
from storefront.models.product import Product, ProductStatus
from storefront.models.users import User
from storefront.utils.hashing import get_password_hash
from storefront.utils.tokenJWT import create_access_token

CHECKOUT_PAYLOAD = {
    "customer_email": "buyer@example.com",
    "billing": {
        "name": "Jane Buyer",
        "email": "buyer@example.com",
        "address1": "1 Main Street",
        "city": "Springfield",
        "zip": "12345",
        "country": "US",
    },
}


@pytest.fixture
def engine():
    # One shared in-memory connection for the app and the test session
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.email, "role": user.role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(db_session):
    def _make(email="customer@example.com", password="secret-pass", name="Test Customer",
              role="customer", banned=False):
        user = User(
            email=email,
            password_hash=get_password_hash(password),
            name=name,
            role=role,
            banned=banned,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make


@pytest.fixture
def customer(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", name="Store Admin", role="admin")


@pytest.fixture
def customer_headers(customer):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def make_category(db_session):
    def _make(name="Electronics", slug=None, parent_id=None, is_active=True, sort_order=0):
        category = Category(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            parent_id=parent_id,
            is_active=is_active,
            sort_order=sort_order,
        )
        db_session.add(category)
        db_session.commit()
        db_session.refresh(category)
        return category
    return _make


@pytest.fixture
def make_product(db_session):
    def _make(name="Wireless Headphones", slug=None, price="299.99", quantity=50,
              status=ProductStatus.ACTIVE, category_id=None, **extra):
        extra.setdefault("track_quantity", True)
        extra.setdefault("low_stock_alert", 10)
        extra.setdefault("featured", False)
        extra.setdefault("images", [])
        if extra.get("compare_price") is not None:
            extra["compare_price"] = Decimal(extra["compare_price"])
        if extra.get("cost_price") is not None:
            extra["cost_price"] = Decimal(extra["cost_price"])
        product = Product(
            name=name,
            slug=slug or name.lower().replace(" ", "-"),
            price=Decimal(price),
            quantity=quantity,
            status=status,
            category_id=category_id,
            **extra,
        )
        db_session.add(product)
        db_session.commit()
        db_session.refresh(product)
        return product
    return _make


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def place_guest_order(client):
    """Add the given (product, quantity) lines to a fresh guest cart and check out."""
    counter = {"n": 0}

    def _place(*lines, payload=None):
        counter["n"] += 1
        headers = {"x-session-id": f"guest-order-{counter['n']}"}
        for product, quantity in lines:
            resp = client.post("/cart/add", json={"product_id": product.id, "quantity": quantity}, headers=headers)
            assert resp.status_code == 201, resp.text
        resp = client.post("/checkout", json=payload or CHECKOUT_PAYLOAD, headers=headers)
        assert resp.status_code == 201, resp.text
        return resp.json()
    return _place


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def checkout_payload():
    return {**CHECKOUT_PAYLOAD, "billing": dict(CHECKOUT_PAYLOAD["billing"])}
