import re
from decimal import Decimal

import pytest

from storefront.config import settings
from storefront.models.cart import CartItem
from storefront.models.stock import StockMovement, StockMovementType

GUEST = {"x-session-id": "checkout-guest"}


def _add(client, product, quantity, headers=GUEST):
    resp = client.post("/cart/add", json={"product_id": product.id, "quantity": quantity}, headers=headers)
    assert resp.status_code == 201, resp.text


def test_checkout_with_empty_cart(client, checkout_payload):
    resp = client.post("/checkout", json=checkout_payload, headers=GUEST)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cart is empty"


def test_checkout_requires_user_or_session(client, checkout_payload):
    assert client.post("/checkout", json=checkout_payload).status_code == 400


def test_guest_checkout_places_pending_order(client, db_session, make_product, checkout_payload):
    chair = make_product("Office Chair", price="459.99", quantity=15)
    mat = make_product("Yoga Mat", price="79.99", quantity=45)
    _add(client, chair, 1)
    _add(client, mat, 2)

    resp = client.post("/checkout", json=checkout_payload, headers=GUEST)
    assert resp.status_code == 201
    order = resp.json()

    assert re.fullmatch(r"ORD-\d{8}-[0-9A-F]{6}", order["order_number"])
    assert order["status"] == "PENDING"
    assert order["payment_status"] == "PENDING"
    assert order["user_id"] is None
    assert order["subtotal"] == pytest.approx(619.97)
    assert order["total_amount"] == pytest.approx(619.97)
    assert [(i["product_id"], i["quantity"]) for i in order["items"]] == [(chair.id, 1), (mat.id, 2)]

    # Shipping falls back to billing
    assert order["shipping_name"] == "Jane Buyer"
    assert order["shipping_city"] == "Springfield"

    db_session.expire_all()
    assert chair.quantity == 14
    assert mat.quantity == 43
    movements = db_session.query(StockMovement).filter(StockMovement.reference == order["order_number"]).all()
    assert sorted(m.quantity for m in movements) == [-2, -1]
    assert {m.type for m in movements} == {StockMovementType.OUT}

    cart = client.get("/cart/session/checkout-guest").json()
    assert cart["items"] == []


def test_separate_shipping_address(client, product, checkout_payload):
    _add(client, product, 1)
    checkout_payload["shipping"] = {
        "name": "Gift Recipient",
        "address1": "9 Elm Road",
        "city": "Shelbyville",
        "zip": "54321",
        "country": "US",
    }
    order = client.post("/checkout", json=checkout_payload, headers=GUEST).json()
    assert order["shipping_name"] == "Gift Recipient"
    assert order["billing_name"] == "Jane Buyer"


def test_checkout_rechecks_stock_and_changes_nothing_on_failure(client, db_session, make_product, checkout_payload):
    lamp = make_product("Desk Lamp", quantity=5)
    mug = make_product("Coffee Mug", quantity=5)
    _add(client, mug, 1)
    _add(client, lamp, 3)

    # Stock sold elsewhere after the line was added
    lamp.quantity = 1
    db_session.commit()

    resp = client.post("/checkout", json=checkout_payload, headers=GUEST)
    assert resp.status_code == 400
    assert "Only 1 items available in stock" in resp.json()["detail"]

    db_session.expire_all()
    assert mug.quantity == 5
    assert lamp.quantity == 1
    assert db_session.query(CartItem).count() == 2
    assert db_session.query(StockMovement).count() == 0


def test_checkout_rejects_invalid_email(client, product, checkout_payload):
    _add(client, product, 1)
    checkout_payload["customer_email"] = "not-an-email"
    assert client.post("/checkout", json=checkout_payload, headers=GUEST).status_code == 422


def test_tax_and_shipping_rules(client, monkeypatch, make_product, checkout_payload):
    monkeypatch.setattr(settings, "TAX_RATE", Decimal("10"))
    monkeypatch.setattr(settings, "SHIPPING_FLAT_RATE", Decimal("5"))
    monkeypatch.setattr(settings, "FREE_SHIPPING_THRESHOLD", Decimal("100"))

    shirt = make_product("T-Shirt", price="29.99")
    _add(client, shirt, 2)
    order = client.post("/checkout", json=checkout_payload, headers=GUEST).json()
    assert order["subtotal"] == pytest.approx(59.98)
    assert order["tax_amount"] == pytest.approx(6.00)
    assert order["shipping_amount"] == pytest.approx(5.00)
    assert order["total_amount"] == pytest.approx(70.98)

    boots = make_product("Boots", price="40.00")
    _add(client, boots, 3)
    order = client.post("/checkout", json=checkout_payload, headers=GUEST).json()
    assert order["shipping_amount"] == 0
    assert order["total_amount"] == pytest.approx(132.00)


def test_user_orders_list_and_detail(client, customer, customer_headers, product, checkout_payload):
    _add(client, product, 1, headers=customer_headers)
    placed = client.post("/checkout", json=checkout_payload, headers=customer_headers).json()
    assert placed["user_id"] == customer.id

    listing = client.get("/orders", headers=customer_headers).json()
    assert listing["total"] == 1
    assert listing["items"][0]["order_number"] == placed["order_number"]

    detail = client.get(f"/orders/{placed['id']}", headers=customer_headers)
    assert detail.status_code == 200
    assert detail.json()["items"][0]["product"]["name"] == product.name


def test_orders_of_other_users_are_hidden(client, make_user, headers_for, customer_headers, admin_headers,
                                          product, checkout_payload):
    _add(client, product, 1, headers=customer_headers)
    placed = client.post("/checkout", json=checkout_payload, headers=customer_headers).json()

    stranger = make_user(email="stranger@example.com")
    assert client.get(f"/orders/{placed['id']}", headers=headers_for(stranger)).status_code == 404
    assert client.get("/orders", headers=headers_for(stranger)).json()["total"] == 0

    assert client.get(f"/orders/{placed['id']}", headers=admin_headers).status_code == 200


def test_orders_require_auth(client):
    assert client.get("/orders").status_code == 401


def test_order_reports_store_currency(client, product, checkout_payload):
    _add(client, product, 1)
    order = client.post("/checkout", json=checkout_payload, headers=GUEST).json()
    assert order["currency"] == "USD"
