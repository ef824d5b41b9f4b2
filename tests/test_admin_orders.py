from storefront.models.stock import StockMovement, StockMovementType


def test_list_and_filter_orders(client, admin_headers, make_product, place_guest_order, checkout_payload):
    mug = make_product("Coffee Mug", price="12.00")
    first = place_guest_order((mug, 1))
    checkout_payload["customer_email"] = "other@example.com"
    checkout_payload["billing"]["name"] = "Other Person"
    second = place_guest_order((mug, 2), payload=checkout_payload)

    client.put(f"/admin/orders/{first['id']}", json={"status": "PROCESSING"}, headers=admin_headers)

    body = client.get("/admin/orders", headers=admin_headers).json()
    assert body["total"] == 2

    processing = client.get("/admin/orders", params={"status": "PROCESSING"}, headers=admin_headers).json()
    assert [o["id"] for o in processing["items"]] == [first["id"]]

    found = client.get("/admin/orders", params={"search": "other person"}, headers=admin_headers).json()
    assert [o["id"] for o in found["items"]] == [second["id"]]

    found = client.get("/admin/orders", params={"search": second["order_number"]}, headers=admin_headers).json()
    assert found["total"] == 1


def test_recent_orders(client, admin_headers, product, place_guest_order):
    placed = place_guest_order((product, 1))
    resp = client.get("/admin/orders/recent", headers=admin_headers)
    assert resp.status_code == 200
    assert [o["id"] for o in resp.json()] == [placed["id"]]


def test_get_order_detail(client, admin_headers, product, place_guest_order):
    placed = place_guest_order((product, 2))
    body = client.get(f"/admin/orders/{placed['id']}", headers=admin_headers).json()
    assert body["order_number"] == placed["order_number"]
    assert body["items"][0]["quantity"] == 2
    assert client.get("/admin/orders/9999", headers=admin_headers).status_code == 404


def test_ship_and_deliver_stamp_timestamps(client, admin_headers, product, place_guest_order):
    placed = place_guest_order((product, 1))

    shipped = client.put(f"/admin/orders/{placed['id']}",
                         json={"status": "SHIPPED", "tracking_number": "1Z999AA10123456784"},
                         headers=admin_headers).json()
    assert shipped["status"] == "SHIPPED"
    assert shipped["tracking_number"] == "1Z999AA10123456784"
    assert shipped["shipped_at"] is not None
    assert shipped["delivered_at"] is None

    delivered = client.put(f"/admin/orders/{placed['id']}", json={"status": "DELIVERED"},
                           headers=admin_headers).json()
    assert delivered["delivered_at"] is not None


def test_payment_status_update(client, admin_headers, product, place_guest_order):
    placed = place_guest_order((product, 1))
    body = client.put(f"/admin/orders/{placed['id']}", json={"payment_status": "PAID"},
                      headers=admin_headers).json()
    assert body["payment_status"] == "PAID"
    assert body["status"] == "PENDING"


def test_cancelling_pending_order_restocks(client, db_session, admin_headers, make_product, place_guest_order):
    lamp = make_product("Desk Lamp", quantity=10)
    placed = place_guest_order((lamp, 3))
    db_session.expire_all()
    assert lamp.quantity == 7

    resp = client.put(f"/admin/orders/{placed['id']}", json={"status": "CANCELLED"}, headers=admin_headers)
    assert resp.status_code == 200

    db_session.expire_all()
    assert lamp.quantity == 10
    restock = (
        db_session.query(StockMovement)
        .filter(StockMovement.product_id == lamp.id, StockMovement.type == StockMovementType.IN)
        .one()
    )
    assert restock.quantity == 3
    assert restock.reference == placed["order_number"]


def test_cancelling_shipped_order_keeps_stock(client, db_session, admin_headers, make_product, place_guest_order):
    lamp = make_product("Desk Lamp", quantity=10)
    placed = place_guest_order((lamp, 3))
    client.put(f"/admin/orders/{placed['id']}", json={"status": "SHIPPED"}, headers=admin_headers)
    client.put(f"/admin/orders/{placed['id']}", json={"status": "CANCELLED"}, headers=admin_headers)

    db_session.expire_all()
    assert lamp.quantity == 7


def test_terminal_status_cannot_change(client, admin_headers, product, place_guest_order):
    placed = place_guest_order((product, 1))
    client.put(f"/admin/orders/{placed['id']}", json={"status": "CANCELLED"}, headers=admin_headers)

    resp = client.put(f"/admin/orders/{placed['id']}", json={"status": "PROCESSING"}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cannot change status from CANCELLED"


def test_invalid_status_value(client, admin_headers, product, place_guest_order):
    placed = place_guest_order((product, 1))
    resp = client.put(f"/admin/orders/{placed['id']}", json={"status": "LOST"}, headers=admin_headers)
    assert resp.status_code == 422
