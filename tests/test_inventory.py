import pytest

from storefront.models.product import ProductStatus


@pytest.fixture
def stocked(make_product):
    return {
        "empty": make_product("Empty Shelf", quantity=0, cost_price="5.00", sku="EM-1"),
        "low": make_product("Low Lamp", quantity=4, cost_price="10.00", sku="LL-1"),
        "plenty": make_product("Plenty Mug", quantity=50, cost_price="2.50", sku="PM-1"),
    }


def _adjust(client, headers, product_id, type_, quantity, **extra):
    return client.post("/admin/inventory/adjust",
                       json={"product_id": product_id, "type": type_, "quantity": quantity, **extra},
                       headers=headers)


def test_inventory_summary_and_items(client, admin_headers, stocked):
    body = client.get("/admin/inventory", headers=admin_headers).json()
    assert body["summary"] == {
        "total_products": 3,
        "low_stock": 1,
        "out_of_stock": 1,
        "total_value": 165.0,
    }
    states = {i["name"]: i["stock_status"] for i in body["items"]}
    assert states == {"Empty Shelf": "out_of_stock", "Low Lamp": "low_stock", "Plenty Mug": "in_stock"}


def test_inventory_stock_status_filter(client, admin_headers, stocked):
    body = client.get("/admin/inventory", params={"stock_status": "low_stock"}, headers=admin_headers).json()
    assert [i["name"] for i in body["items"]] == ["Low Lamp"]
    assert body["total"] == 1
    assert body["summary"]["total_products"] == 3


def test_inventory_search(client, admin_headers, stocked):
    body = client.get("/admin/inventory", params={"search": "pm-1"}, headers=admin_headers).json()
    assert [i["name"] for i in body["items"]] == ["Plenty Mug"]


def test_adjust_in_out_and_signed_adjustment(client, admin_headers, stocked):
    pid = stocked["plenty"].id

    resp = _adjust(client, admin_headers, pid, "IN", 10, reason="Supplier delivery", reference="PO-1001")
    assert resp.status_code == 200
    body = resp.json()
    assert body["quantity"] == 10
    assert body["stock_after"] == 60
    assert body["reference"] == "PO-1001"

    body = _adjust(client, admin_headers, pid, "OUT", 15, reason="Damaged").json()
    assert body["quantity"] == -15
    assert body["stock_after"] == 45

    body = _adjust(client, admin_headers, pid, "ADJUSTMENT", -5, reason="Stocktake").json()
    assert body["quantity"] == -5
    assert body["stock_after"] == 40


def test_out_is_always_a_decrease(client, admin_headers, stocked):
    body = _adjust(client, admin_headers, stocked["plenty"].id, "OUT", -3).json()
    assert body["quantity"] == -3
    assert body["stock_after"] == 47


def test_stock_cannot_go_negative(client, admin_headers, stocked):
    resp = _adjust(client, admin_headers, stocked["low"].id, "OUT", 5)
    assert resp.status_code == 400


def test_zero_quantity_is_invalid(client, admin_headers, stocked):
    assert _adjust(client, admin_headers, stocked["low"].id, "IN", 0).status_code == 422


def test_unknown_product(client, admin_headers):
    assert _adjust(client, admin_headers, 999, "IN", 1).status_code == 404


def test_selling_out_and_restocking_flip_status(client, db_session, admin_headers, stocked):
    low = stocked["low"]
    _adjust(client, admin_headers, low.id, "OUT", 4)
    db_session.expire_all()
    assert low.status == ProductStatus.OUT_OF_STOCK

    _adjust(client, admin_headers, low.id, "IN", 6)
    db_session.expire_all()
    assert low.status == ProductStatus.ACTIVE
    assert low.quantity == 6


def test_movement_history(client, admin_headers, stocked):
    _adjust(client, admin_headers, stocked["low"].id, "IN", 1)
    _adjust(client, admin_headers, stocked["plenty"].id, "OUT", 2)
    _adjust(client, admin_headers, stocked["plenty"].id, "IN", 3)

    body = client.get("/admin/inventory/movements", headers=admin_headers).json()
    assert body["total"] == 3

    body = client.get("/admin/inventory/movements", params={"product_id": stocked["plenty"].id},
                      headers=admin_headers).json()
    assert [m["quantity"] for m in body["items"]] == [3, -2]
    assert body["items"][0]["product_name"] == "Plenty Mug"

    body = client.get("/admin/inventory/movements", params={"type": "OUT"}, headers=admin_headers).json()
    assert body["total"] == 1


def test_untracked_products_count_as_in_stock(client, admin_headers, make_product):
    make_product("Gift Card", quantity=0, track_quantity=False)

    inventory = client.get("/admin/inventory", headers=admin_headers).json()
    assert inventory["summary"]["out_of_stock"] == 0
    assert inventory["items"][0]["stock_status"] == "in_stock"

    stats = client.get("/admin/stats", headers=admin_headers).json()
    assert stats["out_of_stock_products"] == 0
