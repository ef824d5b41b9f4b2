import pytest

from storefront.models.product import ProductStatus


@pytest.fixture
def catalog(make_category, make_product):
    electronics = make_category("Electronics")
    audio = make_category("Audio", parent_id=electronics.id)
    fashion = make_category("Fashion")
    make_category("Archive", is_active=False)

    make_product("Premium Wireless Headphones", price="299.99", sku="WH-001", category_id=audio.id,
                 compare_price="399.99", featured=True)
    make_product("Smart Fitness Tracker", price="199.99", sku="FT-002", category_id=electronics.id)
    make_product("Organic Cotton T-Shirt", price="29.99", sku="TS-004", category_id=fashion.id,
                 compare_price="39.99")
    make_product("Prototype Speaker", price="99.00", category_id=electronics.id, status=ProductStatus.DRAFT)
    make_product("Retired Cable", price="9.99", category_id=electronics.id, status=ProductStatus.INACTIVE)
    return {"electronics": electronics, "audio": audio, "fashion": fashion}


def _names(resp):
    return [p["name"] for p in resp.json()["items"]]


def test_only_active_products_are_listed(client, catalog):
    resp = client.get("/shop/products")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total"] == 3
    assert "Prototype Speaker" not in _names(resp)
    assert "Retired Cable" not in _names(resp)
    assert "cost_price" not in body["items"][0]


def test_category_filter_includes_subcategories(client, catalog):
    resp = client.get("/shop/products", params={"category": "electronics", "sort": "name"})
    assert _names(resp) == ["Premium Wireless Headphones", "Smart Fitness Tracker"]


def test_unknown_category_is_404(client, catalog):
    assert client.get("/shop/products", params={"category": "nope"}).status_code == 404


def test_search_matches_name_and_sku(client, catalog):
    assert _names(client.get("/shop/products", params={"search": "cotton"})) == ["Organic Cotton T-Shirt"]
    assert _names(client.get("/shop/products", params={"search": "FT-002"})) == ["Smart Fitness Tracker"]


def test_price_range_and_sorting(client, catalog):
    resp = client.get("/shop/products", params={"min_price": "100", "sort": "price_asc"})
    assert _names(resp) == ["Smart Fitness Tracker", "Premium Wireless Headphones"]

    resp = client.get("/shop/products", params={"max_price": "200", "sort": "price_desc"})
    assert _names(resp) == ["Smart Fitness Tracker", "Organic Cotton T-Shirt"]


def test_featured_and_on_sale_filters(client, catalog):
    assert _names(client.get("/shop/products", params={"featured": "true"})) == ["Premium Wireless Headphones"]
    on_sale = client.get("/shop/products", params={"on_sale": "true", "sort": "name"})
    assert _names(on_sale) == ["Organic Cotton T-Shirt", "Premium Wireless Headphones"]


def test_pagination(client, catalog):
    resp = client.get("/shop/products", params={"page": 2, "page_size": 2, "sort": "name"})
    body = resp.json()
    assert body["total"] == 3
    assert body["total_pages"] == 2
    assert body["page_size"] == 2
    assert _names(resp) == ["Smart Fitness Tracker"]


def test_product_detail_by_slug(client, catalog):
    resp = client.get("/shop/products/premium-wireless-headphones")
    assert resp.status_code == 200
    body = resp.json()
    assert body["price"] == 299.99
    assert body["in_stock"] is True
    assert body["category"]["slug"] == "audio"


def test_draft_product_detail_is_hidden(client, catalog):
    assert client.get("/shop/products/prototype-speaker").status_code == 404


def test_categories_list_active_with_live_product_counts(client, catalog):
    resp = client.get("/shop/categories")
    assert resp.status_code == 200
    counts = {c["slug"]: c["product_count"] for c in resp.json()}
    assert "archive" not in counts
    assert counts == {"electronics": 1, "audio": 1, "fashion": 1}
