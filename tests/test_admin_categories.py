def test_create_and_list_with_product_counts(client, admin_headers, make_product):
    resp = client.post("/admin/categories", json={"name": "Electronics", "slug": "electronics"},
                       headers=admin_headers)
    assert resp.status_code == 201
    category = resp.json()
    assert category["is_active"] is True
    assert category["children"] == []

    make_product("Headphones", category_id=category["id"])
    listing = client.get("/admin/categories", headers=admin_headers).json()
    assert [(c["slug"], c["product_count"]) for c in listing] == [("electronics", 1)]


def test_duplicate_slug_conflicts(client, admin_headers, make_category):
    make_category("Fashion")
    resp = client.post("/admin/categories", json={"name": "Fashion 2", "slug": "fashion"}, headers=admin_headers)
    assert resp.status_code == 409


def test_unknown_parent_is_rejected(client, admin_headers):
    resp = client.post("/admin/categories", json={"name": "Audio", "slug": "audio", "parent_id": 77},
                       headers=admin_headers)
    assert resp.status_code == 400


def test_child_appears_under_parent(client, admin_headers, make_category):
    parent = make_category("Electronics")
    client.post("/admin/categories", json={"name": "Audio", "slug": "audio", "parent_id": parent.id},
                headers=admin_headers)

    body = client.get(f"/admin/categories/{parent.id}", headers=admin_headers).json()
    assert [c["slug"] for c in body["children"]] == ["audio"]


def test_cycles_are_rejected(client, admin_headers, make_category):
    root = make_category("Electronics")
    child = make_category("Audio", parent_id=root.id)

    resp = client.put(f"/admin/categories/{root.id}", json={"parent_id": child.id}, headers=admin_headers)
    assert resp.status_code == 400

    resp = client.put(f"/admin/categories/{root.id}", json={"parent_id": root.id}, headers=admin_headers)
    assert resp.status_code == 400


def test_update_fields(client, admin_headers, make_category):
    category = make_category("Sports")
    resp = client.put(f"/admin/categories/{category.id}",
                      json={"name": "Sports & Fitness", "slug": "sports-fitness", "is_active": False},
                      headers=admin_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["name"] == "Sports & Fitness"
    assert body["slug"] == "sports-fitness"
    assert body["is_active"] is False


def test_delete_moves_children_up_and_uncategorises_products(client, db_session, admin_headers,
                                                             make_category, make_product):
    root = make_category("Electronics")
    middle = make_category("Audio", parent_id=root.id)
    leaf = make_category("Headphones", parent_id=middle.id)
    product = make_product("Studio Headphones", category_id=middle.id)

    resp = client.delete(f"/admin/categories/{middle.id}", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["message"] == "Category 'Audio' deleted successfully"

    assert client.get(f"/admin/categories/{leaf.id}", headers=admin_headers).json()["parent_id"] == root.id
    db_session.expire_all()
    assert product.category_id is None


def test_unknown_category(client, admin_headers):
    assert client.get("/admin/categories/5", headers=admin_headers).status_code == 404
    assert client.delete("/admin/categories/5", headers=admin_headers).status_code == 404
