"""Tests for variant create, update, bulk update and delete."""

import pytest
from catalog.models.option import ProductOption
from catalog.models.variant import ProductVariant, VariantOptionValue


def _data(resp):
    return resp.get_json()["data"]


def _assert_invariants(db, product_id):
    """Option completeness, combination uniqueness and single default."""
    db.session.expire_all()
    option_ids = {o.id for o in ProductOption.query.filter_by(product_id=product_id)}
    variants = ProductVariant.live().filter_by(product_id=product_id).all()
    combos = []
    for variant in variants:
        bindings = VariantOptionValue.live().filter_by(variant_id=variant.id).all()
        assert {b.option_id for b in bindings} == option_ids
        assert len(bindings) == len(option_ids)
        combos.append(frozenset(b.option_value_id for b in bindings))
    assert len(combos) == len(set(combos))
    assert sum(1 for v in variants if v.is_default) <= 1


# --- Create ---


def test_create_and_find_variant(client, db, product_id, create_variant, guest_headers):
    resp = create_variant(product_id, "M", "Black", sku="X", price=29.99)
    assert resp.status_code == 201
    created = _data(resp)
    assert created["sku"] == "X"
    assert created["price"] == 29.99
    assert created["productId"] == product_id
    assert created["product"]["name"] == "Test Tee"
    assert [o["optionName"] for o in created["selectedOptions"]] == ["Size", "Color"]
    assert created["selectedOptions"][1]["colorCode"] == "#000000"
    assert created["createdAt"].endswith("Z")

    found = client.get(
        f"/api/products/{product_id}/variants/find?Size=M&Color=Black",
        headers=guest_headers,
    )
    assert found.status_code == 200
    assert _data(found)["id"] == created["id"]
    assert len(_data(found)["selectedOptions"]) == 2
    _assert_invariants(db, product_id)


def test_create_defaults(client, product_id, create_variant):
    data = _data(create_variant(product_id, "S", "White"))
    assert data["stock"] == 0
    assert data["images"] == []
    assert data["allowPurchase"] is True
    assert data["isPopular"] is False
    assert data["isDefault"] is False
    assert data["inStock"] is False


def test_duplicate_combination_conflicts(product_id, create_variant):
    assert create_variant(product_id, "M", "Black", sku="X").status_code == 201

    resp = create_variant(product_id, "M", "Black", sku="X")
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "VARIANT_OPTION_COMBINATION_EXISTS"


def test_new_default_clears_previous(client, db, product_id, create_variant, guest_headers):
    a = _data(create_variant(product_id, "M", "Black", sku="A", price=10, isDefault=True))
    b = _data(create_variant(product_id, "L", "Black", sku="B", price=10, isDefault=True))
    assert b["isDefault"] is True

    resp = client.get(f"/api/products/{product_id}/variants/{a['id']}", headers=guest_headers)
    assert _data(resp)["isDefault"] is False
    _assert_invariants(db, product_id)


@pytest.mark.parametrize("price", [0, -1, 0.001, 0.004, "10", True])
def test_rejects_bad_price(product_id, create_variant, price):
    resp = create_variant(product_id, price=price)
    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["field"] == "price"


def test_rejects_missing_price(client, product_id, seller_headers):
    resp = client.post(
        f"/api/products/{product_id}/variants",
        json={"options": [{"optionName": "Size", "value": "M"}, {"optionName": "Color", "value": "Black"}]},
        headers=seller_headers,
    )
    assert resp.status_code == 400


def test_rejects_negative_stock(product_id, create_variant):
    resp = create_variant(product_id, stock=-1)
    assert resp.status_code == 400
    assert resp.get_json()["errors"][0]["field"] == "stock"


@pytest.mark.parametrize(
    "options",
    [
        [],
        None,
        [{"optionName": "Size", "value": ""}],
        [{"optionName": "Size", "value": "M"}, {"optionName": "Size", "value": "L"}],
        [{"optionName": "Size", "value": "M"}],
    ],
    ids=["empty", "missing", "empty-value", "duplicate-name", "incomplete"],
)
def test_rejects_bad_options(client, product_id, seller_headers, options):
    payload = {"sku": "X", "price": 10}
    if options is not None:
        payload["options"] = options
    resp = client.post(f"/api/products/{product_id}/variants", json=payload, headers=seller_headers)
    assert resp.status_code == 400
    assert ProductVariant.query.count() == 0


def test_rejects_unknown_option_name(client, product_id, seller_headers):
    resp = client.post(
        f"/api/products/{product_id}/variants",
        json={"price": 10, "options": [
            {"optionName": "Size", "value": "M"},
            {"optionName": "Colour", "value": "Black"},
        ]},
        headers=seller_headers,
    )
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "PRODUCT_OPTION_NOT_FOUND"


def test_rejects_unknown_option_value(product_id, create_variant):
    resp = create_variant(product_id, "XXL", "Black")
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "PRODUCT_OPTION_VALUE_NOT_FOUND"


def test_option_names_are_case_sensitive(client, product_id, seller_headers):
    resp = client.post(
        f"/api/products/{product_id}/variants",
        json={"price": 10, "options": [
            {"optionName": "size", "value": "M"},
            {"optionName": "Color", "value": "Black"},
        ]},
        headers=seller_headers,
    )
    assert resp.status_code == 404


def test_invalid_json_body(client, product_id, seller_headers):
    resp = client.post(
        f"/api/products/{product_id}/variants",
        data="not json",
        content_type="application/json",
        headers=seller_headers,
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Invalid request format"


def test_create_on_missing_product(client, seller_headers):
    resp = client.post(
        "/api/products/999/variants",
        json={"price": 10, "options": [{"optionName": "Size", "value": "M"}]},
        headers=seller_headers,
    )
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "PRODUCT_NOT_FOUND"


@pytest.mark.parametrize(
    "method,path,payload",
    [
        ("post", "/api/products/999/variants", {"price": 0}),
        ("put", "/api/products/999/variants/1", {"price": "free"}),
        ("put", "/api/products/999/variants/bulk", {"variants": []}),
    ],
)
def test_missing_product_reported_before_payload_errors(client, seller_headers, method, path, payload):
    resp = getattr(client, method)(path, json=payload, headers=seller_headers)
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "PRODUCT_NOT_FOUND"


def test_other_seller_forbidden_before_payload_errors(client, product_id, other_seller_headers):
    resp = client.post(
        f"/api/products/{product_id}/variants", json={"price": 0}, headers=other_seller_headers
    )
    assert resp.status_code == 403


def test_price_is_stored_at_cent_precision(db, product_id, create_variant):
    data = _data(create_variant(product_id, price=10.016))
    assert data["price"] == 10.02
    assert db.session.get(ProductVariant, data["id"]).price == 10.02


def test_create_on_product_without_options(client, make_product, seller_headers):
    bare_id = make_product(sku="BARE-1", options=[])
    resp = client.post(
        f"/api/products/{bare_id}/variants",
        json={"price": 10, "options": [{"optionName": "Size", "value": "M"}]},
        headers=seller_headers,
    )
    assert resp.status_code == 400


# --- Authorization ---


def test_create_requires_credentials(client, product_id):
    resp = client.post(f"/api/products/{product_id}/variants", json={"price": 10})
    assert resp.status_code == 401


def test_create_forbidden_for_other_seller(product_id, create_variant, other_seller_headers):
    resp = create_variant(product_id, headers=other_seller_headers)
    assert resp.status_code == 403


def test_create_forbidden_for_customer(product_id, create_variant, customer_headers):
    resp = create_variant(product_id, headers=customer_headers)
    assert resp.status_code == 403


def test_admin_may_create_for_any_seller(product_id, create_variant, admin_headers):
    resp = create_variant(product_id, headers=admin_headers)
    assert resp.status_code == 201


# --- Update ---


def test_update_variant_fields(client, product_id, create_variant, seller_headers):
    variant = _data(create_variant(product_id, stock=1))
    resp = client.put(
        f"/api/products/{product_id}/variants/{variant['id']}",
        json={"price": 35.5, "stock": 12, "images": ["https://cdn.example.com/v.jpg"],
              "isPopular": True},
        headers=seller_headers,
    )
    assert resp.status_code == 200
    data = _data(resp)
    assert data["price"] == 35.5
    assert data["stock"] == 12
    assert data["images"] == ["https://cdn.example.com/v.jpg"]
    assert data["isPopular"] is True
    assert data["inStock"] is True
    assert data["sku"] == variant["sku"]
    assert data["selectedOptions"] == variant["selectedOptions"]


def test_empty_update_only_touches_updated_at(client, product_id, create_variant, seller_headers):
    variant = _data(create_variant(product_id, stock=4, isDefault=True))
    resp = client.put(
        f"/api/products/{product_id}/variants/{variant['id']}",
        json={},
        headers=seller_headers,
    )
    assert resp.status_code == 200
    data = _data(resp)
    for key in ("sku", "price", "stock", "images", "allowPurchase", "isPopular",
                "isDefault", "selectedOptions", "createdAt"):
        assert data[key] == variant[key]
    assert data["updatedAt"] >= variant["updatedAt"]


def test_update_rejects_bad_values(client, product_id, create_variant, seller_headers):
    variant = _data(create_variant(product_id))
    url = f"/api/products/{product_id}/variants/{variant['id']}"
    assert client.put(url, json={"price": 0}, headers=seller_headers).status_code == 400
    assert client.put(url, json={"stock": -3}, headers=seller_headers).status_code == 400
    assert client.put(url, json={"isDefault": "yes"}, headers=seller_headers).status_code == 400


def test_set_default_twice_keeps_single_default(client, db, product_id, create_variant, seller_headers):
    a = _data(create_variant(product_id, "S", "Black", isDefault=True))
    b = _data(create_variant(product_id, "M", "Black"))
    url = f"/api/products/{product_id}/variants/{b['id']}"

    for _ in range(2):
        resp = client.put(url, json={"isDefault": True}, headers=seller_headers)
        assert _data(resp)["isDefault"] is True

    db.session.expire_all()
    defaults = ProductVariant.live().filter_by(product_id=product_id, is_default=True).all()
    assert [v.id for v in defaults] == [b["id"]]
    assert a["id"] != b["id"]


def test_update_variant_of_other_product(client, product_id, make_product, create_variant, seller_headers):
    other_id = make_product(sku="TEE-2")
    variant = _data(create_variant(other_id))
    resp = client.put(
        f"/api/products/{product_id}/variants/{variant['id']}",
        json={"price": 5},
        headers=seller_headers,
    )
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "VARIANT_NOT_FOUND"


# --- Bulk update ---


def test_bulk_update(client, db, product_id, create_variant, seller_headers):
    a = _data(create_variant(product_id, "S", "Black"))
    b = _data(create_variant(product_id, "M", "Black"))
    resp = client.put(
        f"/api/products/{product_id}/variants/bulk",
        json={"variants": [
            {"id": a["id"], "price": 11},
            {"id": b["id"], "stock": 5},
            {"id": 9999, "price": 1},
        ]},
        headers=seller_headers,
    )
    assert resp.status_code == 200
    data = _data(resp)
    assert data["updatedCount"] == 2
    by_id = {v["id"]: v for v in data["variants"]}
    assert by_id[a["id"]]["price"] == 11
    assert by_id[b["id"]]["stock"] == 5


def test_bulk_update_accepts_bare_list(client, product_id, create_variant, seller_headers):
    a = _data(create_variant(product_id, "S", "Black"))
    resp = client.put(
        f"/api/products/{product_id}/variants/bulk",
        json=[{"id": a["id"], "isPopular": True}],
        headers=seller_headers,
    )
    assert resp.status_code == 200
    assert _data(resp)["variants"][0]["isPopular"] is True


def test_bulk_validation_failure_changes_nothing(client, db, product_id, create_variant, seller_headers):
    a = _data(create_variant(product_id, "S", "Black", price=10))
    b = _data(create_variant(product_id, "M", "Black", price=10))
    resp = client.put(
        f"/api/products/{product_id}/variants/bulk",
        json=[{"id": a["id"], "price": 11}, {"id": b["id"], "price": -1}],
        headers=seller_headers,
    )
    assert resp.status_code == 400

    db.session.expire_all()
    assert db.session.get(ProductVariant, a["id"]).price == 10
    assert db.session.get(ProductVariant, b["id"]).price == 10


def test_bulk_last_default_wins(client, db, product_id, create_variant, seller_headers):
    a = _data(create_variant(product_id, "S", "Black"))
    b = _data(create_variant(product_id, "M", "Black"))
    resp = client.put(
        f"/api/products/{product_id}/variants/bulk",
        json=[{"id": a["id"], "isDefault": True}, {"id": b["id"], "isDefault": True}],
        headers=seller_headers,
    )
    assert resp.status_code == 200

    db.session.expire_all()
    assert db.session.get(ProductVariant, a["id"]).is_default is False
    assert db.session.get(ProductVariant, b["id"]).is_default is True
    _assert_invariants(db, product_id)


def test_bulk_rejects_empty_list(client, product_id, seller_headers):
    resp = client.put(
        f"/api/products/{product_id}/variants/bulk", json={"variants": []}, headers=seller_headers
    )
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "BULK_UPDATE_EMPTY_LIST"


def test_bulk_rejects_duplicate_ids(client, product_id, create_variant, seller_headers):
    a = _data(create_variant(product_id))
    resp = client.put(
        f"/api/products/{product_id}/variants/bulk",
        json=[{"id": a["id"], "price": 11}, {"id": a["id"], "price": 12}],
        headers=seller_headers,
    )
    assert resp.status_code == 404
    assert resp.get_json()["code"] == "BULK_UPDATE_VARIANT_NOT_FOUND"


def test_bulk_rejects_missing_id(client, product_id, seller_headers):
    resp = client.put(
        f"/api/products/{product_id}/variants/bulk", json=[{"price": 11}], headers=seller_headers
    )
    assert resp.status_code == 400


# --- Delete ---


def test_delete_keeps_last_variant(client, db, product_id, create_variant, seller_headers, guest_headers):
    a = _data(create_variant(product_id, "M", "Black", sku="A", price=10))
    b = _data(create_variant(product_id, "L", "Black", sku="B", price=10))

    resp = client.delete(f"/api/products/{product_id}/variants/{a['id']}", headers=seller_headers)
    assert resp.status_code == 200

    resp = client.delete(f"/api/products/{product_id}/variants/{b['id']}", headers=seller_headers)
    assert resp.status_code == 400
    assert resp.get_json()["code"] == "LAST_VARIANT_DELETE_NOT_ALLOWED"

    gone = client.get(f"/api/products/{product_id}/variants/{a['id']}", headers=guest_headers)
    assert gone.status_code == 404
    _assert_invariants(db, product_id)


def test_deleted_combination_can_be_recreated(client, product_id, create_variant, seller_headers):
    a = _data(create_variant(product_id, "M", "Black"))
    create_variant(product_id, "L", "Black")
    client.delete(f"/api/products/{product_id}/variants/{a['id']}", headers=seller_headers)

    resp = create_variant(product_id, "M", "Black")
    assert resp.status_code == 201
    assert _data(resp)["id"] != a["id"]


def test_delete_twice_is_not_found(client, product_id, create_variant, seller_headers):
    a = _data(create_variant(product_id, "M", "Black"))
    create_variant(product_id, "L", "Black")
    url = f"/api/products/{product_id}/variants/{a['id']}"
    assert client.delete(url, headers=seller_headers).status_code == 200
    assert client.delete(url, headers=seller_headers).status_code == 404


def test_deleting_default_leaves_no_default(client, db, product_id, create_variant, seller_headers):
    a = _data(create_variant(product_id, "M", "Black", isDefault=True))
    create_variant(product_id, "L", "Black")
    client.delete(f"/api/products/{product_id}/variants/{a['id']}", headers=seller_headers)

    db.session.expire_all()
    assert ProductVariant.live().filter_by(product_id=product_id, is_default=True).count() == 0
