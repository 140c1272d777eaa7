"""Tests for tokens, actors and the ownership predicates."""

from datetime import timedelta

import pytest
from catalog.auth import (
    ADMIN,
    CUSTOMER,
    GUEST,
    SELLER,
    Actor,
    can_mutate,
    can_read,
    decode_token,
    issue_token,
)
from catalog.errors import Unauthorized
from catalog.models.product import Product

PRODUCT = Product(seller_id=7, name="Tee", sku="T-1", price=1)


@pytest.mark.parametrize(
    "actor,expected",
    [
        (Actor(ADMIN), True),
        (Actor(CUSTOMER), True),
        (Actor(SELLER, seller_id=99), True),
        (Actor(GUEST, seller_hint=7), True),
        (Actor(GUEST, seller_hint=8), False),
        (Actor(GUEST), False),
    ],
)
def test_can_read(actor, expected):
    assert can_read(actor, PRODUCT) is expected


@pytest.mark.parametrize(
    "actor,expected",
    [
        (Actor(ADMIN), True),
        (Actor(SELLER, seller_id=7), True),
        (Actor(SELLER, seller_id=8), False),
        (Actor(CUSTOMER), False),
        (Actor(GUEST, seller_hint=7), False),
    ],
)
def test_can_mutate(actor, expected):
    assert can_mutate(actor, PRODUCT) is expected


def test_unknown_role_rejected():
    with pytest.raises(ValueError):
        Actor("superuser")


def test_token_round_trip(app):
    actor = decode_token(issue_token("seller", seller_id=7, user_id=3))
    assert actor.role == SELLER
    assert actor.seller_id == 7
    assert actor.user_id == 3


def test_expired_token_rejected(app):
    token = issue_token("ADMIN", expires_in=timedelta(seconds=-10))
    with pytest.raises(Unauthorized) as exc:
        decode_token(token)
    assert exc.value.code == "TOKEN_INVALID"


def test_seller_token_without_seller_id_rejected(app):
    with pytest.raises(Unauthorized) as exc:
        decode_token(issue_token("SELLER"))
    assert exc.value.code == "INVALID_SELLER"


def test_string_seller_id_claim_is_coerced(app):
    actor = decode_token(issue_token("SELLER", seller_id="7"))
    assert actor.seller_id == 7
    assert can_mutate(actor, PRODUCT) is True


@pytest.mark.parametrize("seller_id", ["abc", "", "0", -3, True])
def test_bad_seller_id_claim_rejected(app, seller_id):
    with pytest.raises(Unauthorized) as exc:
        decode_token(issue_token("SELLER", seller_id=seller_id))
    assert exc.value.code == "INVALID_SELLER"


def test_string_seller_id_token_can_write(client, product_id, token_for, create_variant):
    resp = create_variant(product_id, headers=token_for("SELLER", "7"))
    assert resp.status_code == 201


def test_token_with_unknown_role_rejected(app):
    with pytest.raises(Unauthorized) as exc:
        decode_token(issue_token("GUEST"))
    assert exc.value.code == "ROLE_NOT_FOUND"


def test_token_signed_with_other_secret_rejected(app):
    token = issue_token("ADMIN")
    app.config["JWT_SECRET"] = "rotated"
    with pytest.raises(Unauthorized):
        decode_token(token)


def test_malformed_authorization_header(client, product_id):
    resp = client.post(
        f"/api/products/{product_id}/variants",
        json={},
        headers={"Authorization": "Token abc"},
    )
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "INVALID_AUTH_FORMAT"


def test_garbage_bearer_token(client, product_id):
    resp = client.get(
        f"/api/products/{product_id}/variants",
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert resp.status_code == 401
    assert resp.get_json()["code"] == "TOKEN_INVALID"


def test_authenticated_read_needs_no_seller_header(client, product_id, customer_headers):
    resp = client.get(f"/api/products/{product_id}/variants", headers=customer_headers)
    assert resp.status_code == 200
    assert resp.get_json()["success"] is True


def test_error_envelope_shape(client, product_id):
    resp = client.post(f"/api/products/{product_id}/variants", json={})
    body = resp.get_json()
    assert body["success"] is False
    assert body["code"] == "AUTH_REQUIRED"
    assert body["message"]
