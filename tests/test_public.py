"""Tests for the health check, error rendering and CLI commands."""

import catalog.extensions as ext
from catalog.auth import decode_token
from catalog.models.product import Product
from catalog.models.variant import ProductVariant


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["status"] == "ok"
    assert data["db"] == "ok"
    assert data["redis"] == "not configured"


def test_health_does_not_leak_internal_errors(client, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("database password leaked")

    monkeypatch.setattr(ext.db.session, "execute", boom)

    resp = client.get("/health")
    assert resp.status_code == 503
    data = resp.get_json()
    assert data["db"] == "error"
    assert "password" not in str(data).lower()


def test_unknown_route_uses_envelope(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    body = resp.get_json()
    assert body["success"] is False
    assert body["code"] == "NOT_FOUND"


def test_unexpected_error_is_hidden(client, product_id, guest_headers, monkeypatch):
    from catalog.services import variant_query_service

    def explode(*args, **kwargs):
        raise RuntimeError("secret stack detail")

    monkeypatch.setattr(variant_query_service, "list_variants", explode)
    resp = client.get(f"/api/products/{product_id}/variants", headers=guest_headers)
    assert resp.status_code == 500
    assert resp.get_json()["code"] == "INTERNAL_ERROR"
    assert "secret" not in resp.get_data(as_text=True)


def test_cli_seed_demo_and_stats(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["seed-demo"])
    assert result.exit_code == 0, result.output
    assert "Seeded 2 demo products." in result.output

    assert Product.query.count() == 2
    assert ProductVariant.live().count() == 4
    assert ProductVariant.live().filter_by(is_default=True).count() == 2

    again = runner.invoke(args=["seed-demo"])
    assert "skipping" in again.output

    stats = runner.invoke(args=["stats"])
    assert "Total products: 2" in stats.output
    assert "TEE-CLASSIC (Classic Cotton Tee): 2 variant(s)" in stats.output


def test_cli_issue_token(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["issue-token", "--role", "SELLER", "--seller-id", "7"])
    assert result.exit_code == 0, result.output
    actor = decode_token(result.output.strip())
    assert actor.seller_id == 7

    missing = runner.invoke(args=["issue-token", "--role", "SELLER"])
    assert missing.exit_code != 0
