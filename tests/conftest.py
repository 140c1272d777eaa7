import pytest
from catalog import create_app
from catalog.auth import issue_token
from catalog.extensions import db as _db
from catalog.services import option_service, product_service

SELLER_ID = 7
OTHER_SELLER_ID = 8

DEFAULT_OPTIONS = [
    ("Size", ["S", "M", "L"]),
    ("Color", ["Black", "White"]),
]


@pytest.fixture
def app():
    """Fresh application and empty in-memory database per test."""
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


def create_catalog_product(seller_id=SELLER_ID, sku="TEE-1", options=DEFAULT_OPTIONS):
    """Persist a product with the given option schema and return its id."""
    product = product_service.create_product(seller_id, "Test Tee", sku, 25.0, brand="Acme")
    for position, (name, values) in enumerate(options):
        option_id = option_service.define_option(product.id, name, sort_order=position)
        for value_position, value in enumerate(values):
            hint = "#000000" if value == "Black" else None
            option_service.define_value(option_id, value, None, hint, value_position)
    return product.id


@pytest.fixture
def make_product(app):
    return create_catalog_product


@pytest.fixture
def product_id(make_product):
    return make_product()


@pytest.fixture
def token_for(app):
    def make(role, seller_id=None):
        token = issue_token(role, seller_id=seller_id, user_id=1)
        return {"Authorization": f"Bearer {token}"}

    return make


@pytest.fixture
def seller_headers(token_for):
    return token_for("SELLER", SELLER_ID)


@pytest.fixture
def other_seller_headers(token_for):
    return token_for("SELLER", OTHER_SELLER_ID)


@pytest.fixture
def admin_headers(token_for):
    return token_for("ADMIN")


@pytest.fixture
def customer_headers(token_for):
    return token_for("CUSTOMER")


@pytest.fixture
def guest_headers():
    return {"X-Seller-ID": str(SELLER_ID)}


@pytest.fixture
def create_variant(client, seller_headers):
    """POST a variant for (Size, Color) and return the response."""

    def make(product_id, size="M", color="Black", headers=None, **fields):
        payload = {"sku": f"SKU-{size}-{color}", "price": 29.99}
        payload.update(fields)
        payload["options"] = [
            {"optionName": "Size", "value": size},
            {"optionName": "Color", "value": color},
        ]
        return client.post(
            f"/api/products/{product_id}/variants",
            json=payload,
            headers=headers or seller_headers,
        )

    return make
