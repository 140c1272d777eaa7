"""Demo catalog for local development."""
from catalog.auth import ADMIN, Actor
from catalog.models.product import Product
from catalog.services import (
    attribute_service,
    category_service,
    option_service,
    product_service,
    variant_service,
)

DEMO_SELLER_ID = 1

CATEGORY_TREE = {
    "Apparel": ["T-Shirts", "Hoodies"],
    "Accessories": ["Bags"],
}

SAMPLE_PRODUCTS = [
    {
        "sku": "TEE-CLASSIC",
        "name": "Classic Cotton Tee",
        "brand": "Northwind",
        "price": 19.99,
        "category": ("Apparel", "T-Shirts"),
        "tags": ["cotton", "basics"],
        "options": [
            ("Size", "Size", [("S", "Small", None), ("M", "Medium", None), ("L", "Large", None)]),
            ("Color", "Color", [("Black", "Black", "#000000"), ("White", "White", "#FFFFFF")]),
        ],
        "variants": [
            {"sku": "TEE-CLASSIC-M-BLK", "price": 19.99, "stock": 25, "isDefault": True,
             "options": {"Size": "M", "Color": "Black"}},
            {"sku": "TEE-CLASSIC-L-WHT", "price": 21.99, "stock": 0,
             "options": {"Size": "L", "Color": "White"}},
        ],
        "attributes": [
            ("material", "Material", None, "100% cotton"),
            ("weight", "Weight", "g", "180"),
        ],
    },
    {
        "sku": "HOOD-ZIP",
        "name": "Zip Hoodie",
        "brand": "Northwind",
        "price": 49.0,
        "category": ("Apparel", "Hoodies"),
        "tags": ["fleece"],
        "options": [
            ("Size", "Size", [("M", "Medium", None), ("L", "Large", None)]),
        ],
        "variants": [
            {"sku": "HOOD-ZIP-M", "price": 49.0, "stock": 10, "isDefault": True,
             "options": {"Size": "M"}},
            {"sku": "HOOD-ZIP-L", "price": 49.0, "stock": 4, "options": {"Size": "L"}},
        ],
        "attributes": [
            ("material", "Material", None, "80% cotton, 20% polyester"),
        ],
    },
]


def seed_categories():
    """Create the demo category tree. Returns {(root, child): id}."""
    ids = {}
    for root_name, children in CATEGORY_TREE.items():
        root = category_service.create_category(root_name)
        for child_name in children:
            child = category_service.create_category(child_name, parent_id=root.id)
            ids[(root_name, child_name)] = child.id
    return ids


def seed_demo(echo=print):
    """Seed the demo catalog. Does nothing when products already exist."""
    if Product.query.first():
        echo("Products already exist, skipping demo seed.")
        return 0

    actor = Actor(role=ADMIN)
    categories = seed_categories()

    for item in SAMPLE_PRODUCTS:
        product = product_service.create_product(
            DEMO_SELLER_ID,
            item["name"],
            item["sku"],
            item["price"],
            category_id=categories[item["category"]],
            brand=item["brand"],
            tags=item["tags"],
        )

        for position, (name, display, values) in enumerate(item["options"]):
            option_id = option_service.define_option(product.id, name, display, position)
            for value_position, (value, value_display, color) in enumerate(values):
                option_service.define_value(
                    option_id, value, value_display, color, value_position
                )

        for variant in item["variants"]:
            payload = dict(variant)
            payload["options"] = [
                {"optionName": name, "value": value}
                for name, value in variant["options"].items()
            ]
            variant_service.create_variant(product.id, payload, actor)

        for position, (key, name, unit, value) in enumerate(item["attributes"]):
            attribute_service.set_product_attribute(
                product.id,
                {"attributeKey": key, "name": name, "unit": unit, "value": value,
                 "sortOrder": position},
                actor,
            )

        echo(f"  Created {product.sku}: {product.name}")

    echo(f"Seeded {len(SAMPLE_PRODUCTS)} demo products.")
    return len(SAMPLE_PRODUCTS)
