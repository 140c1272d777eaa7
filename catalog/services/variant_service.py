"""Variant writes.

Every write runs under ``atomic`` with the product row locked, so the
combination-uniqueness check, the default clear-then-set and the last-variant
count all see the same state as the insert or update that depends on them.
The product and the caller's rights are checked before the payload is parsed,
so a missing product is reported as such whatever the request body holds.
"""
import logging
from catalog import serializers
from catalog.auth import ensure_can_mutate
from catalog.errors import (
    Conflict,
    NotFound,
    ValidationFailed,
    option_not_found,
    option_value_not_found,
)
from catalog.extensions import db
from catalog.models.base import utcnow
from catalog.models.variant import ProductVariant, VariantOptionValue
from catalog.services import cache_service
from catalog.services.option_service import load_schema
from catalog.services.persistence import atomic, get_product
from catalog.services.variant_query_service import (
    build_detail,
    get_live_variant,
    live_combinations,
)

logger = logging.getLogger(__name__)

# Request field → model attribute for the mutable variant fields
PATCH_FIELDS = {
    "sku": "sku",
    "price": "price",
    "stock": "stock",
    "images": "images",
    "allowPurchase": "allow_purchase",
    "isPopular": "is_popular",
    "isDefault": "is_default",
}


# --- Payload parsing ---


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_fields(payload, prefix=""):
    """Validate the present mutable fields of a payload. ``None`` means absent."""
    fields = {}

    sku = payload.get("sku")
    if sku is not None:
        if not isinstance(sku, str):
            raise ValidationFailed.field(f"{prefix}sku", "sku must be a string")
        fields["sku"] = sku.strip()

    price = payload.get("price")
    if price is not None:
        if not _is_number(price):
            raise ValidationFailed.field(f"{prefix}price", "price must be a number")
        # Stored as NUMERIC(12, 2)
        price = round(float(price), 2)
        if price <= 0:
            raise ValidationFailed.field(f"{prefix}price", "price must be greater than 0")
        fields["price"] = price

    stock = payload.get("stock")
    if stock is not None:
        if not _is_number(stock) or int(stock) != stock:
            raise ValidationFailed.field(f"{prefix}stock", "stock must be an integer")
        if stock < 0:
            raise ValidationFailed.field(f"{prefix}stock", "stock must not be negative")
        fields["stock"] = int(stock)

    images = payload.get("images")
    if images is not None:
        if not isinstance(images, list) or not all(isinstance(i, str) for i in images):
            raise ValidationFailed.field(f"{prefix}images", "images must be a list of strings")
        fields["images"] = list(images)

    for key in ("allowPurchase", "isPopular", "isDefault"):
        flag = payload.get(key)
        if flag is not None:
            if not isinstance(flag, bool):
                raise ValidationFailed.field(f"{prefix}{key}", f"{key} must be a boolean")
            fields[key] = flag

    return fields


def parse_create_payload(payload):
    if not isinstance(payload, dict):
        raise ValidationFailed("Invalid request format")
    if payload.get("price") is None:
        raise ValidationFailed.field("price", "price is required")
    fields = _parse_fields(payload)

    options = payload.get("options")
    if not isinstance(options, list) or not options:
        raise ValidationFailed.field("options", "At least one option is required")
    selections = []
    for i, item in enumerate(options):
        if not isinstance(item, dict):
            raise ValidationFailed.field(f"options[{i}]", "option must be an object")
        name = item.get("optionName")
        value = item.get("value")
        if not isinstance(name, str) or not name:
            raise ValidationFailed.field(f"options[{i}].optionName", "optionName is required")
        if not isinstance(value, str) or not value:
            raise ValidationFailed.field(f"options[{i}].value", "value is required")
        selections.append((name, value))
    return fields, selections


def parse_patch(payload, prefix=""):
    if not isinstance(payload, dict):
        raise ValidationFailed("Invalid request format")
    return _parse_fields(payload, prefix)


# --- Invariant helpers ---


def resolve_combination(schema, selections):
    """Turn (option name, value) pairs into a frozenset of (option id, value id).

    The selection must name every option of the product exactly once, with a
    value defined for that option. Names and values match case-sensitively.
    """
    if not schema.options:
        raise ValidationFailed("Product has no options defined", code="INVALID_OPTION")

    seen = set()
    combination = set()
    for name, value in selections:
        if name in seen:
            raise ValidationFailed.field("options", f"Duplicate option in request: {name}")
        seen.add(name)
        option = schema.option_by_name.get(name)
        if option is None:
            raise option_not_found(name)
        row = schema.value_lookup.get((option.id, value))
        if row is None:
            raise option_value_not_found(value, name)
        combination.add((option.id, row.id))

    missing = [opt.name for opt in schema.options if opt.name not in seen]
    if missing:
        raise ValidationFailed.field(
            "options", "Missing value for option(s): " + ", ".join(missing)
        )
    return frozenset(combination)


def clear_default(product_id, keep_id=None):
    """Unset isDefault on every live variant of the product except ``keep_id``."""
    defaults = ProductVariant.live().filter(
        ProductVariant.product_id == product_id, ProductVariant.is_default.is_(True)
    ).all()
    for other in defaults:
        if other.id != keep_id:
            other.is_default = False
            other.updated_at = utcnow()


def apply_patch(variant, fields):
    for key, value in fields.items():
        if key == "isDefault" and value:
            clear_default(variant.product_id, keep_id=variant.id)
        setattr(variant, PATCH_FIELDS[key], value)
    variant.updated_at = utcnow()
    db.session.flush()


# --- Operations ---


def create_variant(product_id, payload, actor):
    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)
        fields, selections = parse_create_payload(payload)
        schema = load_schema(product_id)
        combination = resolve_combination(schema, selections)

        for combo in live_combinations(product_id).values():
            if combo == combination:
                raise Conflict(
                    "Variant with this option combination already exists",
                    code="VARIANT_OPTION_COMBINATION_EXISTS",
                )

        if fields.get("isDefault"):
            clear_default(product_id)

        variant = ProductVariant(
            product_id=product_id,
            sku=fields.get("sku", ""),
            price=fields["price"],
            stock=fields.get("stock", 0),
            images=fields.get("images", []),
            allow_purchase=fields.get("allowPurchase", True),
            is_popular=fields.get("isPopular", False),
            is_default=fields.get("isDefault", False),
        )
        db.session.add(variant)
        db.session.flush()

        for option_id, value_id in sorted(combination):
            db.session.add(
                VariantOptionValue(
                    variant_id=variant.id,
                    option_id=option_id,
                    option_value_id=value_id,
                )
            )
        db.session.flush()
        return product, variant, schema

    product, variant, schema = atomic(work)
    cache_service.invalidate_product(product_id)
    logger.info("Created variant %d on product %d", variant.id, product_id)
    return build_detail(product, variant, schema)


def update_variant(product_id, variant_id, payload, actor):
    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)
        fields = parse_patch(payload)
        variant = get_live_variant(product_id, variant_id)
        apply_patch(variant, fields)
        return product, variant

    product, variant = atomic(work)
    cache_service.invalidate_product(product_id)
    logger.info("Updated variant %d on product %d", variant_id, product_id)
    return build_detail(product, variant)


def parse_bulk_items(payload):
    items = payload.get("variants") if isinstance(payload, dict) else payload
    if not isinstance(items, list) or not items:
        raise ValidationFailed(
            "Bulk update list must not be empty", code="BULK_UPDATE_EMPTY_LIST"
        )

    parsed = []
    seen = set()
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationFailed.field(f"variants[{i}]", "variant must be an object")
        variant_id = item.get("id")
        if not _is_number(variant_id) or int(variant_id) != variant_id or variant_id <= 0:
            raise ValidationFailed.field(f"variants[{i}].id", "id is required")
        variant_id = int(variant_id)
        if variant_id in seen:
            raise NotFound(
                f"Variant {variant_id} appears more than once in bulk update",
                code="BULK_UPDATE_VARIANT_NOT_FOUND",
            )
        seen.add(variant_id)
        parsed.append((variant_id, parse_patch(item, prefix=f"variants[{i}].")))
    return parsed


def bulk_update_variants(product_id, payload, actor):
    """Apply per-variant patches in list order; unknown ids are skipped.

    All items are validated before any write. When several items set
    isDefault, the last one processed is the default afterwards.
    """

    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)
        items = parse_bulk_items(payload)
        ids = [variant_id for variant_id, _ in items]
        variants = {
            v.id: v
            for v in ProductVariant.live().filter(
                ProductVariant.product_id == product_id, ProductVariant.id.in_(ids)
            )
        }
        applied = []
        for variant_id, fields in items:
            variant = variants.get(variant_id)
            if variant is None:
                continue
            apply_patch(variant, fields)
            applied.append(variant)
        return applied

    applied = atomic(work)
    cache_service.invalidate_product(product_id)
    logger.info("Bulk updated %d variant(s) on product %d", len(applied), product_id)
    return {
        "updatedCount": len(applied),
        "variants": [serializers.variant_summary(v) for v in applied],
    }


def delete_variant(product_id, variant_id, actor):
    """Soft-delete a variant and release its option bindings.

    The last live variant of a product cannot be deleted. Deleting the default
    leaves the product without one.
    """

    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)
        variant = get_live_variant(product_id, variant_id)
        remaining = ProductVariant.live().filter(
            ProductVariant.product_id == product_id
        ).count()
        if remaining <= 1:
            raise ValidationFailed(
                "Cannot delete the last variant of a product",
                code="LAST_VARIANT_DELETE_NOT_ALLOWED",
            )
        variant.soft_delete()
        bindings = VariantOptionValue.live().filter(
            VariantOptionValue.variant_id == variant.id
        ).all()
        for binding in bindings:
            binding.soft_delete()
        db.session.flush()

    atomic(work)
    cache_service.invalidate_product(product_id)
    logger.info("Deleted variant %d on product %d", variant_id, product_id)
