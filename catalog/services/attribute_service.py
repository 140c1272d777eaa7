"""Per-product attributes governed by attribute definitions.

Definitions are either OPEN (any value, unseen values are recorded in
``allowed_values``) or CLOSED (only listed values). Sellers mint OPEN
definitions implicitly the first time they use a new key.
"""
import logging
import re
from flask import current_app
from catalog import serializers
from catalog.auth import ensure_can_mutate, ensure_can_read
from catalog.errors import (
    Conflict,
    Integrity,
    NotFound,
    ValidationFailed,
    product_attribute_not_found,
)
from catalog.extensions import db
from catalog.models.attribute import AttributeDefinition, ProductAttribute
from catalog.models.base import utcnow
from catalog.services import cache_service
from catalog.services.batch import batch_fetch, in_app_context
from catalog.services.persistence import atomic, get_product

logger = logging.getLogger(__name__)

KEY_PATTERN = re.compile(r"^[a-z0-9_]{3,50}$")


# --- Validation ---


def _clean_value(raw, field="value"):
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationFailed.field(field, "value must be a non-empty string")
    return raw.strip()


def _clean_sort_order(raw, field="sortOrder"):
    if raw is None:
        return None
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValidationFailed.field(field, "sortOrder must be an integer")
    return raw


def _check_value(definition, value, field="value"):
    if not definition.accepts(value):
        raise ValidationFailed(
            f"Invalid value '{value}' for attribute '{definition.key}'",
            code="INVALID_ATTRIBUTE_VALUE",
            errors=[{"field": field, "message": "value is not one of the allowed values"}],
        )


def parse_set_payload(payload):
    if not isinstance(payload, dict):
        raise ValidationFailed("Invalid request format")
    key = payload.get("attributeKey")
    if not isinstance(key, str) or not KEY_PATTERN.match(key):
        raise ValidationFailed.field(
            "attributeKey",
            "attributeKey must be 3-50 lowercase letters, digits or underscores",
        )
    name = payload.get("name")
    if name is not None and (not isinstance(name, str) or not name.strip()):
        raise ValidationFailed.field("name", "name must be a non-empty string")
    unit = payload.get("unit")
    if unit is not None and not isinstance(unit, str):
        raise ValidationFailed.field("unit", "unit must be a string")
    return {
        "key": key,
        "name": name.strip() if name else None,
        "unit": unit.strip() if unit else None,
        "value": _clean_value(payload.get("value")),
        "sort_order": _clean_sort_order(payload.get("sortOrder")),
    }


def parse_patch(payload, prefix=""):
    if not isinstance(payload, dict):
        raise ValidationFailed("Invalid request format")
    return {
        "value": _clean_value(payload.get("value"), f"{prefix}value"),
        "sort_order": _clean_sort_order(payload.get("sortOrder"), f"{prefix}sortOrder"),
    }


# --- Lookups ---


def get_definition_by_key(key):
    return AttributeDefinition.query.filter_by(key=key).first()


def _definitions_by_id(ids):
    return {d.id: d for d in AttributeDefinition.query.filter(AttributeDefinition.id.in_(ids))}


def load_definitions(ids):
    """Definition map for rendering; chunks are fetched concurrently."""
    return batch_fetch(
        ids,
        in_app_context(_definitions_by_id),
        batch_size=current_app.config.get("BATCH_FETCH_SIZE", 100),
        max_workers=current_app.config.get("BATCH_FETCH_WORKERS", 4),
    )


def get_live_attribute(product_id, attribute_id):
    attribute = ProductAttribute.live().filter(
        ProductAttribute.id == attribute_id, ProductAttribute.product_id == product_id
    ).first()
    if attribute is None:
        raise product_attribute_not_found()
    return attribute


# --- Operations ---


def set_product_attribute(product_id, payload, actor):
    """Assign an attribute to a product, minting its definition on first use."""
    data = parse_set_payload(payload)

    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)

        definition = get_definition_by_key(data["key"])
        if definition is None:
            if not data["name"]:
                raise ValidationFailed.field("name", "name is required for a new attribute")
            definition = AttributeDefinition(
                key=data["key"],
                name=data["name"],
                unit=data["unit"],
                allowed_values=[data["value"]],
                mode="OPEN",
            )
            db.session.add(definition)
            db.session.flush()
            logger.info("Minted attribute definition %s (%d)", definition.key, definition.id)
        else:
            _check_value(definition, data["value"])
            definition.remember(data["value"])

        existing = ProductAttribute.query.filter_by(
            product_id=product_id, attribute_definition_id=definition.id
        ).first()
        if existing is not None and not existing.is_deleted:
            raise Conflict(
                "Product already has this attribute assigned",
                code="PRODUCT_ATTRIBUTE_EXISTS",
            )

        if existing is not None:
            # Revive the soft-deleted row for this pair
            attribute = existing
            attribute.deleted_at = None
            attribute.value = data["value"]
            attribute.sort_order = data["sort_order"] or 0
            attribute.created_at = utcnow()
            attribute.updated_at = utcnow()
        else:
            attribute = ProductAttribute(
                product_id=product_id,
                attribute_definition_id=definition.id,
                value=data["value"],
                sort_order=data["sort_order"] or 0,
            )
            db.session.add(attribute)
        db.session.flush()
        return attribute, definition

    attribute, definition = atomic(work)
    cache_service.invalidate_product(product_id)
    return serializers.product_attribute(attribute, definition)


def _apply_patch(attribute, definition, fields, prefix=""):
    _check_value(definition, fields["value"], f"{prefix}value")
    definition.remember(fields["value"])
    attribute.value = fields["value"]
    if fields["sort_order"] is not None:
        attribute.sort_order = fields["sort_order"]
    attribute.updated_at = utcnow()


def update_product_attribute(product_id, attribute_id, payload, actor):
    fields = parse_patch(payload)

    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)
        attribute = get_live_attribute(product_id, attribute_id)
        definition = db.session.get(AttributeDefinition, attribute.attribute_definition_id)
        _apply_patch(attribute, definition, fields)
        db.session.flush()
        return attribute, definition

    attribute, definition = atomic(work)
    cache_service.invalidate_product(product_id)
    return serializers.product_attribute(attribute, definition)


def parse_bulk_items(payload):
    items = payload.get("attributes") if isinstance(payload, dict) else payload
    if not isinstance(items, list) or not items:
        raise ValidationFailed(
            "Bulk update list must not be empty", code="BULK_UPDATE_EMPTY_LIST"
        )
    parsed = []
    for i, item in enumerate(items):
        if not isinstance(item, dict):
            raise ValidationFailed.field(f"attributes[{i}]", "attribute must be an object")
        attribute_id = item.get("id")
        if isinstance(attribute_id, bool) or not isinstance(attribute_id, int) or attribute_id <= 0:
            raise ValidationFailed.field(f"attributes[{i}].id", "id is required")
        parsed.append((attribute_id, parse_patch(item, prefix=f"attributes[{i}].")))
    return parsed


def bulk_update_product_attributes(product_id, payload, actor):
    """Patch several attributes at once. Unknown or foreign ids are skipped.

    A value rejected by its definition fails the whole request.
    """
    items = parse_bulk_items(payload)

    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)
        ids = [attribute_id for attribute_id, _ in items]
        attributes = {
            a.id: a
            for a in ProductAttribute.live().filter(
                ProductAttribute.product_id == product_id, ProductAttribute.id.in_(ids)
            )
        }
        definitions = _definitions_by_id({a.attribute_definition_id for a in attributes.values()})
        updated = []
        for i, (attribute_id, fields) in enumerate(items):
            attribute = attributes.get(attribute_id)
            if attribute is None:
                continue
            definition = definitions[attribute.attribute_definition_id]
            _apply_patch(attribute, definition, fields, prefix=f"attributes[{i}].")
            updated.append((attribute, definition))
        db.session.flush()
        return updated

    updated = atomic(work)
    cache_service.invalidate_product(product_id)
    logger.info("Bulk updated %d attribute(s) on product %d", len(updated), product_id)
    return {
        "updatedCount": len(updated),
        "attributes": [serializers.product_attribute(a, d) for a, d in updated],
    }


def delete_product_attribute(product_id, attribute_id, actor):
    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)
        attribute = get_live_attribute(product_id, attribute_id)
        attribute.soft_delete()
        db.session.flush()

    atomic(work)
    cache_service.invalidate_product(product_id)


def list_product_attributes(product_id, actor):
    """Live attributes of a product by sort order, then creation time."""
    product = get_product(product_id)
    ensure_can_read(actor, product)

    key = cache_service.attributes_key(product_id)
    cached = cache_service.get_json(key)
    if cached is not None:
        return cached

    attributes = (
        ProductAttribute.live()
        .filter(ProductAttribute.product_id == product_id)
        .order_by(ProductAttribute.sort_order, ProductAttribute.created_at, ProductAttribute.id)
        .all()
    )
    definitions = load_definitions([a.attribute_definition_id for a in attributes])
    data = [
        serializers.product_attribute(a, definitions[a.attribute_definition_id])
        for a in attributes
        if a.attribute_definition_id in definitions
    ]
    cache_service.set_json(key, data)
    return data


# --- Definitions ---


def list_attribute_definitions():
    return [
        serializers.attribute_definition(d)
        for d in AttributeDefinition.query.order_by(AttributeDefinition.key).all()
    ]


def set_definition_mode(definition_id, mode):
    """Switch a definition between OPEN and CLOSED."""
    if mode not in AttributeDefinition.MODES:
        raise ValidationFailed.field("mode", "mode must be OPEN or CLOSED")

    def work():
        definition = db.session.get(AttributeDefinition, definition_id)
        if definition is None:
            raise NotFound("Attribute definition not found", code="ATTRIBUTE_NOT_FOUND")
        definition.mode = mode
        db.session.flush()
        return definition

    return serializers.attribute_definition(atomic(work))


def delete_attribute_definition(definition_id):
    def work():
        definition = db.session.get(AttributeDefinition, definition_id)
        if definition is None:
            raise NotFound("Attribute definition not found", code="ATTRIBUTE_NOT_FOUND")
        in_use = ProductAttribute.live().filter(
            ProductAttribute.attribute_definition_id == definition_id
        ).count()
        if in_use:
            raise Integrity(
                "Attribute is in use by one or more products", code="ATTRIBUTE_IN_USE"
            )
        # Soft-deleted rows still reference the definition
        ProductAttribute.query.filter(
            ProductAttribute.attribute_definition_id == definition_id
        ).delete(synchronize_session=False)
        db.session.delete(definition)
        db.session.flush()

    atomic(work)
    logger.info("Deleted attribute definition %d", definition_id)
