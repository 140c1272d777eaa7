"""Option schema registry: a product's options and their allowed values."""
import logging
from sqlalchemy import func
from catalog import serializers
from catalog.auth import ensure_can_mutate, ensure_can_read
from catalog.errors import ValidationFailed, option_not_found, option_value_not_found
from catalog.extensions import db
from catalog.models.option import ProductOption, ProductOptionValue
from catalog.models.variant import ProductVariant, VariantOptionValue
from catalog.services import cache_service
from catalog.services.persistence import atomic, get_product

logger = logging.getLogger(__name__)


class OptionSchema:
    """A product's options and values, with the lookups variant writes need."""

    def __init__(self, options, values):
        self.options = options
        self.values_by_option = {opt.id: [] for opt in options}
        for value in values:
            self.values_by_option.setdefault(value.option_id, []).append(value)
        self.option_by_name = {opt.name: opt for opt in options}
        self.value_by_id = {value.id: value for value in values}
        self.value_lookup = {(value.option_id, value.value): value for value in values}

    def __len__(self):
        return len(self.options)


def _options_query(product_id):
    return ProductOption.query.filter_by(product_id=product_id).order_by(
        ProductOption.sort_order, ProductOption.name
    )


def _values_query(option_ids):
    return ProductOptionValue.query.filter(
        ProductOptionValue.option_id.in_(option_ids)
    ).order_by(ProductOptionValue.sort_order, ProductOptionValue.value)


def load_schema(product_id):
    options = _options_query(product_id).all()
    values = _values_query([o.id for o in options]).all() if options else []
    return OptionSchema(options, values)


def get_option(option_id, product_id=None):
    option = db.session.get(ProductOption, option_id)
    if option is None or (product_id is not None and option.product_id != product_id):
        raise option_not_found()
    return option


def get_value(value_id, option_id=None):
    value = db.session.get(ProductOptionValue, value_id)
    if value is None or (option_id is not None and value.option_id != option_id):
        raise option_value_not_found()
    return value


def list_values(option_id):
    """Values of an option ordered by sort order, then machine value."""
    get_option(option_id)
    return _values_query([option_id]).all()


def _clean_name(raw, field):
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationFailed.field(field, f"{field} is required")
    return raw.strip()


def _display(raw, fallback):
    if isinstance(raw, str) and raw.strip():
        return raw.strip()
    return fallback


def _clean_sort_order(raw, field="position"):
    if raw is None:
        return 0
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise ValidationFailed.field(field, f"{field} must be an integer")
    return raw


def define_option(product_id, name, display_name=None, sort_order=0, actor=None):
    """Create the option ``name`` on a product, or return the existing one's id."""
    name = _clean_name(name, "name")
    sort_order = _clean_sort_order(sort_order)

    def work():
        product = get_product(product_id, lock=True)
        if actor is not None:
            ensure_can_mutate(actor, product)
        existing = ProductOption.query.filter_by(product_id=product_id, name=name).first()
        if existing is not None:
            return existing.id
        # Existing variants would be missing a selection for the new option
        if ProductVariant.live().filter(ProductVariant.product_id == product_id).count():
            raise ValidationFailed(
                "Cannot add an option to a product that already has variants",
                code="PRODUCT_HAS_VARIANTS",
            )
        option = ProductOption(
            product_id=product_id,
            name=name,
            display_name=_display(display_name, name),
            sort_order=sort_order,
        )
        db.session.add(option)
        db.session.flush()
        logger.info("Defined option %s (%d) on product %d", name, option.id, product_id)
        return option.id

    option_id = atomic(work)
    cache_service.invalidate_product(product_id)
    return option_id


def define_value(option_id, value, display_value=None, presentation_hint=None,
                 sort_order=0, actor=None):
    """Add ``value`` to an option, or return the existing value's id."""
    value = _clean_name(value, "value")
    sort_order = _clean_sort_order(sort_order)
    if presentation_hint is not None and not isinstance(presentation_hint, str):
        raise ValidationFailed.field("colorCode", "colorCode must be a string")

    option = get_option(option_id)

    def work():
        product = get_product(option.product_id, lock=True)
        if actor is not None:
            ensure_can_mutate(actor, product)
        existing = ProductOptionValue.query.filter_by(option_id=option_id, value=value).first()
        if existing is not None:
            return existing.id
        row = ProductOptionValue(
            option_id=option_id,
            value=value,
            display_name=_display(display_value, value),
            color_code=presentation_hint or None,
            sort_order=sort_order,
        )
        db.session.add(row)
        db.session.flush()
        return row.id

    value_id = atomic(work)
    cache_service.invalidate_product(option.product_id)
    return value_id


def create_option_with_values(product_id, payload, actor):
    """Define an option and any listed values in one transaction."""
    if not isinstance(payload, dict):
        raise ValidationFailed("Invalid request format")
    values = payload.get("values") or []
    if not isinstance(values, list) or not all(isinstance(v, dict) for v in values):
        raise ValidationFailed.field("values", "values must be a list of objects")

    def work():
        option_id = define_option(
            product_id,
            payload.get("name"),
            payload.get("displayName"),
            payload.get("position", 0),
            actor=actor,
        )
        for item in values:
            define_value(
                option_id,
                item.get("value"),
                item.get("displayName"),
                item.get("colorCode"),
                item.get("position", 0),
                actor=actor,
            )
        return option_id

    option_id = atomic(work)
    cache_service.invalidate_product(product_id)
    option = get_option(option_id)
    return serializers.option(option, list_values(option_id))


def add_option_value(product_id, option_id, payload, actor):
    if not isinstance(payload, dict):
        raise ValidationFailed("Invalid request format")
    get_option(option_id, product_id=product_id)
    value_id = define_value(
        option_id,
        payload.get("value"),
        payload.get("displayName"),
        payload.get("colorCode"),
        payload.get("position", 0),
        actor=actor,
    )
    return serializers.option_value(get_value(value_id))


def _clean_display(raw, field="displayName"):
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationFailed.field(field, f"{field} must be a non-empty string")
    if len(raw.strip()) > 100:
        raise ValidationFailed.field(field, f"{field} must be at most 100 characters")
    return raw.strip()


def _clean_color(raw):
    if raw is None or raw == "":
        return None
    if not isinstance(raw, str) or len(raw) > 7:
        raise ValidationFailed.field("colorCode", "colorCode must be a string of at most 7 characters")
    return raw


def _require_changes(payload, fields):
    if not isinstance(payload, dict):
        raise ValidationFailed("Invalid request format")
    if not any(key in payload for key in fields):
        raise ValidationFailed(f"At least one of {', '.join(fields)} is required")


def _live_usage(column, key):
    return (
        VariantOptionValue.query.join(
            ProductVariant, ProductVariant.id == VariantOptionValue.variant_id
        )
        .filter(
            column == key,
            ProductVariant.deleted_at.is_(None),
            VariantOptionValue.deleted_at.is_(None),
        )
        .count()
    )


def update_option(product_id, option_id, payload, actor):
    """Change an option's display name or position. The machine name is fixed."""
    _require_changes(payload, ("displayName", "position"))
    changes = {}
    if "displayName" in payload:
        changes["display_name"] = _clean_display(payload["displayName"])
    if "position" in payload:
        changes["sort_order"] = _clean_sort_order(payload["position"])

    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)
        option = get_option(option_id, product_id=product_id)
        for attr, value in changes.items():
            setattr(option, attr, value)
        db.session.flush()
        return option.id

    atomic(work)
    cache_service.invalidate_product(product_id)
    option = get_option(option_id)
    return serializers.option(option, list_values(option_id))


def delete_option(product_id, option_id, actor):
    """Remove an option and its values; refused while live variants use it."""

    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)
        option = get_option(option_id, product_id=product_id)
        if _live_usage(VariantOptionValue.option_id, option_id):
            raise ValidationFailed(
                "Product option is in use by existing variants",
                code="PRODUCT_OPTION_IN_USE",
            )
        # Only soft-deleted variants still point at it
        VariantOptionValue.query.filter_by(option_id=option_id).delete(synchronize_session=False)
        ProductOptionValue.query.filter_by(option_id=option_id).delete(synchronize_session=False)
        db.session.delete(option)
        db.session.flush()
        logger.info("Deleted option %s (%d) from product %d", option.name, option_id, product_id)

    atomic(work)
    cache_service.invalidate_product(product_id)


def update_option_value(product_id, option_id, value_id, payload, actor):
    """Change a value's display name, color code or position. The machine value is fixed."""
    _require_changes(payload, ("displayName", "colorCode", "position"))
    changes = {}
    if "displayName" in payload:
        changes["display_name"] = _clean_display(payload["displayName"])
    if "colorCode" in payload:
        changes["color_code"] = _clean_color(payload["colorCode"])
    if "position" in payload:
        changes["sort_order"] = _clean_sort_order(payload["position"])

    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)
        get_option(option_id, product_id=product_id)
        value = get_value(value_id, option_id=option_id)
        for attr, new in changes.items():
            setattr(value, attr, new)
        db.session.flush()

    atomic(work)
    cache_service.invalidate_product(product_id)
    return serializers.option_value(get_value(value_id))


def delete_option_value(product_id, option_id, value_id, actor):
    """Remove a value from an option; refused while live variants select it."""

    def work():
        product = get_product(product_id, lock=True)
        ensure_can_mutate(actor, product)
        get_option(option_id, product_id=product_id)
        value = get_value(value_id, option_id=option_id)
        if _live_usage(VariantOptionValue.option_value_id, value_id):
            raise ValidationFailed(
                "Product option value is in use by existing variants",
                code="PRODUCT_OPTION_VALUE_IN_USE",
            )
        VariantOptionValue.query.filter_by(option_value_id=value_id).delete(
            synchronize_session=False
        )
        db.session.delete(value)
        db.session.flush()

    atomic(work)
    cache_service.invalidate_product(product_id)


def variant_counts(product_id):
    """Number of live variants using each option value of a product."""
    rows = (
        db.session.query(VariantOptionValue.option_value_id, func.count(VariantOptionValue.id))
        .join(ProductVariant, ProductVariant.id == VariantOptionValue.variant_id)
        .filter(
            ProductVariant.product_id == product_id,
            ProductVariant.deleted_at.is_(None),
            VariantOptionValue.deleted_at.is_(None),
        )
        .group_by(VariantOptionValue.option_value_id)
        .all()
    )
    return dict(rows)


def get_available_options(product_id, actor):
    """Options with ordered values and per-value live variant counts."""
    product = get_product(product_id)
    ensure_can_read(actor, product)

    cached = cache_service.get_json(cache_service.options_key(product_id))
    if cached is not None:
        return cached

    schema = load_schema(product_id)
    counts = variant_counts(product_id)
    data = {
        "productId": product_id,
        "options": [
            serializers.option(opt, schema.values_by_option.get(opt.id, []), counts)
            for opt in schema.options
        ],
    }
    cache_service.set_json(cache_service.options_key(product_id), data)
    return data
