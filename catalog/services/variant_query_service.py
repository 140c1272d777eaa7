"""Variant reads: lookup by id, by option selection, and per-product listing."""
from catalog import serializers
from catalog.auth import ensure_can_read
from catalog.errors import NotFound, ValidationFailed, variant_not_found
from catalog.extensions import db
from catalog.models.variant import ProductVariant, VariantOptionValue
from catalog.services.option_service import load_schema
from catalog.services.persistence import get_product


def get_live_variant(product_id, variant_id):
    """A non-deleted variant that belongs to the product, or NotFound."""
    variant = ProductVariant.live().filter(
        ProductVariant.id == variant_id, ProductVariant.product_id == product_id
    ).first()
    if variant is None:
        raise variant_not_found()
    return variant


def live_combinations(product_id):
    """Map each live variant id of a product to its set of (option id, value id)."""
    rows = (
        db.session.query(
            VariantOptionValue.variant_id,
            VariantOptionValue.option_id,
            VariantOptionValue.option_value_id,
        )
        .join(ProductVariant, ProductVariant.id == VariantOptionValue.variant_id)
        .filter(
            ProductVariant.product_id == product_id,
            ProductVariant.deleted_at.is_(None),
            VariantOptionValue.deleted_at.is_(None),
        )
        .all()
    )
    combos = {}
    for variant_id, option_id, value_id in rows:
        combos.setdefault(variant_id, set()).add((option_id, value_id))
    return combos


def variant_value_ids(variant_id):
    rows = (
        db.session.query(VariantOptionValue.option_value_id)
        .filter(
            VariantOptionValue.variant_id == variant_id,
            VariantOptionValue.deleted_at.is_(None),
        )
        .all()
    )
    return [row[0] for row in rows]


def build_detail(product, variant, schema=None):
    if schema is None:
        schema = load_schema(product.id)
    selected = serializers.selected_options(schema, variant_value_ids(variant.id))
    return serializers.variant_detail(variant, product, selected)


def get_variant_by_id(product_id, variant_id, actor):
    product = get_product(product_id)
    ensure_can_read(actor, product)
    variant = get_live_variant(product_id, variant_id)
    return build_detail(product, variant)


def list_variants(product_id, actor):
    """Every live variant of a product with its selected options, default first."""
    product = get_product(product_id)
    ensure_can_read(actor, product)
    schema = load_schema(product_id)
    combos = live_combinations(product_id)
    variants = (
        ProductVariant.live()
        .filter(ProductVariant.product_id == product_id)
        .order_by(ProductVariant.is_default.desc(), ProductVariant.id)
        .all()
    )
    return {
        "productId": product_id,
        "variants": [
            serializers.variant(
                v, serializers.selected_options(schema, [val for _, val in combos.get(v.id, ())])
            )
            for v in variants
        ],
        "total": len(variants),
    }


def find_variant_by_options(product_id, selection, actor):
    """Resolve an ``{option name: value}`` selection to a live variant.

    Names must all be options of the product. A selection that leaves some
    options unconstrained matches any variant agreeing on the given pairs; the
    default variant wins, then the lowest id.
    """
    product = get_product(product_id)
    ensure_can_read(actor, product)

    if not selection:
        raise ValidationFailed("At least one option must be selected", code="INVALID_OPTION")

    schema = load_schema(product_id)
    if not schema.options:
        raise ValidationFailed("Product has no options defined", code="INVALID_OPTION")

    wanted = set()
    missing_value = False
    for name, value in selection.items():
        option = schema.option_by_name.get(name)
        if option is None:
            raise ValidationFailed.field(name, f"Invalid option name: {name}", code="INVALID_OPTION")
        if not isinstance(value, str) or not value:
            raise ValidationFailed.field(name, f"Value is required for option: {name}")
        row = schema.value_lookup.get((option.id, value))
        if row is None:
            missing_value = True
        else:
            wanted.add((option.id, row.id))

    candidates = []
    if not missing_value:
        candidates = [
            variant_id for variant_id, combo in live_combinations(product_id).items()
            if wanted <= combo
        ]
    if not candidates:
        raise NotFound("No variant found with the selected options", code="VARIANT_NOT_FOUND")

    variant = (
        ProductVariant.live()
        .filter(ProductVariant.id.in_(candidates))
        .order_by(ProductVariant.is_default.desc(), ProductVariant.id)
        .first()
    )
    selected = serializers.selected_options(schema, variant_value_ids(variant.id))
    return serializers.variant(variant, selected)
