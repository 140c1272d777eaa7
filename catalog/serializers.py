"""Entity → response-shape mapping.

Soft-deleted rows never reach these functions; callers filter them out when
querying.
"""
from datetime import timezone


def isoformat(dt):
    """RFC 3339 timestamp in UTC. Naive datetimes are taken to be UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


# --- Options ---


def selected_options(schema, value_ids):
    """Selected option list for one variant, in the product's option order.

    ``value_ids`` is the iterable of ProductOptionValue ids bound to the variant.
    """
    chosen = {}
    for value_id in value_ids:
        value = schema.value_by_id.get(value_id)
        if value is not None:
            chosen[value.option_id] = value

    result = []
    for option in schema.options:
        value = chosen.get(option.id)
        if value is None:
            continue
        entry = {
            "optionId": option.id,
            "optionName": option.name,
            "optionDisplayName": option.display_name,
            "valueId": value.id,
            "value": value.value,
            "valueDisplayName": value.display_name,
        }
        if value.color_code:
            entry["colorCode"] = value.color_code
        result.append(entry)
    return result


def option_value(value, variant_count=None):
    data = {
        "id": value.id,
        "optionId": value.option_id,
        "value": value.value,
        "displayName": value.display_name,
        "position": value.sort_order,
        "createdAt": isoformat(value.created_at),
        "updatedAt": isoformat(value.updated_at),
    }
    if value.color_code:
        data["colorCode"] = value.color_code
    if variant_count is not None:
        data["variantCount"] = variant_count
    return data


def option(opt, values, variant_counts=None):
    counts = variant_counts or {}
    return {
        "id": opt.id,
        "productId": opt.product_id,
        "name": opt.name,
        "displayName": opt.display_name,
        "position": opt.sort_order,
        "values": [
            option_value(v, counts.get(v.id, 0) if variant_counts is not None else None)
            for v in values
        ],
        "createdAt": isoformat(opt.created_at),
        "updatedAt": isoformat(opt.updated_at),
    }


# --- Variants ---


def _variant_fields(variant):
    return {
        "id": variant.id,
        "sku": variant.sku,
        "price": variant.price,
        "stock": variant.stock,
        "images": list(variant.images or []),
        "allowPurchase": variant.allow_purchase,
        "inStock": variant.in_stock,
        "isPopular": variant.is_popular,
        "isDefault": variant.is_default,
    }


def variant(variant, selected):
    data = _variant_fields(variant)
    data["selectedOptions"] = selected
    return data


def variant_detail(variant, product, selected):
    data = _variant_fields(variant)
    data["productId"] = product.id
    data["product"] = {"id": product.id, "name": product.name, "brand": product.brand}
    data["selectedOptions"] = selected
    data["createdAt"] = isoformat(variant.created_at)
    data["updatedAt"] = isoformat(variant.updated_at)
    return data


def variant_summary(variant):
    """Compact shape used in bulk update responses."""
    return {
        "id": variant.id,
        "sku": variant.sku,
        "price": variant.price,
        "stock": variant.stock,
        "images": list(variant.images or []),
        "allowPurchase": variant.allow_purchase,
        "inStock": variant.in_stock,
        "isPopular": variant.is_popular,
        "isDefault": variant.is_default,
        "updatedAt": isoformat(variant.updated_at),
    }


# --- Attributes ---


def attribute_definition(definition):
    data = {
        "id": definition.id,
        "key": definition.key,
        "name": definition.name,
        "mode": definition.mode,
        "allowedValues": list(definition.allowed_values or []),
        "createdAt": isoformat(definition.created_at),
        "updatedAt": isoformat(definition.updated_at),
    }
    if definition.unit:
        data["unit"] = definition.unit
    return data


def product_attribute(attribute, definition):
    data = {
        "id": attribute.id,
        "productId": attribute.product_id,
        "attributeDefinitionId": attribute.attribute_definition_id,
        "attributeKey": definition.key,
        "attributeName": definition.name,
        "value": attribute.value,
        "sortOrder": attribute.sort_order,
        "createdAt": isoformat(attribute.created_at),
        "updatedAt": isoformat(attribute.updated_at),
    }
    if definition.unit:
        data["unit"] = definition.unit
    return data


# --- Categories ---


def category(cat):
    return {
        "id": cat.id,
        "name": cat.name,
        "parentId": cat.parent_id,
        "description": cat.description or "",
        "createdAt": isoformat(cat.created_at),
        "updatedAt": isoformat(cat.updated_at),
    }


def category_tree(categories):
    """Nest a flat category list under its roots via ``children``.

    Categories whose parent is not in the list are dropped, as are cycles.
    """
    nodes = {}
    by_parent = {}
    for cat in categories:
        nodes[cat.id] = category(cat)
        by_parent.setdefault(cat.parent_id, []).append(cat.id)

    def attach(node_id, seen):
        node = nodes[node_id]
        node["children"] = [
            attach(child_id, seen | {child_id})
            for child_id in sorted(by_parent.get(node_id, []), key=lambda i: nodes[i]["name"])
            if child_id not in seen
        ]
        return node

    roots = sorted(by_parent.get(None, []), key=lambda i: nodes[i]["name"])
    return [attach(root_id, {root_id}) for root_id in roots]
