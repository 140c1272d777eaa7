"""Product attribute and attribute definition endpoints."""
from flask import g
from catalog.blueprints.api import api_bp, json_body, respond
from catalog.auth import admin_required, public_api, seller_or_admin_required
from catalog.services import attribute_service


@api_bp.route("/products/<int:product_id>/attributes", methods=["POST"])
@seller_or_admin_required
def set_product_attribute(product_id):
    data = attribute_service.set_product_attribute(product_id, json_body(), g.actor)
    return respond(data, "Product attribute created successfully", 201)


@api_bp.route("/products/<int:product_id>/attributes", methods=["GET"])
@public_api
def list_product_attributes(product_id):
    data = attribute_service.list_product_attributes(product_id, g.actor)
    return respond(data, "Product attributes retrieved successfully")


@api_bp.route("/products/<int:product_id>/attributes/bulk", methods=["PUT"])
@seller_or_admin_required
def bulk_update_product_attributes(product_id):
    data = attribute_service.bulk_update_product_attributes(product_id, json_body(), g.actor)
    return respond(data, "Product attributes updated successfully")


@api_bp.route("/products/<int:product_id>/attributes/<int:attribute_id>", methods=["PUT"])
@seller_or_admin_required
def update_product_attribute(product_id, attribute_id):
    data = attribute_service.update_product_attribute(
        product_id, attribute_id, json_body(), g.actor
    )
    return respond(data, "Product attribute updated successfully")


@api_bp.route("/products/<int:product_id>/attributes/<int:attribute_id>", methods=["DELETE"])
@seller_or_admin_required
def delete_product_attribute(product_id, attribute_id):
    attribute_service.delete_product_attribute(product_id, attribute_id, g.actor)
    return respond(None, "Product attribute deleted successfully")


# --- Definitions ---


@api_bp.route("/attributes", methods=["GET"])
def list_attribute_definitions():
    return respond(attribute_service.list_attribute_definitions(), "Attributes retrieved successfully")


@api_bp.route("/attributes/<int:definition_id>/mode", methods=["PUT"])
@admin_required
def set_attribute_mode(definition_id):
    body = json_body()
    mode = body.get("mode") if isinstance(body, dict) else None
    data = attribute_service.set_definition_mode(definition_id, mode)
    return respond(data, "Attribute updated successfully")


@api_bp.route("/attributes/<int:definition_id>", methods=["DELETE"])
@admin_required
def delete_attribute_definition(definition_id):
    attribute_service.delete_attribute_definition(definition_id)
    return respond(None, "Attribute deleted successfully")
