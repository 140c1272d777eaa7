"""Variant endpoints under /api/products/<id>/variants."""
from flask import g, request
from catalog.blueprints.api import api_bp, json_body, respond
from catalog.auth import public_api, seller_or_admin_required
from catalog.services import variant_query_service, variant_service


@api_bp.route("/products/<int:product_id>/variants", methods=["POST"])
@seller_or_admin_required
def create_variant(product_id):
    data = variant_service.create_variant(product_id, json_body(), g.actor)
    return respond(data, "Variant created successfully", 201)


@api_bp.route("/products/<int:product_id>/variants", methods=["GET"])
@public_api
def list_variants(product_id):
    data = variant_query_service.list_variants(product_id, g.actor)
    return respond(data, "Variants retrieved successfully")


@api_bp.route("/products/<int:product_id>/variants/find", methods=["GET"])
@public_api
def find_variant(product_id):
    # First value wins for repeated parameters
    selection = {name: request.args.get(name) for name in request.args.keys()}
    data = variant_query_service.find_variant_by_options(product_id, selection, g.actor)
    return respond(data, "Variant retrieved successfully")


@api_bp.route("/products/<int:product_id>/variants/bulk", methods=["PUT"])
@seller_or_admin_required
def bulk_update_variants(product_id):
    data = variant_service.bulk_update_variants(product_id, json_body(), g.actor)
    return respond(data, "Variants updated successfully")


@api_bp.route("/products/<int:product_id>/variants/<int:variant_id>", methods=["GET"])
@public_api
def get_variant(product_id, variant_id):
    data = variant_query_service.get_variant_by_id(product_id, variant_id, g.actor)
    return respond(data, "Variant retrieved successfully")


@api_bp.route("/products/<int:product_id>/variants/<int:variant_id>", methods=["PUT"])
@seller_or_admin_required
def update_variant(product_id, variant_id):
    data = variant_service.update_variant(product_id, variant_id, json_body(), g.actor)
    return respond(data, "Variant updated successfully")


@api_bp.route("/products/<int:product_id>/variants/<int:variant_id>", methods=["DELETE"])
@seller_or_admin_required
def delete_variant(product_id, variant_id):
    variant_service.delete_variant(product_id, variant_id, g.actor)
    return respond(None, "Variant deleted successfully")
