"""Option schema endpoints."""
from flask import g
from catalog.blueprints.api import api_bp, json_body, respond
from catalog.auth import public_api, seller_or_admin_required
from catalog.services import option_service


@api_bp.route("/products/<int:product_id>/options", methods=["POST"])
@seller_or_admin_required
def create_option(product_id):
    data = option_service.create_option_with_values(product_id, json_body(), g.actor)
    return respond(data, "Product option created successfully", 201)


@api_bp.route("/products/<int:product_id>/options/<int:option_id>/values", methods=["POST"])
@seller_or_admin_required
def add_option_value(product_id, option_id):
    data = option_service.add_option_value(product_id, option_id, json_body(), g.actor)
    return respond(data, "Option value added successfully", 201)


@api_bp.route("/products/<int:product_id>/options", methods=["GET"])
@public_api
def list_options(product_id):
    data = option_service.get_available_options(product_id, g.actor)
    return respond(data, "Product options retrieved successfully")


@api_bp.route("/products/<int:product_id>/options/<int:option_id>", methods=["PUT"])
@seller_or_admin_required
def update_option(product_id, option_id):
    data = option_service.update_option(product_id, option_id, json_body(), g.actor)
    return respond(data, "Product option updated successfully")


@api_bp.route("/products/<int:product_id>/options/<int:option_id>", methods=["DELETE"])
@seller_or_admin_required
def delete_option(product_id, option_id):
    option_service.delete_option(product_id, option_id, g.actor)
    return respond(None, "Product option deleted successfully")


@api_bp.route(
    "/products/<int:product_id>/options/<int:option_id>/values/<int:value_id>", methods=["PUT"]
)
@seller_or_admin_required
def update_option_value(product_id, option_id, value_id):
    data = option_service.update_option_value(
        product_id, option_id, value_id, json_body(), g.actor
    )
    return respond(data, "Option value updated successfully")


@api_bp.route(
    "/products/<int:product_id>/options/<int:option_id>/values/<int:value_id>",
    methods=["DELETE"],
)
@seller_or_admin_required
def delete_option_value(product_id, option_id, value_id):
    option_service.delete_option_value(product_id, option_id, value_id, g.actor)
    return respond(None, "Option value deleted successfully")
