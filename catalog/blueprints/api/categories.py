"""Category endpoints."""
from catalog.blueprints.api import api_bp, respond
from catalog.auth import admin_required
from catalog.services import category_service


@api_bp.route("/categories", methods=["GET"])
def list_categories():
    return respond(category_service.get_category_tree(), "Categories retrieved successfully")


@api_bp.route("/categories/<int:category_id>", methods=["DELETE"])
@admin_required
def delete_category(category_id):
    category_service.delete_category(category_id)
    return respond(None, "Category deleted successfully")
