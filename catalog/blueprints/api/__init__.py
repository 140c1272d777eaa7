from flask import Blueprint, request
from catalog.errors import ValidationFailed

api_bp = Blueprint("api", __name__)


def respond(data=None, message="OK", status=200):
    """Success envelope shared by every API view."""
    return {"success": True, "message": message, "data": data}, status


def json_body():
    body = request.get_json(silent=True)
    if body is None:
        raise ValidationFailed("Invalid request format")
    return body


from catalog.blueprints.api import variants, options, attributes, categories  # noqa: F401, E402
