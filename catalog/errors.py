"""Error kinds raised by the catalog core.

Every error carries a human message and a stable machine code; the API layer
maps ``status_code`` to the HTTP response and renders ``code`` and ``errors``
in the response envelope.
"""


class CatalogError(Exception):
    status_code = 500
    default_code = "INTERNAL_ERROR"
    default_message = "An internal error occurred"

    def __init__(self, message=None, code=None, errors=None):
        self.message = message or self.default_message
        self.code = code or self.default_code
        self.errors = errors or []
        super().__init__(self.message)

    def to_dict(self):
        body = {"success": False, "message": self.message, "code": self.code}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationFailed(CatalogError):
    status_code = 400
    default_code = "VALIDATION_ERROR"
    default_message = "Validation failed"

    @classmethod
    def field(cls, field, message, code=None):
        """Validation failure for a single named field."""
        return cls(message, code=code, errors=[{"field": field, "message": message}])


class Unauthorized(CatalogError):
    status_code = 401
    default_code = "AUTH_REQUIRED"
    default_message = "Authentication required"


class Forbidden(CatalogError):
    status_code = 403
    default_code = "INSUFFICIENT_PERMISSIONS"
    default_message = "You don't have permission to perform this action"


class NotFound(CatalogError):
    status_code = 404
    default_code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(CatalogError):
    status_code = 409
    default_code = "CONFLICT"
    default_message = "Resource already exists"


class Integrity(CatalogError):
    status_code = 409
    default_code = "INTEGRITY_ERROR"
    default_message = "Operation violates a reference constraint"


class Transient(CatalogError):
    status_code = 503
    default_code = "TRANSIENT_ERROR"
    default_message = "Temporary storage failure, please retry"


class Internal(CatalogError):
    pass


def product_not_found():
    return NotFound("Product not found", code="PRODUCT_NOT_FOUND")


def variant_not_found():
    return NotFound("Variant not found", code="VARIANT_NOT_FOUND")


def option_not_found(name=None):
    message = "Product option not found"
    if name is not None:
        message = f"Product option not found: {name}"
    return NotFound(message, code="PRODUCT_OPTION_NOT_FOUND")


def option_value_not_found(value=None, option_name=None):
    message = "Product option value not found"
    if value is not None:
        message = f"Product option value not found: {value} for option: {option_name}"
    return NotFound(message, code="PRODUCT_OPTION_VALUE_NOT_FOUND")


def product_attribute_not_found():
    return NotFound("Product attribute not found", code="PRODUCT_ATTRIBUTE_NOT_FOUND")
