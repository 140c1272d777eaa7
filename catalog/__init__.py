import os
from flask import Flask
from dotenv import load_dotenv
from werkzeug.exceptions import HTTPException

load_dotenv()


def create_app(config_name=None):
    flask_app = Flask(__name__)

    if config_name is None:
        config_name = os.environ.get("FLASK_ENV")
        if not config_name:
            # Default to production on managed platforms to avoid accidental
            # debug mode/weak defaults when env selection is omitted.
            if os.environ.get("RAILWAY_ENVIRONMENT") or os.environ.get("PORT"):
                config_name = "production"
            else:
                config_name = "development"

    from catalog.config import config_map

    config_cls = config_map.get(config_name, config_map["development"])
    flask_app.config.from_object(config_cls)

    if hasattr(config_cls, "init_app"):
        config_cls.init_app(flask_app)

    # Initialize extensions
    from catalog.extensions import db, migrate, init_redis

    db.init_app(flask_app)
    migrate.init_app(flask_app, db)
    init_redis(flask_app)

    # Import models so Alembic sees them
    from catalog.models import (  # noqa: F401
        AttributeDefinition,
        Category,
        Product,
        ProductAttribute,
        ProductOption,
        ProductOptionValue,
        ProductVariant,
        VariantOptionValue,
    )

    # Register blueprints
    from catalog.blueprints.api import api_bp

    flask_app.register_blueprint(api_bp, url_prefix="/api")

    # Register CLI commands
    from catalog.cli import register_cli

    register_cli(flask_app)

    register_error_handlers(flask_app)

    # Health check
    @flask_app.route("/health")
    def health():
        from catalog import extensions

        checks = {"status": "ok"}
        try:
            db.session.execute(db.text("SELECT 1"))
            checks["db"] = "ok"
        except Exception:
            flask_app.logger.exception("Health check DB query failed")
            checks["db"] = "error"
            checks["status"] = "degraded"
        try:
            if isinstance(extensions.redis_client, extensions.NullCache):
                checks["redis"] = "not configured"
            else:
                extensions.redis_client.ping()
                checks["redis"] = "ok"
        except Exception:
            flask_app.logger.exception("Health check Redis ping failed")
            checks["redis"] = "error"
            checks["status"] = "degraded"
        status_code = 200 if checks["status"] == "ok" else 503
        return checks, status_code

    return flask_app


def register_error_handlers(flask_app):
    from catalog.errors import CatalogError

    @flask_app.errorhandler(CatalogError)
    def handle_catalog_error(error):
        return error.to_dict(), error.status_code

    @flask_app.errorhandler(HTTPException)
    def handle_http_error(error):
        code = (error.name or "error").upper().replace(" ", "_")
        body = {"success": False, "message": error.description, "code": code}
        return body, error.code

    @flask_app.errorhandler(Exception)
    def handle_unexpected(error):
        flask_app.logger.exception("Unhandled error")
        body = {
            "success": False,
            "message": "An internal error occurred",
            "code": "INTERNAL_ERROR",
        }
        return body, 500
