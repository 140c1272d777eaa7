import os


def _database_uri():
    """Build the SQLAlchemy URI from DATABASE_URL or the DB_* components."""
    url = os.environ.get("DATABASE_URL")
    if url:
        # Fix Heroku/Railway postgres:// → postgresql://
        if url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql://", 1)
        return url

    host = os.environ.get("DB_HOST", "localhost")
    port = os.environ.get("DB_PORT", "5432")
    user = os.environ.get("DB_USER", "catalog")
    password = os.environ.get("DB_PASSWORD", "catalog")
    name = os.environ.get("DB_NAME", "catalog")
    sslmode = os.environ.get("DB_SSLMODE", "disable")
    return f"postgresql://{user}:{password}@{host}:{port}/{name}?sslmode={sslmode}"


class Config:
    """Base configuration. All values from env vars."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,
        "isolation_level": "READ COMMITTED",
    }

    # Auth
    JWT_SECRET = os.environ.get("JWT_SECRET", "dev-jwt-secret-change-me")
    JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
    JWT_EXPIRY_HOURS = int(os.environ.get("JWT_EXPIRY_HOURS", "24"))

    # Cache
    REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
    CACHE_TTL_SECONDS = int(os.environ.get("CACHE_TTL_SECONDS", "300"))

    # Batch fetch helper
    BATCH_FETCH_SIZE = int(os.environ.get("BATCH_FETCH_SIZE", "100"))
    BATCH_FETCH_WORKERS = int(os.environ.get("BATCH_FETCH_WORKERS", "4"))


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", "sqlite:///catalog_dev.db"
    )
    SQLALCHEMY_ENGINE_OPTIONS = {}  # SQLite doesn't support pool_size
    REDIS_URL = os.environ.get("REDIS_URL", "")  # optional in dev


class ProductionConfig(Config):
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PREFERRED_URL_SCHEME = "https"

    @classmethod
    def init_app(cls, app):
        import logging
        import sys

        assert app.config["SECRET_KEY"] != "dev-secret-change-me", (
            "SECRET_KEY must be set in production"
        )
        assert app.config["JWT_SECRET"] != "dev-jwt-secret-change-me", (
            "JWT_SECRET must be set in production"
        )

        # Stream logs to stdout
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.INFO)
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"
        )
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)
        app.logger.setLevel(logging.INFO)
        logging.getLogger("catalog").addHandler(handler)
        logging.getLogger("catalog").setLevel(logging.INFO)
        app.logger.info("Catalog service starting in production mode")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    REDIS_URL = ""
    JWT_SECRET = "test-jwt-secret"
    BATCH_FETCH_SIZE = 100


config_map = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
