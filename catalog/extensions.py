import logging
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
import redis as _redis

logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate()

# Initialized lazily in create_app
redis_client: _redis.Redis = None  # type: ignore


class NullCache:
    """No-op cache for development without Redis."""

    def get(self, key):
        return None

    def set(self, key, value, ex=None):
        return None

    def delete(self, *keys):
        return 0

    def ping(self):
        return False


def init_redis(app):
    global redis_client
    redis_url = app.config.get("REDIS_URL", "")
    if not redis_url:
        logger.warning("REDIS_URL not set, cache disabled (dev mode)")
        redis_client = NullCache()
        return

    try:
        redis_client = _redis.from_url(redis_url, decode_responses=True)
        redis_client.ping()
    except Exception as e:
        logger.warning("Redis connection failed (%s), cache disabled", e)
        redis_client = NullCache()
