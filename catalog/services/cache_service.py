"""Best-effort read cache for per-product views.

Cache errors never fail a request: reads fall through to the store and
invalidation failures are logged.
"""
import json
import logging
from flask import current_app
from catalog import extensions

logger = logging.getLogger(__name__)

KEY_PREFIX = "catalog:product"


def attributes_key(product_id):
    return f"{KEY_PREFIX}:{product_id}:attributes"


def options_key(product_id):
    return f"{KEY_PREFIX}:{product_id}:options"


def get_json(key):
    try:
        raw = extensions.redis_client.get(key)
    except Exception as e:
        logger.warning("Cache read failed for %s: %s", key, e)
        return None
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return None


def set_json(key, value):
    ttl = current_app.config.get("CACHE_TTL_SECONDS", 300)
    try:
        extensions.redis_client.set(key, json.dumps(value), ex=ttl)
    except Exception as e:
        logger.warning("Cache write failed for %s: %s", key, e)


def invalidate_product(product_id):
    """Drop every cached view of a product."""
    try:
        extensions.redis_client.delete(attributes_key(product_id), options_key(product_id))
    except Exception as e:
        logger.warning("Cache invalidation failed for product %s: %s", product_id, e)
