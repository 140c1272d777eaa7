"""Transaction scoping and typed lookups against the catalog store."""
import logging
from flask import g
from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError, SQLAlchemyError
from catalog.errors import Conflict, Integrity, Internal, Transient, product_not_found
from catalog.extensions import db
from catalog.models.product import Product

logger = logging.getLogger(__name__)

# SQLSTATE classes reported by PostgreSQL
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"


def atomic(work):
    """Run ``work()`` inside a single transaction.

    The outermost call commits on success and rolls back on any error; nested
    calls join the enclosing transaction. Store errors are translated into
    catalog error kinds.
    """
    depth = g.get("_atomic_depth", 0)
    g._atomic_depth = depth + 1
    try:
        result = work()
        if depth == 0:
            db.session.commit()
        return result
    except SQLAlchemyError as exc:
        if depth == 0:
            db.session.rollback()
        raise translate_db_error(exc) from exc
    except Exception:
        if depth == 0:
            db.session.rollback()
        raise
    finally:
        g._atomic_depth = depth


def translate_db_error(exc):
    """Map a SQLAlchemy error onto Conflict, Integrity, Transient or Internal."""
    if isinstance(exc, IntegrityError):
        pgcode = getattr(exc.orig, "pgcode", None)
        text = str(exc.orig).lower()
        if pgcode == _FOREIGN_KEY_VIOLATION or "foreign key" in text:
            return Integrity("Referenced record is missing or still in use")
        if pgcode == _UNIQUE_VIOLATION or "unique" in text:
            return Conflict("Record violates a uniqueness constraint")
        return Integrity()
    if isinstance(exc, OperationalError) or (
        isinstance(exc, DBAPIError) and exc.connection_invalidated
    ):
        logger.warning("Transient database error: %s", exc)
        return Transient()
    logger.exception("Unexpected database error")
    return Internal()


def get_product(product_id, lock=False):
    """Load a live product or raise NotFound.

    With ``lock=True`` the row is selected FOR UPDATE so writers on the same
    product serialise for the rest of the transaction.
    """
    query = Product.live().filter(Product.id == product_id)
    if lock:
        query = query.with_for_update()
    product = query.first()
    if product is None:
        raise product_not_found()
    return product
