"""Product rows used by seeding and admin tooling."""
import logging
from catalog.errors import Conflict, ValidationFailed
from catalog.extensions import db
from catalog.models.product import Product
from catalog.models.variant import ProductVariant
from catalog.services.persistence import atomic

logger = logging.getLogger(__name__)


def create_product(seller_id, name, sku, price, category_id=None, brand="",
                   currency="USD", tags=None, images=None, description=""):
    """Create a product owned by ``seller_id``. SKU must be unused."""
    if not isinstance(sku, str) or not sku.strip():
        raise ValidationFailed.field("sku", "sku is required")
    if price is None or price < 0:
        raise ValidationFailed.field("price", "price must not be negative")
    sku = sku.strip()

    def work():
        if Product.query.filter_by(sku=sku).first() is not None:
            raise Conflict("Product with this SKU already exists", code="PRODUCT_EXISTS")
        product = Product(
            seller_id=seller_id,
            category_id=category_id,
            name=name,
            brand=brand,
            sku=sku,
            price=price,
            currency=currency,
            short_description=description[:500],
            long_description=description,
            tags=tags or [],
            images=images or [],
        )
        db.session.add(product)
        db.session.flush()
        return product

    product = atomic(work)
    logger.info("Created product %s (%d) for seller %d", sku, product.id, seller_id)
    return product


def get_stats():
    """Live variant counts per live product, as (sku, name, count) rows."""
    return (
        db.session.query(Product.sku, Product.name, db.func.count(ProductVariant.id))
        .outerjoin(
            ProductVariant,
            db.and_(
                ProductVariant.product_id == Product.id,
                ProductVariant.deleted_at.is_(None),
            ),
        )
        .filter(Product.deleted_at.is_(None))
        .group_by(Product.id, Product.sku, Product.name)
        .order_by(Product.sku)
        .all()
    )
