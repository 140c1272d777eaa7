"""Category hierarchy reads and guarded deletes."""
import logging
from catalog import serializers
from catalog.errors import Integrity, NotFound, ValidationFailed
from catalog.extensions import db
from catalog.models.category import Category
from catalog.models.product import Product
from catalog.services.persistence import atomic

logger = logging.getLogger(__name__)


def get_category(category_id):
    category = Category.live().filter(Category.id == category_id).first()
    if category is None:
        raise NotFound("Category not found", code="CATEGORY_NOT_FOUND")
    return category


def find_by_name_and_parent(name, parent_id=None):
    """The live category called ``name`` under ``parent_id``, or None."""
    query = Category.live().filter(Category.name == name)
    if parent_id is None:
        query = query.filter(Category.parent_id.is_(None))
    else:
        query = query.filter(Category.parent_id == parent_id)
    return query.first()


def create_category(name, parent_id=None, description=""):
    """Create a category, or return the existing one with the same name and parent."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationFailed.field("name", "name is required")
    name = name.strip()

    def work():
        if parent_id is not None and Category.live().filter(Category.id == parent_id).first() is None:
            raise ValidationFailed(
                "Parent category does not exist", code="INVALID_PARENT_CATEGORY"
            )
        existing = find_by_name_and_parent(name, parent_id)
        if existing is not None:
            return existing
        category = Category(name=name, parent_id=parent_id, description=description or "")
        db.session.add(category)
        db.session.flush()
        return category

    return atomic(work)


def get_category_tree():
    categories = Category.live().order_by(Category.name).all()
    return serializers.category_tree(categories)


def delete_category(category_id):
    """Soft-delete a category that has no live products or children."""

    def work():
        category = get_category(category_id)
        if Product.live().filter(Product.category_id == category_id).count():
            raise Integrity(
                "Category has products assigned", code="CATEGORY_HAS_PRODUCTS"
            )
        if Category.live().filter(Category.parent_id == category_id).count():
            raise Integrity(
                "Category has child categories", code="CATEGORY_HAS_CHILDREN"
            )
        category.soft_delete()
        db.session.flush()

    atomic(work)
    logger.info("Deleted category %d", category_id)
