from catalog.models.category import Category
from catalog.models.product import Product
from catalog.models.option import ProductOption, ProductOptionValue
from catalog.models.variant import ProductVariant, VariantOptionValue
from catalog.models.attribute import AttributeDefinition, ProductAttribute

__all__ = [
    "Category",
    "Product",
    "ProductOption",
    "ProductOptionValue",
    "ProductVariant",
    "VariantOptionValue",
    "AttributeDefinition",
    "ProductAttribute",
]
