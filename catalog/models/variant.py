from catalog.extensions import db
from catalog.models.base import SoftDeleteMixin, TimestampMixin
from catalog.models.types import StringArray


class ProductVariant(TimestampMixin, SoftDeleteMixin, db.Model):
    __tablename__ = "product_variants"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    sku = db.Column(db.String(100), nullable=False, default="")  # not unique
    price = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    images = db.Column(StringArray, default=list)
    allow_purchase = db.Column(db.Boolean, nullable=False, default=True)
    is_popular = db.Column(db.Boolean, nullable=False, default=False)
    is_default = db.Column(db.Boolean, nullable=False, default=False)

    @property
    def in_stock(self):
        return bool(self.allow_purchase and (self.stock or 0) > 0)

    def __repr__(self):
        return f"<ProductVariant {self.id} of {self.product_id}>"


class VariantOptionValue(SoftDeleteMixin, db.Model):
    __tablename__ = "variant_option_values"

    id = db.Column(db.Integer, primary_key=True)
    variant_id = db.Column(
        db.Integer,
        db.ForeignKey("product_variants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    option_id = db.Column(
        db.Integer,
        db.ForeignKey("product_options.id", ondelete="CASCADE"),
        nullable=False,
    )
    option_value_id = db.Column(
        db.Integer,
        db.ForeignKey("product_option_values.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        db.UniqueConstraint("variant_id", "option_id", name="uq_variant_option"),
    )

    def __repr__(self):
        return f"<VariantOptionValue v{self.variant_id} o{self.option_id}={self.option_value_id}>"
