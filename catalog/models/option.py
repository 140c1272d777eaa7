from catalog.extensions import db
from catalog.models.base import TimestampMixin


class ProductOption(TimestampMixin, db.Model):
    __tablename__ = "product_options"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(50), nullable=False)  # "Size", "Color"
    display_name = db.Column(db.String(100), nullable=False, default="")
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint("product_id", "name", name="uq_product_option_name"),
    )

    def __repr__(self):
        return f"<ProductOption {self.product_id}/{self.name}>"


class ProductOptionValue(TimestampMixin, db.Model):
    __tablename__ = "product_option_values"

    id = db.Column(db.Integer, primary_key=True)
    option_id = db.Column(
        db.Integer,
        db.ForeignKey("product_options.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value = db.Column(db.String(100), nullable=False)  # "Black"
    display_name = db.Column(db.String(100), nullable=False, default="")
    color_code = db.Column(db.String(7))  # "#000000"
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint("option_id", "value", name="uq_option_value"),
    )

    def __repr__(self):
        return f"<ProductOptionValue {self.option_id}: {self.value}>"
