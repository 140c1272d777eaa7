from catalog.extensions import db
from catalog.models.base import SoftDeleteMixin, TimestampMixin
from catalog.models.types import StringArray


class Product(TimestampMixin, SoftDeleteMixin, db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    seller_id = db.Column(db.Integer, nullable=False, index=True)
    category_id = db.Column(
        db.Integer,
        db.ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=True,
        index=True,
    )
    name = db.Column(db.String(200), nullable=False)
    brand = db.Column(db.String(100), default="")
    sku = db.Column(db.String(50), unique=True, nullable=False, index=True)
    price = db.Column(db.Numeric(12, 2, asdecimal=False), nullable=False, default=0)
    currency = db.Column(db.String(3), nullable=False, default="USD")
    short_description = db.Column(db.String(500), default="")
    long_description = db.Column(db.Text, default="")
    images = db.Column(StringArray, default=list)
    tags = db.Column(StringArray, default=list)
    is_popular = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def __repr__(self):
        return f"<Product {self.sku}: {self.name}>"
