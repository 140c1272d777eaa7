from catalog.extensions import db
from catalog.models.base import SoftDeleteMixin, TimestampMixin
from catalog.models.types import StringArray


class AttributeDefinition(TimestampMixin, db.Model):
    __tablename__ = "attribute_definitions"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(50), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    unit = db.Column(db.String(20))
    allowed_values = db.Column(StringArray, default=list)
    # OPEN: any value accepted, unseen values are recorded in allowed_values.
    # CLOSED: only allowed_values are accepted.
    mode = db.Column(db.String(10), nullable=False, default="OPEN")

    MODES = {"OPEN", "CLOSED"}

    @property
    def is_closed(self):
        return self.mode == "CLOSED"

    def accepts(self, value):
        if not self.is_closed:
            return True
        return value in (self.allowed_values or [])

    def remember(self, value):
        """Record a value seen on an OPEN definition. Returns True if added."""
        current = list(self.allowed_values or [])
        if self.is_closed or value in current:
            return False
        # Reassign so the change is flushed
        self.allowed_values = current + [value]
        return True

    def __repr__(self):
        return f"<AttributeDefinition {self.key} [{self.mode}]>"


class ProductAttribute(TimestampMixin, SoftDeleteMixin, db.Model):
    __tablename__ = "product_attributes"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    attribute_definition_id = db.Column(
        db.Integer,
        db.ForeignKey("attribute_definitions.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    value = db.Column(db.String(500), nullable=False)
    sort_order = db.Column(db.Integer, nullable=False, default=0)

    __table_args__ = (
        db.UniqueConstraint(
            "product_id", "attribute_definition_id", name="uq_product_attribute"
        ),
    )

    def __repr__(self):
        return f"<ProductAttribute p{self.product_id} d{self.attribute_definition_id}={self.value}>"
