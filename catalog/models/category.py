from catalog.extensions import db
from catalog.models.base import SoftDeleteMixin, TimestampMixin


class Category(TimestampMixin, SoftDeleteMixin, db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    parent_id = db.Column(
        db.Integer,
        db.ForeignKey("categories.id", ondelete="RESTRICT"),
        nullable=True,  # NULL marks a root category
        index=True,
    )
    description = db.Column(db.Text, default="")

    __table_args__ = (
        db.UniqueConstraint("name", "parent_id", name="uq_category_name_parent"),
    )

    @property
    def is_root(self):
        return self.parent_id is None

    def __repr__(self):
        return f"<Category {self.id}: {self.name}>"
