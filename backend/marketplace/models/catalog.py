from __future__ import annotations

from ..extensions import db
from marketplace.time_utils import to_utc_z


class Product(db.Model):
    """
    Catalog entry. The id is a slug derived from the product name
    (e.g. "cherry-tomatoes").
    """
    __tablename__ = "products"

    id = db.Column(db.String(128), primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    category = db.Column(db.String(64), nullable=False)
    unit = db.Column(db.String(32), nullable=False)
    box_size = db.Column(db.String(64), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    varieties = db.relationship(
        "ProductVariety",
        backref="product",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="ProductVariety.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "unit": self.unit,
            "box_size": self.box_size,
            "varieties": [v.name for v in self.varieties],
            "created_at": to_utc_z(self.created_at),
        }


class ProductVariety(db.Model):
    __tablename__ = "product_varieties"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.String(128), db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())


class AuthorizedProduct(db.Model):
    """Grant allowing a producer to submit offers for a product."""
    __tablename__ = "authorized_products"

    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    product_id = db.Column(db.String(128), db.ForeignKey("products.id", ondelete="CASCADE"), primary_key=True)
    authorized_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    product = db.relationship("Product")
    user = db.relationship(
        "User",
        backref=db.backref("authorized_products", lazy=True, cascade="all, delete-orphan"),
    )
