from __future__ import annotations

from ..extensions import db
from marketplace.time_utils import to_utc_z, utcnow

OFFER_STATUS_SUBMITTED = "submitted"
OFFER_STATUS_APPROVED = "approved"
OFFER_STATUS_REJECTED = "rejected"
OFFER_STATUS_NEEDS_REVISION = "needs_revision"
OFFER_STATUSES = (
    OFFER_STATUS_SUBMITTED,
    OFFER_STATUS_APPROVED,
    OFFER_STATUS_REJECTED,
    OFFER_STATUS_NEEDS_REVISION,
)
# Statuses that close a review and stamp reviewed_at
REVIEWED_STATUSES = {OFFER_STATUS_APPROVED, OFFER_STATUS_REJECTED}


def _number(value):
    return float(value) if value is not None else None


class Offer(db.Model):
    """
    Weekly supply offer submitted by a producer.

    Owns its line items (OfferProduct), which own their daily quantities.
    """
    __tablename__ = "offers"
    __table_args__ = (
        db.Index("ix_offers_producer_status", "producer_id", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    producer_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    week_number = db.Column(db.Integer, nullable=False)
    description = db.Column(db.Text, nullable=True)
    status = db.Column(db.String(32), nullable=False, default=OFFER_STATUS_SUBMITTED, index=True)
    feedback = db.Column(db.Text, nullable=True)

    # Python-side default keeps sub-second ordering for newest-first listings
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
    reviewed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    producer = db.relationship("User", back_populates="offers")
    products = db.relationship(
        "OfferProduct",
        backref="offer",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="OfferProduct.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "producer_id": self.producer_id,
            "producer_name": self.producer.company_name if self.producer else None,
            "week_number": self.week_number,
            "description": self.description,
            "status": self.status,
            "feedback": self.feedback,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
            "reviewed_at": to_utc_z(self.reviewed_at) if self.reviewed_at else None,
            "products": [p.to_dict() for p in self.products],
        }


class OfferProduct(db.Model):
    """Line item of an offer: one product with its price and per-day quantities."""
    __tablename__ = "offer_products"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    offer_id = db.Column(db.Integer, db.ForeignKey("offers.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = db.Column(db.String(128), db.ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    variety = db.Column(db.String(255), nullable=True)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    total_quantity = db.Column(db.Numeric(10, 2), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    daily_quantities = db.relationship(
        "DailyQuantity",
        backref="offer_product",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="DailyQuantity.id",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "produceName": self.product_id,
            "variety": self.variety,
            "price": _number(self.price),
            "totalQuantity": _number(self.total_quantity),
            "dailyQuantities": {d.day_of_week: _number(d.quantity) for d in self.daily_quantities},
        }


class DailyQuantity(db.Model):
    __tablename__ = "daily_quantities"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    offer_product_id = db.Column(
        db.Integer, db.ForeignKey("offer_products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day_of_week = db.Column(db.String(16), nullable=False)
    quantity = db.Column(db.Numeric(10, 2), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
