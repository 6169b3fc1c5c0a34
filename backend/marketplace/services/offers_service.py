"""
Offer repository, relational path.

An offer is written as one header row, one offer_products row per product,
and one daily_quantities row per (day, quantity) pair, all inside a single
transaction. Reads return each offer as a JSON-shaped dict with its line
items and their day -> quantity maps.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import selectinload

from ..extensions import db
from ..models import Offer, OfferProduct, DailyQuantity
from ..validation import to_decimal
from marketplace.time_utils import utcnow


class OfferError(Exception):
    """Raised for offer operation errors."""
    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


def _product_ref(product: dict) -> str | None:
    # "produceName" is the legacy key for the product reference
    return product.get("productId") or product.get("produceName")


def _total_quantity(product: dict, daily: dict) -> Decimal | None:
    if product.get("totalQuantity") is not None:
        return to_decimal(product["totalQuantity"])
    parsed = [to_decimal(q) for q in daily.values()]
    if any(q is None for q in parsed):
        return None
    return sum(parsed, Decimal("0"))


def create_offer(
    producer_id: int,
    week_number: int,
    description: str | None,
    status: str,
    products: list[dict],
) -> int:
    """
    Insert an offer with its line items and daily quantities atomically.

    Any failing insert rolls back the whole offer and the error propagates.
    Returns the new offer id.
    """
    if not products:
        raise OfferError("An offer needs at least one product")

    try:
        offer = Offer(
            producer_id=producer_id,
            week_number=week_number,
            description=description,
            status=status,
        )
        db.session.add(offer)
        db.session.flush()

        for product in products:
            daily = product.get("dailyQuantities") or {}
            line = OfferProduct(
                offer_id=offer.id,
                product_id=_product_ref(product),
                variety=product.get("variety"),
                price=to_decimal(product.get("price")),
                total_quantity=_total_quantity(product, daily),
            )
            db.session.add(line)
            db.session.flush()

            for day, quantity in daily.items():
                db.session.add(DailyQuantity(
                    offer_product_id=line.id,
                    day_of_week=day,
                    quantity=to_decimal(quantity),
                ))
            db.session.flush()

        offer_id = offer.id
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    return offer_id


def _offers_query():
    return db.session.query(Offer).options(
        selectinload(Offer.products).selectinload(OfferProduct.daily_quantities),
        selectinload(Offer.producer),
    )


def get_offers(producer_id: int | None = None, status: str | None = None) -> list[dict]:
    """Offers newest first. Filters are ANDed; None means no constraint."""
    q = _offers_query()
    if producer_id is not None:
        q = q.filter(Offer.producer_id == producer_id)
    if status:
        q = q.filter(Offer.status == status)
    offers = q.order_by(Offer.created_at.desc(), Offer.id.desc()).all()
    return [o.to_dict() for o in offers]


def get_offer(offer_id: int) -> dict | None:
    offer = _offers_query().filter(Offer.id == offer_id).first()
    return offer.to_dict() if offer else None


def update_offer_status(
    offer_id: int,
    status: str,
    feedback: str | None = None,
    *,
    reviewed: bool = True,
) -> bool:
    """
    Set status and feedback and stamp the review time.

    Any status string is accepted; transitions are not validated here.
    Pass reviewed=False to leave reviewed_at untouched.
    """
    offer = db.session.get(Offer, offer_id)
    if not offer:
        return False

    now = utcnow()
    offer.status = status
    offer.feedback = feedback
    if reviewed:
        offer.reviewed_at = now
    offer.updated_at = now
    db.session.commit()
    return True


def delete_offer(offer_id: int) -> bool:
    """Delete an offer; its line items and daily quantities go with it."""
    offer = db.session.get(Offer, offer_id)
    if not offer:
        return False
    db.session.delete(offer)
    db.session.commit()
    return True
