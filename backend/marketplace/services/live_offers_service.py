# Overview: Offer repository, document path (one document per offer, embedded line items).

from __future__ import annotations

from flask import current_app

from ..activity import activity
from ..models.offers import OFFER_STATUS_SUBMITTED, REVIEWED_STATUSES
from ..notifications import show_error, show_success
from .document_store import COLLECTION_OFFERS, LiveCollection, get_document_store, DocumentStore
from marketplace.time_utils import utcnow_iso

SCOPE = "offers"


def offers_feed(store: DocumentStore) -> LiveCollection:
    """Live snapshot of all offers, newest first."""
    return LiveCollection(store, COLLECTION_OFFERS, order_by="timestamp", descending=True)


def list_offers(producer_id=None, status: str | None = None) -> list[dict]:
    where = []
    if producer_id is not None:
        where.append(("producerId", "==", producer_id))
    if status:
        where.append(("status", "==", status))
    return get_document_store().query(COLLECTION_OFFERS, where=where, order_by="timestamp", descending=True)


def get_offer(offer_id: str) -> dict | None:
    return get_document_store().get(COLLECTION_OFFERS, offer_id)


def add_offer(offer_data: dict) -> dict | None:
    """
    Store a new offer. Status always starts at "submitted" whatever the
    caller sent. Returns the stored document, or None on failure.
    """
    with activity.track(SCOPE):
        try:
            data = {
                **offer_data,
                "timestamp": utcnow_iso(),
                "status": OFFER_STATUS_SUBMITTED,
            }
            created = get_document_store().add(COLLECTION_OFFERS, data)
            show_success("Offer submitted successfully")
            return created
        except Exception as e:
            current_app.logger.exception("Error adding offer")
            show_error(str(e) or "Failed to submit offer")
            return None


def update_offer(offer_id: str, offer_data: dict) -> bool:
    """Merge top-level fields; nested maps are replaced, not merged."""
    with activity.track(SCOPE):
        try:
            data = {**offer_data, "lastModified": utcnow_iso()}
            get_document_store().update(COLLECTION_OFFERS, offer_id, data)
            show_success("Offer updated successfully")
            return True
        except Exception as e:
            current_app.logger.exception("Error updating offer")
            show_error(str(e) or "Failed to update offer")
            return False


def delete_offer(offer_id: str) -> bool:
    # Line items are embedded, so removing the document removes them too.
    with activity.track(SCOPE):
        try:
            get_document_store().delete(COLLECTION_OFFERS, offer_id)
            show_success("Offer deleted successfully")
            return True
        except Exception as e:
            current_app.logger.exception("Error deleting offer")
            show_error(str(e) or "Failed to delete offer")
            return False


def update_offer_status(
    offer_id: str,
    status: str,
    feedback: str | None = None,
    delivery_allocations: dict | None = None,
) -> bool:
    update_data = {"status": status}
    if feedback:
        update_data["feedback"] = feedback
    if delivery_allocations:
        update_data["deliveryAllocations"] = delivery_allocations
    if status in REVIEWED_STATUSES:
        update_data["reviewedAt"] = utcnow_iso()
    return update_offer(offer_id, update_data)


def update_delivery_allocations(offer_id: str, allocations: dict) -> bool:
    return update_offer(offer_id, {"deliveryAllocations": allocations})
