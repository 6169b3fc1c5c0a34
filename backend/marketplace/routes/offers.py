# Overview: Flask API routes for weekly offers; parses input and returns JSON responses.

# backend/marketplace/routes/offers.py
"""
Offer routes.

All routes go through the configured OfferRepository (OFFER_STORE), except
the field-merge and delivery-allocation updates, which only the document
store supports.
"""

from flask import Blueprint, current_app, request

from ..responses import error_response, json_response, result_response
from ..services import live_offers_service
from ..services.offer_repository import STORE_DOCUMENT, get_offer_repository
from ..services.offers_service import OfferError
from ..validation import FormValidationError, ValidationError, require_valid, validate_offer

offers_bp = Blueprint("offers", __name__, url_prefix="/api/offers")

SERVER_STAMPED_FIELDS = ("status", "timestamp", "reviewedAt", "lastModified")


def _document_only():
    repo = get_offer_repository()
    if repo.name != STORE_DOCUMENT:
        return error_response(f"Not supported by the {repo.name} offer store", 409)
    return None


@offers_bp.get("")
def list_offers():
    """
    List offers newest first.

    Query params:
    - producer_id: only this producer's offers
    - status: only offers with this status
    """
    try:
        offers = get_offer_repository().list(
            producer_id=request.args.get("producer_id"),
            status=request.args.get("status"),
        )
        return json_response({"offers": offers})
    except OfferError as e:
        return error_response(str(e), 400, details=e.details)
    except Exception:
        current_app.logger.exception("Failed to list offers")
        return error_response("Internal server error", 500)


@offers_bp.get("/feed")
def offers_feed():
    """Latest snapshot held by the live offers feed (started on first use)."""
    feed = current_app.extensions["offers_feed"]
    if not feed.running:
        feed.start()
    if feed.error:
        return error_response("Failed to load offers", 503)
    return json_response({"offers": feed.items})


@offers_bp.get("/<offer_id>")
def get_offer(offer_id: str):
    try:
        offer = get_offer_repository().get(offer_id)
    except OfferError as e:
        return error_response(str(e), 400)
    if not offer:
        return error_response("Offer not found", 404)
    return json_response({"offer": offer})


@offers_bp.post("")
def create_offer():
    """
    Submit an offer.

    Body: {producerId, weekNumber, description?, products: [{productId |
    produceName, variety?, price, totalQuantity?, dailyQuantities}]}
    The stored status is always "submitted".
    """
    try:
        data = require_valid(validate_offer, request.get_json(silent=True))
    except FormValidationError as e:
        return error_response("Validation failed", 400, fields=e.errors)
    except ValidationError as e:
        return error_response(str(e), 400)

    if not data.get("producerId"):
        return error_response("producerId required", 400)

    offer = get_offer_repository().create(data)
    if offer is None:
        return error_response("Failed to submit offer", 400)
    return json_response({"offer": offer}, 201)


@offers_bp.patch("/<offer_id>/status")
def update_offer_status(offer_id: str):
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip()
    if not status:
        return error_response("status required", 400)

    try:
        ok = get_offer_repository().update_status(offer_id, status, data.get("feedback"))
    except OfferError as e:
        return error_response(str(e), 400, details=e.details)
    return result_response(ok)


@offers_bp.patch("/<offer_id>")
def update_offer(offer_id: str):
    """Merge top-level fields into a document offer."""
    unsupported = _document_only()
    if unsupported:
        return unsupported

    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return error_response("JSON object body required", 400)
    # Status and server timestamps are set only by the service; status has its own route
    for key in SERVER_STAMPED_FIELDS:
        data.pop(key, None)
    return result_response(live_offers_service.update_offer(offer_id, data))


@offers_bp.put("/<offer_id>/allocations")
def update_delivery_allocations(offer_id: str):
    unsupported = _document_only()
    if unsupported:
        return unsupported

    data = request.get_json(silent=True) or {}
    allocations = data.get("deliveryAllocations")
    if not isinstance(allocations, dict):
        return error_response("deliveryAllocations must be an object", 400)
    return result_response(live_offers_service.update_delivery_allocations(offer_id, allocations))


@offers_bp.delete("/<offer_id>")
def delete_offer(offer_id: str):
    try:
        ok = get_offer_repository().delete(offer_id)
    except OfferError as e:
        return error_response(str(e), 400)
    return result_response(ok)
