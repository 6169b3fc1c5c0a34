"""
Authorization registry: which producer may offer which product.

Both add and remove are idempotent. Removal deletes every matching grant
in case duplicates slipped in; those deletes are independent, so a failure
part way through may leave earlier deletes committed.
"""

from __future__ import annotations

from flask import current_app

from ..activity import activity
from ..notifications import show_error, show_success
from .document_store import COLLECTION_AUTHORIZATIONS, get_document_store
from marketplace.time_utils import utcnow_iso

SCOPE = "authorizations"


def _matching(user_id, product_id) -> list[dict]:
    return get_document_store().query(
        COLLECTION_AUTHORIZATIONS,
        where=[("userId", "==", user_id), ("productId", "==", product_id)],
    )


def list_authorizations(user_id=None) -> list[dict]:
    where = [("userId", "==", user_id)] if user_id is not None else []
    return get_document_store().query(COLLECTION_AUTHORIZATIONS, where=where)


def is_authorized(user_id, product_id) -> bool:
    return bool(_matching(user_id, product_id))


def add_authorization(user_id, product_id) -> bool:
    if not user_id or not product_id:
        show_error("Invalid user or product ID")
        return False

    with activity.track(SCOPE):
        try:
            if _matching(user_id, product_id):
                return True

            get_document_store().add(COLLECTION_AUTHORIZATIONS, {
                "userId": user_id,
                "productId": product_id,
                "authorizedAt": utcnow_iso(),
            })
            show_success("Product authorized successfully")
            return True
        except Exception as e:
            current_app.logger.exception("Error adding authorization")
            show_error(str(e))
            return False


def remove_authorization(user_id, product_id) -> bool:
    if not user_id or not product_id:
        show_error("Invalid user or product ID")
        return False

    with activity.track(SCOPE):
        try:
            matches = _matching(user_id, product_id)
            if not matches:
                return True

            store = get_document_store()
            for grant in matches:
                store.delete(COLLECTION_AUTHORIZATIONS, grant["id"])
            show_success("Authorization removed successfully")
            return True
        except Exception as e:
            current_app.logger.exception("Error removing authorization")
            show_error(str(e))
            return False
