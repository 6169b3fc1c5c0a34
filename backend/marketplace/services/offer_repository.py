# Overview: One offer repository interface with relational and document implementations.

"""
Offer repository interface.

Both persistence paths expose the same capability set: create, list, get,
update_status, delete and subscribe. The HTTP layer talks to whichever
implementation the OFFER_STORE config key selects.

Shared semantics:
- create always starts an offer at "submitted"
- update_status accepts only the known statuses, but does not enforce an
  order between them
- the review timestamp is stamped only for approved/rejected
- subscribers receive the full newest-first snapshot after every write
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Callable

from flask import current_app

from ..models.offers import OFFER_STATUSES, OFFER_STATUS_SUBMITTED, REVIEWED_STATUSES
from ..notifications import show_error, show_success
from . import live_offers_service, offers_service
from .document_store import COLLECTION_OFFERS, DocumentStore
from .offers_service import OfferError

STORE_RELATIONAL = "relational"
STORE_DOCUMENT = "document"

SnapshotCallback = Callable[[list[dict]], None]


def _require_known_status(status: str) -> None:
    if status not in OFFER_STATUSES:
        raise OfferError(
            f"Unknown offer status: {status}",
            details={"allowed": list(OFFER_STATUSES)},
        )


class RepositorySubscription:
    def __init__(self, repository: "OfferRepository", callback: SnapshotCallback):
        self.repository = repository
        self.callback = callback
        self.active = True

    def deliver(self, snapshot: list[dict]) -> None:
        if not self.active:
            return
        try:
            self.callback(snapshot)
        except Exception:
            current_app.logger.exception("Offer subscriber failed")

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self.repository._remove_subscriber(self)


class OfferRepository(ABC):
    name: str = ""

    def __init__(self):
        self._subscribers: list[RepositorySubscription] = []
        self._lock = threading.Lock()

    @abstractmethod
    def create(self, data: dict) -> dict | None:
        """Store a new offer; returns it, or None on failure."""

    @abstractmethod
    def list(self, producer_id=None, status: str | None = None) -> list[dict]:
        """Offers newest first, optionally filtered."""

    @abstractmethod
    def get(self, offer_id) -> dict | None:
        ...

    @abstractmethod
    def update_status(self, offer_id, status: str, feedback: str | None = None) -> bool:
        """
        Set the status and optional feedback. Returns False (with an error
        notice) when the write fails.

        Raises OfferError for a status outside OFFER_STATUSES, before any
        write and without recording a notice.
        """

    @abstractmethod
    def delete(self, offer_id) -> bool:
        ...

    def subscribe(self, callback: SnapshotCallback) -> RepositorySubscription:
        """Deliver the current snapshot now and after every successful write."""
        sub = RepositorySubscription(self, callback)
        with self._lock:
            self._subscribers.append(sub)
        sub.deliver(self.list())
        return sub

    def _remove_subscriber(self, sub: RepositorySubscription) -> None:
        with self._lock:
            if sub in self._subscribers:
                self._subscribers.remove(sub)

    def _publish(self) -> None:
        with self._lock:
            subs = list(self._subscribers)
        if not subs:
            return
        snapshot = self.list()
        for sub in subs:
            sub.deliver(snapshot)


class RelationalOfferRepository(OfferRepository):
    name = STORE_RELATIONAL

    @staticmethod
    def _key(offer_id) -> int:
        try:
            return int(offer_id)
        except (TypeError, ValueError):
            raise OfferError(f"Invalid offer id: {offer_id}")

    def create(self, data: dict) -> dict | None:
        try:
            offer_id = offers_service.create_offer(
                producer_id=data.get("producerId"),
                week_number=data.get("weekNumber"),
                description=data.get("description"),
                status=OFFER_STATUS_SUBMITTED,
                products=data.get("products") or [],
            )
        except Exception as e:
            current_app.logger.exception("Error creating offer")
            show_error(str(e) or "Failed to submit offer")
            return None
        show_success("Offer submitted successfully")
        self._publish()
        return offers_service.get_offer(offer_id)

    def list(self, producer_id=None, status: str | None = None) -> list[dict]:
        if producer_id is not None:
            producer_id = self._key(producer_id)
        return offers_service.get_offers(producer_id=producer_id, status=status)

    def get(self, offer_id) -> dict | None:
        return offers_service.get_offer(self._key(offer_id))

    def update_status(self, offer_id, status: str, feedback: str | None = None) -> bool:
        _require_known_status(status)
        try:
            updated = offers_service.update_offer_status(
                self._key(offer_id),
                status,
                feedback,
                reviewed=status in REVIEWED_STATUSES,
            )
        except Exception as e:
            current_app.logger.exception("Error updating offer status")
            show_error(str(e) or "Failed to update offer status")
            return False
        if not updated:
            show_error("Offer not found")
            return False
        show_success("Offer updated successfully")
        self._publish()
        return True

    def delete(self, offer_id) -> bool:
        try:
            deleted = offers_service.delete_offer(self._key(offer_id))
        except Exception as e:
            current_app.logger.exception("Error deleting offer")
            show_error(str(e) or "Failed to delete offer")
            return False
        if not deleted:
            show_error("Offer not found")
            return False
        show_success("Offer deleted successfully")
        self._publish()
        return True


class DocumentOfferRepository(OfferRepository):
    """
    Document-backed offers. Subscriptions ride on the document store's own
    listeners, so every write to the offers collection reaches them.
    """
    name = STORE_DOCUMENT

    def __init__(self, store: DocumentStore):
        super().__init__()
        self.store = store

    def create(self, data: dict) -> dict | None:
        return live_offers_service.add_offer(data)

    def list(self, producer_id=None, status: str | None = None) -> list[dict]:
        return live_offers_service.list_offers(producer_id=producer_id, status=status)

    def get(self, offer_id) -> dict | None:
        return live_offers_service.get_offer(str(offer_id))

    def update_status(self, offer_id, status: str, feedback: str | None = None) -> bool:
        _require_known_status(status)
        return live_offers_service.update_offer_status(str(offer_id), status, feedback)

    def delete(self, offer_id) -> bool:
        return live_offers_service.delete_offer(str(offer_id))

    def subscribe(self, callback: SnapshotCallback):
        return self.store.subscribe(
            COLLECTION_OFFERS,
            callback,
            order_by="timestamp",
            descending=True,
        )


def build_offer_repository(kind: str, store: DocumentStore) -> OfferRepository:
    kind = (kind or STORE_DOCUMENT).lower().strip()
    if kind == STORE_RELATIONAL:
        return RelationalOfferRepository()
    if kind == STORE_DOCUMENT:
        return DocumentOfferRepository(store)
    raise ValueError(f"OFFER_STORE must be '{STORE_RELATIONAL}' or '{STORE_DOCUMENT}', got {kind!r}")


def get_offer_repository() -> OfferRepository:
    return current_app.extensions["offer_repository"]
