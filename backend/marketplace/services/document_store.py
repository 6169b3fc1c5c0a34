# Overview: Schemaless document collections with in-process change listeners.

"""
Document store backed by the `documents` table.

Each collection holds free-form JSON documents addressed by a generated id.
Writes commit immediately; after every successful write the store pushes the
full current snapshot of that collection to its active listeners.

Listeners are explicit resources: `subscribe()` returns a Subscription that
the caller cancels, and LiveCollection wraps one with start()/stop() so the
owner always holds at most one listener per feed.
"""

from __future__ import annotations

import json
import threading
import uuid
from typing import Any, Callable, Iterable

from flask import current_app

from ..extensions import db
from ..models import Document

COLLECTION_USERS = "users"
COLLECTION_PRODUCTS = "products"
COLLECTION_OFFERS = "offers"
COLLECTION_AUTHORIZATIONS = "authorizations"
COLLECTION_ALERTS = "alerts"
COLLECTION_NEWS = "news"

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a is not None and a < b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    ">=": lambda a, b: a is not None and a >= b,
    "in": lambda a, b: a in b,
    "not-in": lambda a, b: a not in b,
    "array-contains": lambda a, b: isinstance(a, list) and b in a,
}

Filter = tuple[str, str, Any]
SnapshotCallback = Callable[[list[dict]], None]
ErrorCallback = Callable[[Exception], None]


class DocumentNotFoundError(LookupError):
    """Raised when updating a document that does not exist."""

    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"No document to update: {collection}/{doc_id}")
        self.collection = collection
        self.doc_id = doc_id


class QueryError(ValueError):
    """Raised for malformed filters."""


def new_document_id() -> str:
    return uuid.uuid4().hex[:20]


def _matches(data: dict, filters: Iterable[Filter]) -> bool:
    for field, op, value in filters:
        fn = _OPERATORS.get(op)
        if fn is None:
            raise QueryError(f"Unsupported operator: {op}")
        try:
            if not fn(data.get(field), value):
                return False
        except TypeError:
            return False
    return True


def _apply_order(docs: list[dict], order_by: str | None, descending: bool) -> list[dict]:
    if not order_by:
        return docs
    # Documents lacking the ordering field are excluded from ordered queries
    ordered = [d for d in docs if d.get(order_by) is not None]
    ordered.sort(key=lambda d: _order_key(d[order_by]), reverse=descending)
    return ordered


def _order_key(value: Any) -> tuple:
    # Mixed types order by type first: booleans, numbers, strings, then the rest
    if isinstance(value, bool):
        return (0, value)
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, json.dumps(value, sort_keys=True, default=str))


class Subscription:
    """Active listener on one collection. Cancel it to stop deliveries."""

    def __init__(
        self,
        store: "DocumentStore",
        collection: str,
        callback: SnapshotCallback,
        *,
        where: tuple[Filter, ...] = (),
        order_by: str | None = None,
        descending: bool = False,
        on_error: ErrorCallback | None = None,
    ):
        self.store = store
        self.collection = collection
        self.callback = callback
        self.where = where
        self.order_by = order_by
        self.descending = descending
        self.on_error = on_error
        self.active = True

    def deliver(self) -> None:
        if not self.active:
            return
        try:
            snapshot = self.store.query(
                self.collection,
                where=self.where,
                order_by=self.order_by,
                descending=self.descending,
            )
            self.callback(snapshot)
        except Exception as exc:
            current_app.logger.exception("Error in %s listener", self.collection)
            if self.on_error:
                self.on_error(exc)

    def cancel(self) -> None:
        if self.active:
            self.active = False
            self.store._remove_listener(self)


class DocumentStore:
    """Collection/document API over the `documents` table."""

    def __init__(self):
        self._listeners: dict[str, list[Subscription]] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def _row(self, collection: str, doc_id: str) -> Document | None:
        return db.session.query(Document).filter_by(collection=collection, doc_id=str(doc_id)).first()

    def get(self, collection: str, doc_id: str) -> dict | None:
        row = self._row(collection, doc_id)
        return row.to_dict() if row else None

    def query(
        self,
        collection: str,
        *,
        where: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        where = tuple(where)
        rows = db.session.query(Document).filter_by(collection=collection).order_by(Document.id.asc()).all()
        docs = [row.to_dict() for row in rows if _matches(row.data or {}, where)]
        return _apply_order(docs, order_by, descending)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, collection: str, data: dict) -> dict:
        payload = {k: v for k, v in data.items() if k != "id"}
        row = Document(collection=collection, doc_id=new_document_id(), data=payload)
        db.session.add(row)
        self._commit()
        self._publish(collection)
        return row.to_dict()

    def set(self, collection: str, doc_id: str, data: dict, *, merge: bool = False) -> dict:
        payload = {k: v for k, v in data.items() if k != "id"}
        row = self._row(collection, doc_id)
        if row is None:
            row = Document(collection=collection, doc_id=str(doc_id), data=payload)
            db.session.add(row)
        elif merge:
            row.data = {**(row.data or {}), **payload}
        else:
            row.data = payload
        self._commit()
        self._publish(collection)
        return row.to_dict()

    def update(self, collection: str, doc_id: str, patch: dict) -> dict:
        """
        Shallow merge of top-level fields. Nested maps in the patch replace
        the stored value wholesale.
        """
        row = self._row(collection, doc_id)
        if row is None:
            raise DocumentNotFoundError(collection, doc_id)
        payload = {k: v for k, v in patch.items() if k != "id"}
        row.data = {**(row.data or {}), **payload}
        self._commit()
        self._publish(collection)
        return row.to_dict()

    def delete(self, collection: str, doc_id: str) -> bool:
        """Delete a document. Missing documents are a no-op (returns False)."""
        row = self._row(collection, doc_id)
        if row is None:
            return False
        db.session.delete(row)
        self._commit()
        self._publish(collection)
        return True

    def _commit(self) -> None:
        try:
            db.session.commit()
        except Exception:
            db.session.rollback()
            raise

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def subscribe(
        self,
        collection: str,
        callback: SnapshotCallback,
        *,
        where: Iterable[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
        on_error: ErrorCallback | None = None,
    ) -> Subscription:
        """
        Listen to a collection. The callback receives the initial snapshot
        immediately, then the full snapshot after every write.
        """
        sub = Subscription(
            self,
            collection,
            callback,
            where=tuple(where),
            order_by=order_by,
            descending=descending,
            on_error=on_error,
        )
        with self._lock:
            self._listeners.setdefault(collection, []).append(sub)
        sub.deliver()
        return sub

    def listener_count(self, collection: str | None = None) -> int:
        with self._lock:
            if collection is None:
                return sum(len(subs) for subs in self._listeners.values())
            return len(self._listeners.get(collection, []))

    def _remove_listener(self, sub: Subscription) -> None:
        with self._lock:
            subs = self._listeners.get(sub.collection, [])
            if sub in subs:
                subs.remove(sub)

    def _publish(self, collection: str) -> None:
        with self._lock:
            subs = list(self._listeners.get(collection, []))
        for sub in subs:
            sub.deliver()

    def close(self) -> None:
        """Cancel every listener."""
        with self._lock:
            subs = [s for group in self._listeners.values() for s in group]
        for sub in subs:
            sub.cancel()


class LiveCollection:
    """
    Latest snapshot of a collection, kept current by one owned listener.

    start() on a running feed tears the old listener down before attaching
    the new one, so deliveries are never duplicated.
    """

    def __init__(
        self,
        store: DocumentStore,
        collection: str,
        *,
        order_by: str | None = None,
        descending: bool = False,
    ):
        self.store = store
        self.collection = collection
        self.order_by = order_by
        self.descending = descending
        self.items: list[dict] = []
        self.error: str | None = None
        self._subscription: Subscription | None = None

    @property
    def running(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def start(self) -> "LiveCollection":
        self.stop()
        self.error = None
        self._subscription = self.store.subscribe(
            self.collection,
            self._on_snapshot,
            order_by=self.order_by,
            descending=self.descending,
            on_error=self._on_error,
        )
        return self

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    def _on_snapshot(self, docs: list[dict]) -> None:
        self.items = docs
        self.error = None

    def _on_error(self, exc: Exception) -> None:
        self.error = str(exc)


def get_document_store() -> DocumentStore:
    return current_app.extensions["document_store"]
