from __future__ import annotations

from ..extensions import db
from marketplace.time_utils import utcnow


class Document(db.Model):
    """
    Schemaless document keyed by (collection, doc_id).

    Backs the document path (users, products, offers, authorizations,
    alerts, news). The payload is free-form JSON; no schema is enforced
    beyond what the services expect.
    """
    __tablename__ = "documents"
    __table_args__ = (
        db.UniqueConstraint("collection", "doc_id", name="uq_documents_collection_doc_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    collection = db.Column(db.String(64), nullable=False, index=True)
    doc_id = db.Column(db.String(64), nullable=False)
    data = db.Column(db.JSON, nullable=False, default=dict)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self) -> dict:
        return {"id": self.doc_id, **(self.data or {})}
