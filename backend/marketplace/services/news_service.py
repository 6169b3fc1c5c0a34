# Overview: Admin news items shown on the dashboard (document collection "news").

from __future__ import annotations

from flask import current_app

from ..activity import activity
from ..notifications import show_error, show_success
from .document_store import COLLECTION_NEWS, get_document_store
from marketplace.time_utils import utcnow_iso

SCOPE = "news"


def list_news(active_only: bool = False) -> list[dict]:
    where = [("active", "==", True)] if active_only else []
    return get_document_store().query(COLLECTION_NEWS, where=where, order_by="timestamp", descending=True)


def add_news(news_data: dict) -> dict | None:
    with activity.track(SCOPE):
        try:
            data = {
                **news_data,
                "timestamp": utcnow_iso(),
                "createdBy": news_data.get("createdBy"),
                "active": True if news_data.get("active") is None else news_data["active"],
            }
            created = get_document_store().add(COLLECTION_NEWS, data)
            show_success("News item added successfully")
            return created
        except Exception as e:
            current_app.logger.exception("Error adding news")
            show_error(str(e) or "Failed to add news")
            return None


def update_news(news_id: str, news_data: dict) -> bool:
    with activity.track(SCOPE):
        try:
            get_document_store().update(COLLECTION_NEWS, news_id, {
                **news_data,
                "updatedAt": utcnow_iso(),
            })
            show_success("News item updated successfully")
            return True
        except Exception as e:
            current_app.logger.exception("Error updating news")
            show_error(str(e) or "Failed to update news")
            return False


def delete_news(news_id: str) -> bool:
    if not news_id:
        show_error("Invalid news ID")
        return False

    with activity.track(SCOPE):
        try:
            get_document_store().delete(COLLECTION_NEWS, news_id)
            show_success("News item deleted successfully")
            return True
        except Exception as e:
            current_app.logger.exception("Error deleting news")
            show_error(str(e) or "Failed to delete news")
            return False
