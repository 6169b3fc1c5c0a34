"""
Tests for the document store: queries, writes and change listeners.
"""

import pytest

from marketplace.services.document_store import (
    DocumentNotFoundError,
    LiveCollection,
    QueryError,
    get_document_store,
)


@pytest.fixture
def store(db_session):
    return get_document_store()


class TestQueries:

    def test_add_and_get(self, store):
        doc = store.add("news", {"title": "Harvest update", "id": "ignored"})
        assert doc["id"] != "ignored"
        assert store.get("news", doc["id"]) == {"id": doc["id"], "title": "Harvest update"}

    def test_get_missing(self, store):
        assert store.get("news", "nope") is None

    def test_collections_are_separate(self, store):
        store.set("users", "abc", {"name": "A"})
        store.set("products", "abc", {"name": "B"})
        assert store.get("users", "abc")["name"] == "A"
        assert store.get("products", "abc")["name"] == "B"

    def test_where_filters_are_anded(self, store):
        store.add("offers", {"producerId": "p1", "status": "submitted"})
        store.add("offers", {"producerId": "p1", "status": "approved"})
        store.add("offers", {"producerId": "p2", "status": "approved"})

        found = store.query("offers", where=[("producerId", "==", "p1"), ("status", "==", "approved")])
        assert len(found) == 1
        assert store.query("offers", where=[("status", "in", ["approved", "rejected"])]) != []
        assert len(store.query("offers", where=[("status", "not-in", ["approved"])])) == 1

    def test_array_contains(self, store):
        store.add("products", {"name": "Peppers", "varieties": ["Red", "Green"]})
        store.add("products", {"name": "Leeks"})
        assert [p["name"] for p in store.query("products", where=[("varieties", "array-contains", "Red")])] == ["Peppers"]

    def test_ordered_query_skips_documents_without_field(self, store):
        store.add("news", {"title": "b", "timestamp": "2026-01-02"})
        store.add("news", {"title": "a", "timestamp": "2026-01-01"})
        store.add("news", {"title": "undated"})

        titles = [n["title"] for n in store.query("news", order_by="timestamp", descending=True)]
        assert titles == ["b", "a"]
        assert len(store.query("news")) == 3

    def test_ordered_query_with_mixed_value_types(self, store):
        store.add("news", {"title": "dated", "timestamp": "2026-01-02"})
        store.add("news", {"title": "numbered", "timestamp": 5})
        store.add("news", {"title": "flagged", "timestamp": True})

        titles = [n["title"] for n in store.query("news", order_by="timestamp")]
        assert titles == ["flagged", "numbered", "dated"]
        titles = [n["title"] for n in store.query("news", order_by="timestamp", descending=True)]
        assert titles == ["dated", "numbered", "flagged"]

    def test_unknown_operator(self, store):
        store.add("news", {"title": "x"})
        with pytest.raises(QueryError):
            store.query("news", where=[("title", "~=", "x")])


class TestWrites:

    def test_update_merges_top_level(self, store):
        doc = store.add("offers", {"status": "submitted", "deliveryAllocations": {"Monday": {"s1": 5}}})
        store.update("offers", doc["id"], {"deliveryAllocations": {"Tuesday": {"s2": 1}}})

        stored = store.get("offers", doc["id"])
        assert stored["status"] == "submitted"
        assert stored["deliveryAllocations"] == {"Tuesday": {"s2": 1}}

    def test_update_missing_raises(self, store):
        with pytest.raises(DocumentNotFoundError):
            store.update("offers", "missing", {"status": "approved"})

    def test_set_replaces_unless_merge(self, store):
        store.set("users", "u1", {"name": "A", "city": "Patras"})
        store.set("users", "u1", {"name": "B"})
        assert store.get("users", "u1") == {"id": "u1", "name": "B"}

        store.set("users", "u1", {"city": "Volos"}, merge=True)
        assert store.get("users", "u1") == {"id": "u1", "name": "B", "city": "Volos"}

    def test_delete(self, store):
        doc = store.add("alerts", {"title": "x"})
        assert store.delete("alerts", doc["id"]) is True
        assert store.delete("alerts", doc["id"]) is False
        assert store.get("alerts", doc["id"]) is None


class TestListeners:

    def test_subscribe_delivers_initial_and_later_snapshots(self, store):
        store.add("offers", {"timestamp": "1"})
        snapshots = []
        sub = store.subscribe("offers", snapshots.append, order_by="timestamp", descending=True)

        store.add("offers", {"timestamp": "2"})
        assert [len(s) for s in snapshots] == [1, 2]
        assert snapshots[-1][0]["timestamp"] == "2"

        sub.cancel()
        store.add("offers", {"timestamp": "3"})
        assert len(snapshots) == 2
        assert store.listener_count("offers") == 0

    def test_other_collections_do_not_notify(self, store):
        snapshots = []
        sub = store.subscribe("offers", snapshots.append)
        store.add("news", {"title": "x"})
        assert len(snapshots) == 1
        sub.cancel()

    def test_failing_callback_reports_error(self, store):
        errors = []

        def broken(_snapshot):
            raise RuntimeError("render failed")

        sub = store.subscribe("offers", broken, on_error=errors.append)
        assert [str(e) for e in errors] == ["render failed"]
        sub.cancel()

    def test_live_collection_restart_keeps_single_listener(self, store):
        feed = LiveCollection(store, "offers", order_by="timestamp", descending=True)
        feed.start()
        feed.start()
        assert feed.running
        assert store.listener_count("offers") == 1

        store.add("offers", {"timestamp": "2026-10-19T10:00:00Z"})
        assert len(feed.items) == 1

        feed.stop()
        assert not feed.running
        assert store.listener_count("offers") == 0

        store.add("offers", {"timestamp": "2026-10-19T11:00:00Z"})
        assert len(feed.items) == 1

    def test_close_cancels_everything(self, store):
        store.subscribe("offers", lambda s: None)
        store.subscribe("alerts", lambda s: None)
        store.close()
        assert store.listener_count() == 0
