"""
Tests for the relational offer path: transactional writes, reads and cascades.
"""

import pytest

from marketplace.extensions import db
from marketplace.models import DailyQuantity, Offer, OfferProduct
from marketplace.services import offers_service
from marketplace.services.offers_service import OfferError


def _row_counts():
    return (
        db.session.query(Offer).count(),
        db.session.query(OfferProduct).count(),
        db.session.query(DailyQuantity).count(),
    )


def _line(product_id, price="2.50", **daily):
    return {"productId": product_id, "price": price, "dailyQuantities": daily}


class TestCreateOffer:

    def test_inserts_header_lines_and_daily_rows(self, producer, tomatoes, cucumbers):
        offers_service.create_offer(
            producer_id=producer.id,
            week_number=35,
            description="Late summer",
            status="submitted",
            products=[
                _line(tomatoes.id, Monday=100, Wednesday=50),
                _line(cucumbers.id, "1.10", Tuesday=20, Thursday=20, Saturday=10),
            ],
        )

        # 1 header + 2 line items + (2 + 3) daily rows
        assert _row_counts() == (1, 2, 5)

    def test_tomatoes_offer_reads_back_only_given_days(self, producer, tomatoes):
        offers_service.create_offer(
            producer.id, 35, None, "submitted",
            [{"produceName": "tomatoes", "price": 2.50, "dailyQuantities": {"Monday": 100, "Wednesday": 50}}],
        )

        offers = offers_service.get_offers(producer_id=producer.id)
        assert len(offers) == 1
        offer = offers[0]
        assert offer["week_number"] == 35
        assert offer["producer_name"] == "Green Farm"
        assert len(offer["products"]) == 1

        line = offer["products"][0]
        assert line["produceName"] == "tomatoes"
        assert line["price"] == 2.5
        assert line["dailyQuantities"] == {"Monday": 100, "Wednesday": 50}

    def test_total_quantity_defaults_to_sum_of_days(self, producer, tomatoes):
        offer_id = offers_service.create_offer(
            producer.id, 35, None, "submitted", [_line(tomatoes.id, Monday=100, Friday=25.5)],
        )
        offer = offers_service.get_offer(offer_id)
        assert offer["products"][0]["totalQuantity"] == 125.5

    def test_explicit_total_quantity_kept(self, producer, tomatoes):
        line = _line(tomatoes.id, Monday=10)
        line["totalQuantity"] = 400
        offer_id = offers_service.create_offer(producer.id, 35, None, "submitted", [line])
        assert offers_service.get_offer(offer_id)["products"][0]["totalQuantity"] == 400

    def test_failing_line_item_leaves_nothing_behind(self, producer, tomatoes, cucumbers):
        with pytest.raises(Exception):
            offers_service.create_offer(
                producer.id, 35, None, "submitted",
                [
                    _line(tomatoes.id, Monday=100),
                    # price is NOT NULL; this insert fails after the header and first line
                    {"productId": cucumbers.id, "price": None, "totalQuantity": 5, "dailyQuantities": {"Monday": 5}},
                ],
            )

        assert _row_counts() == (0, 0, 0)

    def test_failing_daily_row_leaves_nothing_behind(self, producer, tomatoes):
        with pytest.raises(Exception):
            offers_service.create_offer(
                producer.id, 35, None, "submitted",
                [{"productId": tomatoes.id, "price": 3, "totalQuantity": 10,
                  "dailyQuantities": {"Monday": 10, "Tuesday": "lots"}}],
            )

        assert _row_counts() == (0, 0, 0)

    def test_requires_products(self, producer):
        with pytest.raises(OfferError):
            offers_service.create_offer(producer.id, 35, None, "submitted", [])
        assert _row_counts() == (0, 0, 0)


class TestGetOffers:

    def _make(self, producer, product, week):
        return offers_service.create_offer(producer.id, week, None, "submitted", [_line(product.id, Monday=1)])

    def test_newest_first(self, producer, tomatoes):
        first = self._make(producer, tomatoes, 30)
        second = self._make(producer, tomatoes, 31)

        ids = [o["id"] for o in offers_service.get_offers()]
        assert ids == [second, first]

    def test_status_filter(self, producer, tomatoes):
        approved = self._make(producer, tomatoes, 30)
        self._make(producer, tomatoes, 31)
        offers_service.update_offer_status(approved, "approved")

        only_approved = offers_service.get_offers(status="approved")
        assert [o["id"] for o in only_approved] == [approved]
        assert all(o["status"] == "approved" for o in only_approved)
        assert len(offers_service.get_offers()) == 2

    def test_producer_filter(self, producer, tomatoes):
        from marketplace.services import users_service

        other = users_service.create_user("other@farm.test", "secret1", "Other Farm")
        mine = self._make(producer, tomatoes, 30)
        self._make(other, tomatoes, 30)

        assert [o["id"] for o in offers_service.get_offers(producer_id=producer.id)] == [mine]

    def test_offer_without_line_items_is_listed(self, producer):
        bare = Offer(producer_id=producer.id, week_number=40, status="submitted")
        db.session.add(bare)
        db.session.commit()

        offers = offers_service.get_offers()
        assert len(offers) == 1
        assert offers[0]["products"] == []

    def test_get_offer_missing(self, db_session):
        assert offers_service.get_offer(9999) is None


class TestUpdateAndDelete:

    def test_update_status_stamps_review(self, producer, tomatoes):
        offer_id = offers_service.create_offer(producer.id, 35, None, "submitted", [_line(tomatoes.id, Monday=1)])

        assert offers_service.update_offer_status(offer_id, "rejected", "Price too high") is True
        offer = offers_service.get_offer(offer_id)
        assert offer["status"] == "rejected"
        assert offer["feedback"] == "Price too high"
        assert offer["reviewed_at"] is not None

    def test_update_status_without_review_stamp(self, producer, tomatoes):
        offer_id = offers_service.create_offer(producer.id, 35, None, "submitted", [_line(tomatoes.id, Monday=1)])
        offers_service.update_offer_status(offer_id, "needs_revision", "Add Friday", reviewed=False)
        assert offers_service.get_offer(offer_id)["reviewed_at"] is None

    def test_update_status_missing_offer(self, db_session):
        assert offers_service.update_offer_status(12345, "approved") is False

    def test_delete_cascades(self, producer, tomatoes, cucumbers):
        offer_id = offers_service.create_offer(
            producer.id, 35, None, "submitted",
            [_line(tomatoes.id, Monday=1, Tuesday=2), _line(cucumbers.id, Friday=3)],
        )
        assert _row_counts() == (1, 2, 3)

        assert offers_service.delete_offer(offer_id) is True
        assert _row_counts() == (0, 0, 0)

    def test_delete_missing(self, db_session):
        assert offers_service.delete_offer(4242) is False

    def test_deleting_producer_removes_offers(self, producer, tomatoes):
        from marketplace.services import users_service

        offers_service.create_offer(producer.id, 35, None, "submitted", [_line(tomatoes.id, Monday=1)])
        assert users_service.delete_user(producer.id) is True
        assert _row_counts() == (0, 0, 0)
