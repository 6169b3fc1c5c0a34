"""
Tests for alerts and certificate-expiry checks.
"""

from datetime import date

import pytest

from marketplace.notifications import pop_notices
from marketplace.services import alerts_service, users_service
from marketplace.services.alerts_service import CertificateCheckError

from conftest import days_from, producer_profile

TODAY = date(2026, 10, 19)


class TestCheckCertificateExpiration:

    def test_expiring_soon_creates_one_warning(self, db_session):
        user = producer_profile(globalGap=days_from(TODAY, 10))

        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 1
        alerts = alerts_service.list_alerts(user_id="prod-1")
        assert len(alerts) == 1
        alert = alerts[0]
        assert alert["type"] == "warning"
        assert alert["status"] == "new"
        assert alert["title"] == "GLOBALGAP Certificate Expiring Soon"
        assert "will expire in 10 days" in alert["message"]
        assert "October 29, 2026" in alert["message"]
        assert alert["certificationType"] == "globalGap"

    def test_second_run_is_deduplicated(self, db_session):
        user = producer_profile(globalGap=days_from(TODAY, 10))
        alerts_service.check_certificate_expiration(user, today=TODAY)

        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 0
        assert len(alerts_service.list_alerts()) == 1

    def test_resolved_alert_allows_new_one(self, db_session):
        user = producer_profile(grasp=days_from(TODAY, 3))
        alerts_service.check_certificate_expiration(user, today=TODAY)
        alert = alerts_service.list_alerts()[0]
        alerts_service.update_alert_status(alert["id"], "resolved")

        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 1

    def test_expired_certificate(self, db_session):
        user = producer_profile(eco=days_from(TODAY, -5))

        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 1
        alert = alerts_service.list_alerts()[0]
        assert alert["title"] == "ECO Certificate Expired"
        assert "expired 5 days ago" in alert["message"]

    def test_far_expiry_ignored(self, db_session):
        user = producer_profile(globalGap=days_from(TODAY, 31), grasp=days_from(TODAY, 30))
        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 1

    def test_all_three_types(self, db_session):
        user = producer_profile(
            globalGap=days_from(TODAY, 1),
            grasp=days_from(TODAY, 0),
            eco=days_from(TODAY, -100),
        )
        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 3

    def test_non_producer_creates_nothing(self, db_session):
        user = producer_profile(globalGap=days_from(TODAY, 1))
        user["role"] = "supermarket"
        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 0
        assert alerts_service.list_alerts() == []

    def test_producer_without_certifications(self, db_session):
        user = producer_profile()
        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 0
        user.pop("certifications")
        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 0

    def test_user_without_id(self, db_session):
        user = producer_profile(globalGap=days_from(TODAY, 1))
        user.pop("id")
        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 0

    def test_unparseable_date_skipped(self, db_session):
        user = producer_profile(globalGap="2026-02-30", eco=days_from(TODAY, 2))
        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 1

    def test_non_mapping_certificate_entry_skipped(self, db_session):
        user = producer_profile(eco=days_from(TODAY, -8))
        user["certifications"]["globalGap"] = days_from(TODAY, -8)

        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 1
        assert [a["certificationType"] for a in alerts_service.list_alerts()] == ["eco"]

    def test_failing_certificate_does_not_stop_the_others(self, db_session, monkeypatch):
        real_has_open_alert = alerts_service._has_open_alert

        def has_open_alert(user_id, cert_type):
            if cert_type == "grasp":
                raise RuntimeError("alerts query failed")
            return real_has_open_alert(user_id, cert_type)

        monkeypatch.setattr(alerts_service, "_has_open_alert", has_open_alert)
        user = producer_profile(
            globalGap=days_from(TODAY, 5),
            grasp=days_from(TODAY, 5),
            eco=days_from(TODAY, 5),
        )

        assert alerts_service.check_certificate_expiration(user, today=TODAY) == 2
        types = sorted(a["certificationType"] for a in alerts_service.list_alerts())
        assert types == ["eco", "globalGap"]

    def test_malformed_certifications_raise(self, db_session):
        user = producer_profile()
        user["certifications"] = ["globalGap"]
        with pytest.raises(CertificateCheckError):
            alerts_service.check_certificate_expiration(user, today=TODAY)

    def test_relational_account(self, producer):
        users_service.set_certification(producer.id, "globalGap", "GG-77", days_from(TODAY, 10))

        assert alerts_service.check_certificate_expiration(producer, today=TODAY) == 1
        alert = alerts_service.list_alerts(user_id=producer.id)[0]
        assert "Green Farm's GLOBALGAP certificate (GG-77) will expire in 10 days" in alert["message"]
        assert alert["userId"] == str(producer.id)
        assert alerts_service.list_alerts(user_id=str(producer.id)) == [alert]
        assert alerts_service.check_certificate_expiration(producer, today=TODAY) == 0


class TestCheckAllCertificates:

    def test_counts_alerts_across_producers(self, db_session):
        users = [
            producer_profile("p1", "Farm One", globalGap=days_from(TODAY, 5)),
            producer_profile("p2", "Farm Two", eco=days_from(TODAY, -1), grasp=days_from(TODAY, 2)),
            {"id": "s1", "role": "supermarket", "companyName": "Market"},
        ]

        result = alerts_service.check_all_certificates(users, today=TODAY)
        assert result.total == 3
        assert result.producers_checked == 2
        assert result.severity == "success"
        assert result.message == "Created 3 new alerts for expiring certificates"

    def test_singular_message(self, db_session):
        result = alerts_service.check_all_certificates(
            [producer_profile(globalGap=days_from(TODAY, 5))], today=TODAY,
        )
        assert result.message == "Created 1 new alert for expiring certificates"

    def test_nothing_to_do(self, db_session):
        result = alerts_service.check_all_certificates([producer_profile(globalGap=days_from(TODAY, 90))], today=TODAY)
        assert result.total == 0
        assert result.severity == "info"
        assert result.message == "No new expiring certificates found"

    def test_no_producers_is_informational(self, db_session):
        result = alerts_service.check_all_certificates([{"id": "s1", "role": "supermarket"}], today=TODAY)
        assert result.severity == "info"
        assert result.message == "No producers found to check certificates"
        assert pop_notices()[-1]["severity"] == "info"

    def test_errors_take_precedence(self, db_session):
        broken = producer_profile("p9", "Broken Farm")
        broken["certifications"] = ["oops"]
        users = [producer_profile("p1", "Farm One", globalGap=days_from(TODAY, 5)), broken]

        result = alerts_service.check_all_certificates(users, today=TODAY)
        assert result.total == 1
        assert result.severity == "error"
        assert result.message.startswith("Errors occurred while checking certificates:\n")
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Broken Farm: ")

    def test_invalid_input(self, db_session):
        result = alerts_service.check_all_certificates("everyone")
        assert result.severity == "error"
        assert result.message == "Invalid users data provided"


class TestAlertCrud:

    def test_add_forces_new_status(self, db_session):
        alert = alerts_service.add_alert({"title": "Manual", "status": "resolved", "userId": "u1"})
        assert alert["status"] == "new"

    def test_update_status(self, db_session):
        alert = alerts_service.add_alert({"title": "Manual", "userId": "u1"})
        assert alerts_service.update_alert_status(alert["id"], "acknowledged") is True
        assert alerts_service.list_alerts(status="acknowledged")[0]["id"] == alert["id"]
        assert pop_notices()[-1]["message"] == "Alert acknowledged successfully"

    def test_update_status_rejects_unknown(self, db_session):
        alert = alerts_service.add_alert({"title": "Manual", "userId": "u1"})
        assert alerts_service.update_alert_status(alert["id"], "archived") is False

    def test_delete(self, db_session):
        alert = alerts_service.add_alert({"title": "Manual", "userId": "u1"})
        assert alerts_service.delete_alert(alert["id"]) is True
        assert alerts_service.list_alerts() == []
