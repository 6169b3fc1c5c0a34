"""
Alerts and certificate-expiry checking.

Alerts live in the document store. The certificate check scans a producer's
certificates, and for any certificate expired or expiring within
EXPIRY_WARNING_DAYS creates one warning alert, unless an open alert
(new/acknowledged) already exists for that user and certificate type.

Failures are isolated: a bad certificate does not stop the other
certificates of the same user, and a failing producer does not stop the
batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from flask import current_app

from ..activity import activity
from ..models.users import CERTIFICATE_TYPES, ROLE_PRODUCER
from ..notifications import SEVERITY_ERROR, SEVERITY_INFO, SEVERITY_SUCCESS, notify, show_error, show_success
from .document_store import COLLECTION_ALERTS, get_document_store
from marketplace.time_utils import long_date, parse_iso_date, utcnow_iso

ALERT_TYPE_INFO = "info"
ALERT_TYPE_WARNING = "warning"
ALERT_TYPE_ERROR = "error"

ALERT_STATUS_NEW = "new"
ALERT_STATUS_ACKNOWLEDGED = "acknowledged"
ALERT_STATUS_RESOLVED = "resolved"
ALERT_STATUSES = {ALERT_STATUS_NEW, ALERT_STATUS_ACKNOWLEDGED, ALERT_STATUS_RESOLVED}
OPEN_ALERT_STATUSES = [ALERT_STATUS_NEW, ALERT_STATUS_ACKNOWLEDGED]

EXPIRY_WARNING_DAYS = 30

SCOPE = "alerts"


class CertificateCheckError(Exception):
    """Raised when a user's certificates cannot be checked at all."""


@dataclass
class CertificateCheckResult:
    total: int = 0
    producers_checked: int = 0
    errors: list[str] = field(default_factory=list)
    severity: str = SEVERITY_INFO
    message: str = ""

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "producers_checked": self.producers_checked,
            "errors": self.errors,
            "severity": self.severity,
            "message": self.message,
        }


# ----------------------------------------------------------------------
# Alert CRUD
# ----------------------------------------------------------------------

def list_alerts(user_id=None, status: str | None = None) -> list[dict]:
    where = []
    if user_id is not None:
        where.append(("userId", "==", str(user_id)))
    if status:
        where.append(("status", "==", status))
    return get_document_store().query(COLLECTION_ALERTS, where=where, order_by="timestamp", descending=True)


def add_alert(alert_data: dict) -> dict | None:
    """New alerts always start at status "new". Returns None on failure."""
    with activity.track(SCOPE):
        try:
            data = {
                **alert_data,
                "timestamp": utcnow_iso(),
                "status": ALERT_STATUS_NEW,
            }
            return get_document_store().add(COLLECTION_ALERTS, data)
        except Exception:
            current_app.logger.exception("Error adding alert")
            return None


def update_alert_status(alert_id: str, new_status: str) -> bool:
    with activity.track(SCOPE):
        if new_status not in ALERT_STATUSES:
            show_error(f"Invalid alert status: {new_status}")
            return False
        try:
            get_document_store().update(COLLECTION_ALERTS, alert_id, {
                "status": new_status,
                "lastModified": utcnow_iso(),
            })
            show_success(f"Alert {new_status.lower()} successfully")
            return True
        except Exception as e:
            current_app.logger.exception("Error updating alert")
            show_error(str(e) or "Failed to update alert status")
            return False


def delete_alert(alert_id: str) -> bool:
    with activity.track(SCOPE):
        try:
            get_document_store().delete(COLLECTION_ALERTS, alert_id)
            show_success("Alert deleted successfully")
            return True
        except Exception as e:
            current_app.logger.exception("Error deleting alert")
            show_error(str(e) or "Failed to delete alert")
            return False


# ----------------------------------------------------------------------
# Certificate expiry
# ----------------------------------------------------------------------

def _has_open_alert(user_id, cert_type: str) -> bool:
    existing = get_document_store().query(
        COLLECTION_ALERTS,
        where=[
            ("userId", "==", user_id),
            ("certificationType", "==", cert_type),
            ("status", "in", OPEN_ALERT_STATUSES),
        ],
    )
    return bool(existing)


def build_expiry_alert(user: dict, cert_type: str, cert: dict, expiry: date, days_until_expiry: int) -> dict:
    label = cert_type.upper()
    if days_until_expiry < 0:
        title = f"{label} Certificate Expired"
        when = f"expired {abs(days_until_expiry)} days ago"
    else:
        title = f"{label} Certificate Expiring Soon"
        when = f"will expire in {days_until_expiry} days"

    number = f" ({cert['number']})" if cert.get("number") else ""
    return {
        "type": ALERT_TYPE_WARNING,
        "title": title,
        "message": f"{user.get('companyName')}'s {label} certificate{number} {when} on {long_date(expiry)}",
        "userId": user["id"],
        "certificationType": cert_type,
        "expiryDate": cert["validUntil"],
    }


def check_certificate_expiration(user, today: date | None = None) -> int:
    """
    Create alerts for a producer's expired or soon-expiring certificates.

    Accepts a user document dict or a relational User row. Returns the
    number of alerts created (0-3).
    """
    if user is not None and not isinstance(user, dict):
        from .users_service import user_to_document
        user = user_to_document(user)

    if not user or not user.get("id"):
        current_app.logger.error("Invalid user data for certificate check: %r", user)
        return 0

    certifications = user.get("certifications")
    if not certifications or user.get("role") != ROLE_PRODUCER:
        return 0
    if not isinstance(certifications, dict):
        raise CertificateCheckError(
            f"Failed to check certificates for {user.get('companyName')}: certifications must be a mapping"
        )

    today = today or date.today()
    alerts_created = 0

    for cert_type in CERTIFICATE_TYPES:
        cert = certifications.get(cert_type)
        if not isinstance(cert, dict) or not cert.get("validUntil"):
            continue

        try:
            expiry = parse_iso_date(cert["validUntil"])
            if expiry is None:
                continue

            days_until_expiry = (expiry - today).days
            if days_until_expiry > EXPIRY_WARNING_DAYS:
                continue

            if _has_open_alert(user["id"], cert_type):
                continue
            alert = build_expiry_alert(user, cert_type, cert, expiry, days_until_expiry)
            if add_alert(alert):
                alerts_created += 1
        except Exception:
            current_app.logger.exception(
                "Error checking %s certificate for %s", cert_type, user.get("companyName")
            )

    return alerts_created


def check_all_certificates(users, today: date | None = None) -> CertificateCheckResult:
    """
    Run the certificate check for every producer in `users`.

    Per-producer failures are collected; when any occurred the result is an
    error even if some alerts were created.
    """
    result = CertificateCheckResult()
    if not isinstance(users, (list, tuple)):
        result.severity = SEVERITY_ERROR
        result.message = "Invalid users data provided"
        notify(result.message, result.severity)
        return result

    producers = [u for u in users if _role_of(u) == ROLE_PRODUCER]
    if not producers:
        result.message = "No producers found to check certificates"
        notify(result.message, result.severity)
        return result

    for producer in producers:
        result.producers_checked += 1
        try:
            result.total += check_certificate_expiration(producer, today=today)
        except Exception as e:
            name = _company_of(producer)
            current_app.logger.exception("Error checking certificates for producer %s", name)
            result.errors.append(f"{name}: {e}")

    if result.errors:
        result.severity = SEVERITY_ERROR
        result.message = "Errors occurred while checking certificates:\n" + "\n".join(result.errors)
    elif result.total > 0:
        result.severity = SEVERITY_SUCCESS
        plural = "" if result.total == 1 else "s"
        result.message = f"Created {result.total} new alert{plural} for expiring certificates"
    else:
        result.severity = SEVERITY_INFO
        result.message = "No new expiring certificates found"

    notify(result.message, result.severity)
    return result


def _role_of(user) -> str | None:
    if isinstance(user, dict):
        return user.get("role")
    return getattr(user, "role", None)


def _company_of(user) -> str | None:
    if isinstance(user, dict):
        return user.get("companyName")
    return getattr(user, "company_name", None)
