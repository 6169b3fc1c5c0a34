# Overview: Flask API routes for alerts and certificate-expiry checks.

from flask import Blueprint, current_app, request

from ..extensions import db
from ..models import User
from ..models.users import ROLE_PRODUCER
from ..responses import error_response, json_response, result_response
from ..services import alerts_service, users_service
from marketplace.time_utils import parse_iso_date

alerts_bp = Blueprint("alerts", __name__, url_prefix="/api/alerts")

SOURCE_DOCUMENTS = "documents"
SOURCE_RELATIONAL = "relational"


@alerts_bp.get("")
def list_alerts():
    alerts = alerts_service.list_alerts(
        user_id=request.args.get("user_id"),
        status=request.args.get("status"),
    )
    return json_response({"alerts": alerts})


@alerts_bp.patch("/<alert_id>")
def update_alert(alert_id: str):
    data = request.get_json(silent=True) or {}
    status = (data.get("status") or "").strip()
    if not status:
        return error_response("status required", 400)
    return result_response(alerts_service.update_alert_status(alert_id, status))


@alerts_bp.delete("/<alert_id>")
def delete_alert(alert_id: str):
    return result_response(alerts_service.delete_alert(alert_id))


@alerts_bp.post("/certificates/check")
def check_certificates():
    """
    Check every producer's certificates and create expiry alerts.

    Body (optional):
    - source: "documents" (user profiles, default) or "relational" (accounts)
    - today: ISO date to check against (defaults to the server date)
    """
    data = request.get_json(silent=True) or {}
    source = (data.get("source") or SOURCE_DOCUMENTS).lower()

    today = None
    if data.get("today"):
        today = parse_iso_date(data["today"])
        if today is None:
            return error_response("today must be an ISO date", 400)

    try:
        if source == SOURCE_RELATIONAL:
            users = db.session.query(User).filter_by(role=ROLE_PRODUCER).all()
        elif source == SOURCE_DOCUMENTS:
            users = users_service.list_user_profiles()
        else:
            return error_response("source must be documents or relational", 400)

        result = alerts_service.check_all_certificates(users, today=today)
    except Exception:
        current_app.logger.exception("Failed to check certificates")
        return error_response("Internal server error", 500)

    return json_response({"result": result.to_dict()})
