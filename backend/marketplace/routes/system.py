# backend/marketplace/routes/system.py
"""
System health and activity endpoints.
"""

import time
from flask import Blueprint, current_app, jsonify
from ..activity import activity
from ..extensions import db
from ..models import User, Offer, Document

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and basic operations.

    Returns dict with status and details.
    """
    start_time = time.time()
    try:
        user_count = db.session.query(User).count()
        offer_count = db.session.query(Offer).count()
        document_count = db.session.query(Document).count()

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "users": user_count,
                "offers": offer_count,
                "documents": document_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error"
        }


@system_bp.get("/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    response = jsonify({
        "status": "healthy" if healthy else "unhealthy",
        "offer_store": current_app.config.get("OFFER_STORE"),
        "checks": {"database": database},
    })
    return response, 200 if healthy else 503


@system_bp.get("/api/system/activity")
def system_activity():
    """Outstanding service calls per scope; a scope is loading while its count is > 0."""
    counts = activity.snapshot()
    return jsonify({
        "busy": bool(counts),
        "scopes": counts,
    })
