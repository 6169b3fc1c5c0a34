# Overview: JSON response helpers that attach the request's collected notices.

from __future__ import annotations

from flask import jsonify

from .notifications import pop_notices


def json_response(payload: dict, status: int = 200):
    body = dict(payload)
    body["notices"] = pop_notices()
    return jsonify(body), status


def result_response(ok: bool, payload: dict | None = None, success_status: int = 200):
    """Boolean service outcome: success_status when ok, else 400."""
    body = {"ok": bool(ok), **(payload or {})}
    return json_response(body, success_status if ok else 400)


def error_response(message: str, status: int = 400, **extra):
    return json_response({"error": message, **extra}, status)
