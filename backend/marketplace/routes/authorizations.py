# Overview: Flask API routes for producer product authorizations.

from flask import Blueprint, request

from ..responses import json_response, result_response
from ..services import authorizations_service

authorizations_bp = Blueprint("authorizations", __name__, url_prefix="/api/authorizations")


@authorizations_bp.get("")
def list_authorizations():
    grants = authorizations_service.list_authorizations(user_id=request.args.get("user_id"))
    return json_response({"authorizations": grants})


@authorizations_bp.post("")
def add_authorization():
    data = request.get_json(silent=True) or {}
    ok = authorizations_service.add_authorization(data.get("userId"), data.get("productId"))
    return result_response(ok)


@authorizations_bp.delete("")
def remove_authorization():
    data = request.get_json(silent=True) or {}
    user_id = data.get("userId") or request.args.get("user_id")
    product_id = data.get("productId") or request.args.get("product_id")
    return result_response(authorizations_service.remove_authorization(user_id, product_id))
