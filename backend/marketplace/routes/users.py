# Overview: Flask API routes for user profiles.

from flask import Blueprint, request

from ..responses import error_response, json_response, result_response
from ..services import users_service
from ..validation import FormValidationError, require_valid, validate_profile

users_bp = Blueprint("users", __name__, url_prefix="/api/users")

PROFILE_FORM_FIELDS = {"companyName", "vatNumber", "address"}


@users_bp.get("")
def list_users():
    return json_response({"users": users_service.list_user_profiles(role=request.args.get("role"))})


@users_bp.get("/<user_id>/profile")
def get_profile(user_id: str):
    profile = users_service.get_user_profile(user_id)
    if profile is None:
        return error_response("User profile not found", 404)
    return json_response({"profile": profile})


@users_bp.patch("/<user_id>/profile")
def update_profile(user_id: str):
    """
    Merge profile changes. Email, role and createdAt are ignored.

    When the body touches the profile form (company, VAT, address) the whole
    form is validated.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return error_response("JSON object body required", 400)

    if PROFILE_FORM_FIELDS & data.keys():
        try:
            require_valid(validate_profile, data)
        except FormValidationError as e:
            return error_response("Validation failed", 400, fields=e.errors)

    return result_response(users_service.update_user_profile(user_id, data))
