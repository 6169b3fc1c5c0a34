# Overview: Flask API routes for dashboard news.

from flask import Blueprint, request

from ..responses import error_response, json_response, result_response
from ..services import news_service

news_bp = Blueprint("news", __name__, url_prefix="/api/news")


@news_bp.get("")
def list_news():
    active_only = request.args.get("active") == "true"
    return json_response({"news": news_service.list_news(active_only=active_only)})


@news_bp.post("")
def add_news():
    data = request.get_json(silent=True) or {}
    if not data.get("title"):
        return error_response("title is required", 400)
    item = news_service.add_news(data)
    if item is None:
        return error_response("Failed to add news", 400)
    return json_response({"news": item}, 201)


@news_bp.patch("/<news_id>")
def update_news(news_id: str):
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not data:
        return error_response("JSON object body required", 400)
    return result_response(news_service.update_news(news_id, data))


@news_bp.delete("/<news_id>")
def delete_news(news_id: str):
    return result_response(news_service.delete_news(news_id))
