# Overview: Flask API routes for week planning helpers.

from datetime import date

from flask import Blueprint, jsonify, request

from ..week_utils import current_week, day_date_map, week_dates

weeks_bp = Blueprint("weeks", __name__, url_prefix="/api/weeks")


@weeks_bp.get("/current")
def get_current_week():
    return jsonify(current_week())


@weeks_bp.get("/<int:week_number>/dates")
def get_week_dates(week_number: int):
    year = request.args.get("year", type=int) or date.today().year
    dates = week_dates(week_number, year)
    return jsonify({
        "week_number": week_number,
        "year": year,
        "dates": [d.isoformat() for d in dates],
        "days": {day: d.isoformat() for day, d in day_date_map(dates).items()},
    })
