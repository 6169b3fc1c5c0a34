# Overview: Week and date helpers for weekly offer planning.

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Sequence

DAYS_OF_WEEK = (
    "Sunday",
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
)

# Producers submit offers for the week two weeks out.
SUBMISSION_LEAD_WEEKS = 2


def current_week(now: Optional[datetime] = None) -> dict:
    """
    ISO week of 'now', the calendar year, and the submission week.

    'next' is not wrapped at year end; week 52 yields 54.
    """
    now = now or datetime.now()
    current = now.isocalendar()[1]
    return {
        "current": current,
        "next": current + SUBMISSION_LEAD_WEEKS,
        "year": now.year,
    }


def _first_sunday_anchor(year: int) -> date:
    jan_first = date(year, 1, 1)
    # date.weekday(): Monday=0 .. Sunday=6
    return jan_first - timedelta(days=(jan_first.weekday() + 1) % 7)


def week_dates(week_number: int, year: Optional[int] = None) -> list[date]:
    """
    The seven dates (Sunday..Saturday) of a week of the year.

    Weeks are counted from the Sunday on or before January 1st. Out of range
    week numbers are not rejected and extrapolate linearly.
    """
    if year is None:
        year = date.today().year
    start = _first_sunday_anchor(year) + timedelta(weeks=week_number - 1)
    return [start + timedelta(days=i) for i in range(7)]


def day_date_map(dates: Optional[Sequence[date]]) -> dict[str, date]:
    if not dates or len(dates) != 7:
        return {}
    return dict(zip(DAYS_OF_WEEK, dates))
