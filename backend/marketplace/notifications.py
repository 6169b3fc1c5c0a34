# Overview: User-facing notices (message, severity, duration) collected per request.

from __future__ import annotations

from dataclasses import asdict, dataclass

from flask import current_app, g, has_app_context

SEVERITY_SUCCESS = "success"
SEVERITY_INFO = "info"
SEVERITY_ERROR = "error"

DEFAULT_DURATIONS_MS = {
    SEVERITY_SUCCESS: 3000,
    SEVERITY_INFO: 3000,
    SEVERITY_ERROR: 5000,
}


@dataclass(frozen=True)
class Notice:
    message: str
    severity: str
    duration: int

    def to_dict(self) -> dict:
        return asdict(self)


def notify(message: str, severity: str, duration: int | None = None) -> Notice:
    """
    Record a notice for the current request and log it.

    Outside an application context the notice is only returned.
    """
    notice = Notice(message, severity, duration or DEFAULT_DURATIONS_MS.get(severity, 3000))
    if not has_app_context():
        return notice

    if "notices" not in g:
        g.notices = []
    g.notices.append(notice)

    if severity == SEVERITY_ERROR:
        current_app.logger.warning("notice: %s", message)
    else:
        current_app.logger.info("notice: %s", message)
    return notice


def show_success(message: str) -> Notice:
    return notify(message, SEVERITY_SUCCESS)


def show_info(message: str) -> Notice:
    return notify(message, SEVERITY_INFO)


def show_error(message: str) -> Notice:
    return notify(message, SEVERITY_ERROR)


def pop_notices() -> list[dict]:
    """Drain the notices collected so far in this request."""
    notices = g.pop("notices", []) if has_app_context() else []
    return [n.to_dict() for n in notices]
