# backend/marketplace/config.py
from __future__ import annotations
import os


class Config:
    # Optional "SECRET_KEY", with default dev key
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-me")

    # SQLite DB stored in backend/instance/marketplace.sqlite3
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", #optional alternative location
        "sqlite:///marketplace.sqlite3", #default local location
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Which offer repository backs the HTTP layer: "document" or "relational"
    OFFER_STORE = os.environ.get("OFFER_STORE", "document")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
