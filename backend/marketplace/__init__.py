# backend/marketplace/__init__.py
from __future__ import annotations

import logging

from flask import Flask, request

from .config import Config
from .extensions import db, migrate


def create_app(overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    app.logger.setLevel(getattr(logging, str(app.config["LOG_LEVEL"]).upper(), logging.INFO))

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    # Document store, offer repository and the live offers feed
    from .services.document_store import DocumentStore
    from .services.live_offers_service import offers_feed
    from .services.offer_repository import build_offer_repository

    store = DocumentStore()
    app.extensions["document_store"] = store
    app.extensions["offer_repository"] = build_offer_repository(app.config["OFFER_STORE"], store)
    app.extensions["offers_feed"] = offers_feed(store)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.weeks import weeks_bp
    from .routes.offers import offers_bp
    from .routes.alerts import alerts_bp
    from .routes.authorizations import authorizations_bp
    from .routes.products import products_bp
    from .routes.users import users_bp
    from .routes.news import news_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(weeks_bp)
    app.register_blueprint(offers_bp)
    app.register_blueprint(alerts_bp)
    app.register_blueprint(authorizations_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(news_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:4173",
            "http://127.0.0.1:4173",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,PUT,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app
