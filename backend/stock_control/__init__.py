# backend/stock_control/__init__.py
import logging

from flask import Flask, request

from .config import Config
from .extensions import db, migrate


def create_app(config_overrides: dict | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(Config)
    if config_overrides:
        app.config.update(config_overrides)

    app.logger.setLevel(app.config["LOG_LEVEL"])
    logging.getLogger(__name__).setLevel(app.config["LOG_LEVEL"])

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic can discover metadata reliably
    from . import models  # noqa: F401

    _init_services(app)

    # Register blueprints
    from .routes.system import system_bp
    from .routes.auth import auth_bp
    from .routes.products import products_bp
    from .routes.locations import locations_bp
    from .routes.transfers import transfers_bp
    from .routes.users import users_bp
    from .routes.settings import settings_bp
    from .routes.reports import reports_bp

    app.register_blueprint(system_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(products_bp)
    app.register_blueprint(locations_bp)
    app.register_blueprint(transfers_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(settings_bp)
    app.register_blueprint(reports_bp)

    @app.after_request
    def add_cors_headers(response):
        origin = request.headers.get("Origin")
        allowed_origins = {
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:5000",
            "http://127.0.0.1:5000",
        }
        if origin in allowed_origins:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Vary"] = "Origin"
            response.headers["Access-Control-Allow-Headers"] = "Authorization, Content-Type"
            response.headers["Access-Control-Allow-Methods"] = "GET,POST,DELETE,PATCH,OPTIONS"
        return response

    # Register CLI commands
    from .cli import register_commands
    register_commands(app)

    return app


def _init_services(app: Flask) -> None:
    """Build the store, event bus, and lifecycle engine once per app."""
    from .services.events import EventBus, TransferReceived
    from .services.notification_service import EmailNotifier
    from .services.transfer_service import TransferService
    from .store import build_store

    store = build_store(app.config["STORE_BACKEND"])

    events = EventBus(
        async_mode=app.config["NOTIFICATIONS_ASYNC"],
        max_workers=app.config["NOTIFICATION_WORKERS"],
        context_factory=app.app_context,
    )
    notifier = EmailNotifier(
        store,
        default_sender=app.config["MAIL_DEFAULT_SENDER"],
        timeout=app.config["NOTIFICATION_TIMEOUT_SECONDS"],
    )
    events.subscribe(TransferReceived, notifier.on_transfer_received)

    app.extensions["stock_control.store"] = store
    app.extensions["stock_control.events"] = events
    app.extensions["stock_control.notifier"] = notifier
    app.extensions["stock_control.transfers"] = TransferService(store, events)
