# Overview: Flask extension instances for database and migrations.

from flask import current_app
from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate

db = SQLAlchemy()
migrate = Migrate()


def get_store():
    """Entity store bound to the current application."""
    return current_app.extensions["stock_control.store"]


def get_event_bus():
    return current_app.extensions["stock_control.events"]


def get_transfer_service():
    return current_app.extensions["stock_control.transfers"]


def get_notifier():
    return current_app.extensions["stock_control.notifier"]
