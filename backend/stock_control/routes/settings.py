# Overview: Flask API routes for the email integration settings.

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_permission
from ..errors import NotificationError, ValidationError
from ..extensions import get_notifier, get_store
from ..services import settings_service


settings_bp = Blueprint("settings", __name__, url_prefix="/api/email-settings")


@settings_bp.get("")
@require_auth
@require_permission("integration")
def get_email_settings():
    settings = settings_service.get_settings(get_store())
    return jsonify(settings_service.public_settings(settings)), 200


@settings_bp.post("")
@require_auth
@require_permission("integration")
def save_email_settings():
    """
    Save provider settings. "configured" is derived from the provider's
    mandatory fields and cannot be set directly.
    """
    try:
        settings = settings_service.save_settings(get_store(), request.get_json(silent=True))
        current_app.logger.info(
            "Email settings saved (provider=%s, configured=%s)",
            settings.get("provider"), settings.get("configured"),
        )
        return jsonify(settings_service.public_settings(settings)), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to save email settings")
        return jsonify({"error": "Failed to save email settings"}), 500


@settings_bp.post("/test")
@require_auth
@require_permission("integration")
def send_test_email():
    try:
        recipient = get_notifier().send_test_email()
        return jsonify({"success": True, "recipient": recipient}), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except NotificationError:
        current_app.logger.exception("Test email failed")
        return jsonify({"error": "Failed to send test email"}), 500
