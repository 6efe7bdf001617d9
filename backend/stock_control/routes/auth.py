# Overview: Flask API routes for login and the current session.

from flask import Blueprint, request, jsonify, current_app, g

from ..extensions import get_store
from ..services import auth_service
from ..services import session_service
from ..services import permission_service
from ..decorators import require_auth


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included as "Authorization: Bearer <token>" on
    protected routes. Inactive accounts get the same 401 as bad passwords.
    """
    try:
        data = request.get_json(silent=True) or {}
        email = data.get("email")
        password = data.get("password")

        if not all([email, password]):
            return jsonify({"error": "email and password required"}), 400

        user = auth_service.authenticate(get_store(), email, password)

        if not user:
            current_app.logger.info("Failed login for %s", email)
            return jsonify({"error": "Invalid credentials"}), 401

        token = session_service.create_session(user)

        return jsonify({
            "user": auth_service.public_user(user),
            "permissions": permission_service.effective_permissions(user),
            "token": token,
            "message": "Login successful",
        }), 200

    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current user with the capabilities the UI should show."""
    user = g.current_user
    return jsonify({
        "user": auth_service.public_user(user),
        "permissions": permission_service.effective_permissions(user),
    }), 200
