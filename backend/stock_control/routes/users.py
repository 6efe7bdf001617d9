# Overview: Flask API routes for user management; requires the "users" capability.

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_permission
from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import get_store
from ..services import user_service


users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.get("")
@require_auth
@require_permission("users")
def list_users():
    return jsonify(user_service.list_users(get_store())), 200


@users_bp.post("")
@require_auth
@require_permission("users")
def create_user():
    """
    Create a user.

    Request body:
    {
        "email": str,
        "name": str,
        "role": "admin" | "dispatch" | "receiver" | "view_only",
        "password": str,
        "permissions": [str] (optional, defaults to the role's set),
        "active": bool (optional)
    }
    """
    try:
        user = user_service.create_user(get_store(), request.get_json(silent=True))
        current_app.logger.info("User %s created", user["email"])
        return jsonify(user), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create user")
        return jsonify({"error": "Internal server error"}), 500


@users_bp.patch("/<user_id>")
@require_auth
@require_permission("users")
def update_user(user_id: str):
    """Partial update; a role change without permissions resets them to role defaults."""
    try:
        user = user_service.update_user(get_store(), user_id, request.get_json(silent=True))
        return jsonify(user), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to update user %s", user_id)
        return jsonify({"error": "Internal server error"}), 500


@users_bp.delete("/<user_id>")
@require_auth
@require_permission("users")
def delete_user(user_id: str):
    try:
        user_service.delete_user(get_store(), user_id)
        return jsonify({"success": True}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete user %s", user_id)
        return jsonify({"error": "Internal server error"}), 500
