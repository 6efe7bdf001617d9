# Overview: Flask API routes for locations; warehouses and branches that transfers move between.

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_permission
from ..errors import ConflictError, NotFoundError, ValidationError
from ..extensions import get_store
from ..services import catalog_service


locations_bp = Blueprint("locations", __name__, url_prefix="/api/locations")

# Every transfer screen resolves location names, so reads are widely granted
LOCATION_READ_CAPABILITIES = ("locations", "new-transfer", "all-transfers", "dispatch", "receive")


@locations_bp.get("")
@require_auth
@require_permission(*LOCATION_READ_CAPABILITIES)
def list_locations():
    return jsonify(catalog_service.list_locations(get_store())), 200


@locations_bp.get("/<location_id>")
@require_auth
@require_permission(*LOCATION_READ_CAPABILITIES)
def get_location(location_id: str):
    try:
        return jsonify(catalog_service.get_location(get_store(), location_id)), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@locations_bp.post("")
@require_auth
@require_permission("locations")
def create_location():
    try:
        location = catalog_service.create_location(get_store(), request.get_json(silent=True))
        return jsonify(location), 201
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to create location")
        return jsonify({"error": "Internal server error"}), 500


@locations_bp.patch("/<location_id>")
@require_auth
@require_permission("locations")
def update_location(location_id: str):
    try:
        location = catalog_service.update_location(
            get_store(), location_id, request.get_json(silent=True)
        )
        return jsonify(location), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except ConflictError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to update location %s", location_id)
        return jsonify({"error": "Internal server error"}), 500


@locations_bp.delete("/<location_id>")
@require_auth
@require_permission("locations")
def delete_location(location_id: str):
    try:
        catalog_service.delete_location(get_store(), location_id)
        return jsonify({"success": True}), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except Exception:
        current_app.logger.exception("Failed to delete location %s", location_id)
        return jsonify({"error": "Internal server error"}), 500
