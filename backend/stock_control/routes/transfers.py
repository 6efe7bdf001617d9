# backend/stock_control/routes/transfers.py
"""
Transfer lifecycle API routes.

pending -> in_transit (dispatch) -> received (receive). Status never
changes through any other route.
"""
from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth, require_permission
from ..errors import InvalidTransitionError, NotFoundError, ValidationError
from ..extensions import get_transfer_service


transfers_bp = Blueprint("transfers", __name__, url_prefix="/api/transfers")

TRANSFER_READ_CAPABILITIES = ("all-transfers", "dispatch", "receive", "dashboard", "reports")


@transfers_bp.route("", methods=["GET"])
@require_auth
@require_permission(*TRANSFER_READ_CAPABILITIES)
def list_transfers():
    """
    List transfers in creation order.

    Query params:
    - status: pending | in_transit | received (optional)
    """
    try:
        transfers = get_transfer_service().list_transfers(status=request.args.get("status") or None)
        return jsonify(transfers), 200
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400


@transfers_bp.route("/<transfer_id>", methods=["GET"])
@require_auth
@require_permission(*TRANSFER_READ_CAPABILITIES)
def get_transfer(transfer_id: str):
    try:
        return jsonify(get_transfer_service().get_transfer(transfer_id)), 200
    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404


@transfers_bp.route("", methods=["POST"])
@require_auth
@require_permission("new-transfer")
def create_transfer():
    """
    Create a new transfer (status: pending).

    Request body:
    {
        "fromLocationId": str,
        "toLocationId": str,
        "driverName": str,
        "vehicleReg": str,
        "items": [{"productId": str, "quantity": int, ...}]
    }

    Returns:
        201: Transfer created
        400: Invalid request
        403: Forbidden
    """
    try:
        transfer = get_transfer_service().create_transfer(
            request.get_json(silent=True),
            user_id=g.current_user["id"],
        )
        return jsonify(transfer), 201

    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to create transfer")
        return jsonify({"error": "Internal server error"}), 500


@transfers_bp.route("/<transfer_id>/dispatch", methods=["PATCH"])
@require_auth
@require_permission("dispatch")
def dispatch_transfer(transfer_id: str):
    """
    Dispatch a pending transfer (mark as in_transit).

    Returns:
        200: Transfer dispatched
        403: Forbidden
        404: Transfer not found
        409: Transfer is not pending
    """
    try:
        transfer = get_transfer_service().dispatch_transfer(
            transfer_id,
            user_id=g.current_user["id"],
        )
        return jsonify(transfer), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InvalidTransitionError as e:
        return jsonify({"error": str(e)}), 409
    except Exception:
        current_app.logger.exception("Failed to dispatch transfer %s", transfer_id)
        return jsonify({"error": "Internal server error"}), 500


@transfers_bp.route("/<transfer_id>/receive", methods=["PATCH"])
@require_auth
@require_permission("receive")
def receive_transfer(transfer_id: str):
    """
    Receive an in-transit transfer.

    Request body (both optional):
    {
        "shortages": [{"productId": str, "quantityShort": int}],
        "damages": [{"productId": str, "quantityDamaged": int, "reason": str}]
    }

    Zero-quantity rows are dropped. The notification email is sent after
    the response is decided; its failure never changes the response.

    Returns:
        200: Transfer received
        400: Invalid shortages/damages
        403: Forbidden
        404: Transfer not found
        409: Transfer is not in transit
    """
    data = request.get_json(silent=True) or {}

    try:
        transfer = get_transfer_service().receive_transfer(
            transfer_id,
            user_id=g.current_user["id"],
            shortages=data.get("shortages"),
            damages=data.get("damages"),
        )
        return jsonify(transfer), 200

    except NotFoundError as e:
        return jsonify({"error": str(e)}), 404
    except InvalidTransitionError as e:
        return jsonify({"error": str(e)}), 409
    except ValidationError as e:
        return jsonify({"error": str(e)}), 400
    except Exception:
        current_app.logger.exception("Failed to receive transfer %s", transfer_id)
        return jsonify({"error": "Internal server error"}), 500
