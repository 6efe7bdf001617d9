# Overview: Flask API routes for transfer reporting.

from flask import Blueprint, request, jsonify

from ..decorators import require_auth, require_permission
from ..extensions import get_store
from ..services import reporting_service


reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.get("/summary")
@require_auth
@require_permission("reports", "dashboard")
def transfer_summary():
    """
    Query params:
    - recent: number of recent transfers to include (default 5, max 50)
    """
    recent = request.args.get("recent", type=int) or reporting_service.DEFAULT_RECENT_LIMIT
    recent = max(1, min(recent, 50))
    return jsonify(reporting_service.transfer_summary(get_store(), recent_limit=recent)), 200
