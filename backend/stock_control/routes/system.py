# backend/stock_control/routes/system.py
"""
System health and version endpoints.

No authentication: load balancers and deploy checks call these.
"""

import time
from flask import Blueprint, current_app

from ..extensions import get_store
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_store_health() -> dict:
    """
    Check the entity store answers a basic read.

    Returns dict with status and details.
    """
    start_time = time.time()
    store = get_store()
    try:
        user_count = len(store.users.get_all())
        transfer_count = len(store.transfers.get_all())

        elapsed_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy",
            "latency_ms": round(elapsed_ms, 2),
            "details": {
                "backend": store.backend,
                "users": user_count,
                "transfers": transfer_count,
            }
        }
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Store health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Store error"
        }


@system_bp.get("/health")
def health():
    """
    Returns:
    - 200: Store healthy
    - 503: Store unhealthy
    """
    start_time = time.time()
    store_health = check_store_health()
    healthy = store_health["status"] == "healthy"

    response = {
        "status": "healthy" if healthy else "unhealthy",
        "timestamp": to_utc_z(utcnow()),
        "total_latency_ms": round((time.time() - start_time) * 1000, 2),
        "checks": {
            "store": store_health,
        }
    }

    return response, 200 if healthy else 503


@system_bp.get("/version")
def version():
    return {
        "name": "stock-control",
        "version": current_app.config["APP_VERSION"],
    }, 200
