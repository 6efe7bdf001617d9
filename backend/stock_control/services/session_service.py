# Overview: Signed, time-limited bearer tokens for API sessions.

"""
Session Token Service

WHY: Tokens are signed with SECRET_KEY by itsdangerous, so validating one
needs no session table and works the same with every store backend.

SECURITY FEATURES:
- Signature covers the user id; tampering invalidates the token
- Absolute timeout of SESSION_MAX_AGE_SECONDS
- Every validation reloads the user; deleted or deactivated accounts stop
  validating immediately
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from flask import current_app
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer


SESSION_SALT = "stock-control-session"


@dataclass
class SessionContext:
    """Session context returned by validate_session."""
    user: dict
    issued_at: Optional[datetime]


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=SESSION_SALT)


def create_session(user: dict) -> str:
    """Return a bearer token for user."""
    return _serializer().dumps({"uid": user["id"]})


def validate_session(token: str, store) -> Optional[SessionContext]:
    """
    Validate token and return SessionContext if valid.

    Returns None if:
    - Signature is invalid or the token has expired
    - User no longer exists or is deactivated
    """
    max_age = current_app.config["SESSION_MAX_AGE_SECONDS"]
    try:
        payload, issued_at = _serializer().loads(token, max_age=max_age, return_timestamp=True)
    except SignatureExpired:
        current_app.logger.info("Rejected expired session token")
        return None
    except BadSignature:
        return None

    user_id = payload.get("uid") if isinstance(payload, dict) else None
    if not user_id:
        return None

    user = store.users.get(user_id)
    if not user or not user.get("active", False):
        return None

    return SessionContext(user=user, issued_at=issued_at)
