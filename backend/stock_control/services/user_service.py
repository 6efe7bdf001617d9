# Overview: User management; role defaults, email uniqueness, and password changes.

"""
User Management

ROLE CHANGES: Changing a user's role resets their permissions to the new
role's defaults, unless the same request supplies permissions explicitly.
Permissions stay freely editable afterwards.

Records returned from this module never carry passwordHash.
"""

from __future__ import annotations

from ..errors import ConflictError, NotFoundError, ValidationError
from ..models import User
from ..permissions import ROLES
from ..validation import ModelValidationPolicy, validate_payload
from .auth_service import hash_password, public_user
from .permission_service import default_permissions_for_role, normalize_permissions


USER_POLICY = ModelValidationPolicy(
    writable_fields={"email", "name", "role", "permissions", "active"},
    required_on_create={"email", "name", "role"},
)


def _split_password(payload):
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    payload = dict(payload)
    return payload, payload.pop("password", None)


def _check_fields(store, patch: dict, exclude_id: str | None = None) -> None:
    if "role" in patch and patch["role"] not in ROLES:
        raise ValidationError(f"Invalid role: {patch['role']}. Must be one of {', '.join(ROLES)}")
    if "email" in patch:
        if "@" not in patch["email"]:
            raise ValidationError("email must be a valid email address")
        existing = store.users.get_by_email(patch["email"])
        if existing is not None and existing["id"] != exclude_id:
            raise ConflictError(f"User with email {patch['email']} already exists")
    if "permissions" in patch:
        patch["permissions"] = normalize_permissions(patch["permissions"])


def list_users(store) -> list[dict]:
    return [public_user(u) for u in store.users.get_all()]


def get_user(store, user_id: str) -> dict:
    user = store.users.get(user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return public_user(user)


def create_user(store, payload: dict) -> dict:
    """Password is required and must pass the strength rules."""
    payload, password = _split_password(payload)
    patch = validate_payload(model=User, payload=payload, policy=USER_POLICY, partial=False)
    _check_fields(store, patch)

    if password is None:
        raise ValidationError("password is required")
    patch["passwordHash"] = hash_password(password)

    if "permissions" not in patch:
        patch["permissions"] = default_permissions_for_role(patch["role"])
    patch.setdefault("active", True)

    return public_user(store.users.create(patch))


def update_user(store, user_id: str, payload: dict) -> dict:
    current = store.users.get(user_id)
    if current is None:
        raise NotFoundError("User", user_id)

    payload, password = _split_password(payload)
    patch = validate_payload(model=User, payload=payload, policy=USER_POLICY, partial=True)
    _check_fields(store, patch, exclude_id=user_id)

    role_changed = "role" in patch and patch["role"] != current["role"]
    if role_changed and "permissions" not in patch:
        patch["permissions"] = default_permissions_for_role(patch["role"])

    if password is not None:
        patch["passwordHash"] = hash_password(password)

    return public_user(store.users.update(user_id, patch))


def delete_user(store, user_id: str) -> None:
    get_user(store, user_id)
    store.users.delete(user_id)


# email, display name, role
DEMO_USERS = (
    ("admin@fairfield.com", "Admin User", "admin"),
    ("dispatch@fairfield.com", "Dispatch User", "dispatch"),
    ("receiver@fairfield.com", "Receiver User", "receiver"),
    ("viewer@fairfield.com", "View Only User", "view_only"),
)


def ensure_demo_users(store, password: str) -> list[dict]:
    """
    Create the demo accounts that do not exist yet.

    Safe to rerun: existing emails are left untouched. Returns the users
    created by this call.
    """
    created = []
    for email, name, role in DEMO_USERS:
        if store.users.get_by_email(email) is not None:
            continue
        created.append(create_user(store, {
            "email": email,
            "name": name,
            "role": role,
            "password": password,
        }))
    return created
