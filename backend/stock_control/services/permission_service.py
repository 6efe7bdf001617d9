# Overview: Capability checks for users; the single access rule every route goes through.

"""
Capability Evaluation

WHY: One rule decides what a user may see and trigger, so the HTTP layer,
the CLI, and tests all agree.

RULES:
- No user: nothing is granted (fail closed)
- role == admin: every capability, whatever the permissions list says
- Otherwise: the tag must be present in the user's permissions

Permissions are the stored list on the user record; role only seeds the
list through default_permissions_for_role() when the role changes.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ..errors import PermissionDeniedError, ValidationError
from ..permissions import (
    DEFAULT_ROLE_PERMISSIONS,
    ROLE_ADMIN,
    capability_tags,
    is_capability,
)


logger = logging.getLogger(__name__)


def has_capability(user: Optional[dict], tag: str) -> bool:
    """True if user may use the capability tagged tag."""
    if not user:
        return False
    if user.get("role") == ROLE_ADMIN:
        return True
    return tag in (user.get("permissions") or [])


def require_capability(user: Optional[dict], *tags: str) -> None:
    """
    Pass if any of tags is granted, else raise PermissionDeniedError.

    Grants are not logged; denials are.
    """
    if any(has_capability(user, tag) for tag in tags):
        return
    logger.warning(
        "Permission denied: user=%s role=%s required_any=%s",
        user.get("id") if user else None,
        user.get("role") if user else None,
        ",".join(tags),
    )
    raise PermissionDeniedError(f"Missing capability: {' or '.join(tags)}")


def default_permissions_for_role(role: str) -> list[str]:
    """
    Default capability set for role.

    Unknown roles get nothing; admin gets the full vocabulary.
    """
    if role == ROLE_ADMIN:
        return capability_tags()
    return list(DEFAULT_ROLE_PERMISSIONS.get(role, []))


def normalize_permissions(tags: Iterable[str]) -> list[str]:
    """Validate tags against the vocabulary, de-duplicate, and sort."""
    if isinstance(tags, str) or tags is None:
        raise ValidationError("permissions must be a list of capability tags")
    normalized = set()
    for tag in tags:
        if not isinstance(tag, str) or not is_capability(tag):
            raise ValidationError(f"Unknown permission: {tag}")
        normalized.add(tag)
    return sorted(normalized)


def effective_permissions(user: Optional[dict]) -> list[str]:
    """Capabilities the user actually holds (admin expands to all)."""
    if not user:
        return []
    return [tag for tag in capability_tags() if has_capability(user, tag)]
