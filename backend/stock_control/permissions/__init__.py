# Overview: Capability tag package.
# Re-exports all public APIs for short imports.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    OVERVIEW_PERMISSIONS,
    CATALOG_PERMISSIONS,
    TRANSFER_PERMISSIONS,
    ADMINISTRATION_PERMISSIONS,
)
from .helpers import (
    Capability,
    CAPABILITIES,
    capability_tags,
    capabilities_in,
    find_capability,
    is_capability,
)
from .roles import (
    ROLES,
    ROLE_ADMIN,
    ROLE_DISPATCH,
    ROLE_RECEIVER,
    ROLE_VIEW_ONLY,
    DEFAULT_ROLE_PERMISSIONS,
)

__all__ = [
    "Capability",
    "CAPABILITIES",
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "OVERVIEW_PERMISSIONS",
    "CATALOG_PERMISSIONS",
    "TRANSFER_PERMISSIONS",
    "ADMINISTRATION_PERMISSIONS",
    "capability_tags",
    "capabilities_in",
    "find_capability",
    "is_capability",
    "ROLES",
    "ROLE_ADMIN",
    "ROLE_DISPATCH",
    "ROLE_RECEIVER",
    "ROLE_VIEW_ONLY",
    "DEFAULT_ROLE_PERMISSIONS",
]
