# Overview: Role vocabulary and the default capability set applied on role change.

from .helpers import capability_tags


ROLE_ADMIN = "admin"
ROLE_DISPATCH = "dispatch"
ROLE_RECEIVER = "receiver"
ROLE_VIEW_ONLY = "view_only"

ROLES = (ROLE_ADMIN, ROLE_DISPATCH, ROLE_RECEIVER, ROLE_VIEW_ONLY)

# Convenience defaults only: permissions stay editable after a role change.
DEFAULT_ROLE_PERMISSIONS = {
    ROLE_ADMIN: capability_tags(),
    ROLE_DISPATCH: [
        "dashboard",
        "products",
        "locations",
        "dispatch",
        "all-transfers",
    ],
    ROLE_RECEIVER: [
        "dashboard",
        "products",
        "locations",
        "receive",
        "all-transfers",
    ],
    ROLE_VIEW_ONLY: [
        "dashboard",
        "products",
        "locations",
        "all-transfers",
        "reports",
    ],
}
