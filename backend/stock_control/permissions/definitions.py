# Overview: All capability tag definitions organized by category.
# Each capability is defined as: (tag, name, description, category)

from .categories import PermissionCategory


# -- OVERVIEW --

OVERVIEW_PERMISSIONS = [
    (
        "dashboard",
        "Dashboard",
        "View the dashboard with transfer counts and recent activity",
        PermissionCategory.OVERVIEW,
    ),
    (
        "reports",
        "Reports",
        "View transfer reports and status summaries",
        PermissionCategory.OVERVIEW,
    ),
]


# -- CATALOG --

CATALOG_PERMISSIONS = [
    (
        "products",
        "Products",
        "View and maintain the product catalog",
        PermissionCategory.CATALOG,
    ),
    (
        "locations",
        "Locations",
        "View and maintain warehouse and branch locations",
        PermissionCategory.CATALOG,
    ),
]


# -- TRANSFERS --

TRANSFER_PERMISSIONS = [
    (
        "new-transfer",
        "New Transfer",
        "Create transfers between locations",
        PermissionCategory.TRANSFERS,
    ),
    (
        "dispatch",
        "Dispatch",
        "Mark pending transfers as dispatched",
        PermissionCategory.TRANSFERS,
    ),
    (
        "receive",
        "Receive",
        "Receive in-transit transfers and report shortages or damages",
        PermissionCategory.TRANSFERS,
    ),
    (
        "all-transfers",
        "All Transfers",
        "Browse every transfer and its details",
        PermissionCategory.TRANSFERS,
    ),
]


# -- ADMINISTRATION --

ADMINISTRATION_PERMISSIONS = [
    (
        "users",
        "Users",
        "Create, edit, and deactivate user accounts",
        PermissionCategory.ADMINISTRATION,
    ),
    (
        "integration",
        "Integration",
        "Configure email notification settings",
        PermissionCategory.ADMINISTRATION,
    ),
]


# Combined list of all capabilities (preserves navigation ordering)
PERMISSION_DEFINITIONS = (
    OVERVIEW_PERMISSIONS[:1]
    + CATALOG_PERMISSIONS
    + TRANSFER_PERMISSIONS
    + OVERVIEW_PERMISSIONS[1:]
    + ADMINISTRATION_PERMISSIONS
)
