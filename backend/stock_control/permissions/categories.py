# Overview: Capability category constants for grouping related capability tags.


class PermissionCategory:
    """Capability categories for organization and UI display."""
    OVERVIEW = "OVERVIEW"
    CATALOG = "CATALOG"
    TRANSFERS = "TRANSFERS"
    ADMINISTRATION = "ADMINISTRATION"
