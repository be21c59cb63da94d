# Overview: Permission category constants for grouping related grants.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    SALES = "SALES"
    ADMINISTRATION = "ADMINISTRATION"
