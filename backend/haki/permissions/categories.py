# Overview: Permission category constants for grouping related capabilities.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    CATALOG = "CATALOG"
    INVENTORY = "INVENTORY"
    ORDERS = "ORDERS"
    REPORTS = "REPORTS"
    STAFF = "STAFF"
