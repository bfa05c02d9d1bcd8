# Overview: Back-office roles and the brand capabilities each one grants.

from .helpers import get_all_permission_codes


ADMIN = "Admin"
STAFF = "Staff"
INVENTORY_MANAGER = "InventoryManager"
BRAND_MANAGER = "BrandManager"

ALL_ROLES = (ADMIN, STAFF, INVENTORY_MANAGER, BRAND_MANAGER)

# Roles a brand owner may hand out to approved staff
STAFF_ROLES = (STAFF, INVENTORY_MANAGER, BRAND_MANAGER)

# Pseudo-role carried in customer tokens
CUSTOMER = "Customer"


# Capabilities of approved staff on their brand. Brand owners and Admin
# hold every capability and are not listed here.
DEFAULT_ROLE_PERMISSIONS = {
    STAFF: [
        "VIEW_PRODUCTS",
        "VIEW_INVENTORY",
        "VIEW_ORDERS",
    ],
    INVENTORY_MANAGER: [
        "VIEW_PRODUCTS",
        "MANAGE_PRODUCTS",
        "VIEW_INVENTORY",
        "UPDATE_INVENTORY",
        "VIEW_ORDERS",
    ],
    BRAND_MANAGER: [
        code for code in get_all_permission_codes()
        if code != "MANAGE_STAFF"
    ],
}


def get_role_permissions(role):
    """Capabilities an approved staff member with `role` holds on their brand."""
    return list(DEFAULT_ROLE_PERMISSIONS.get(role, []))
