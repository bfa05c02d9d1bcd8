# Overview: Permission system package.
# Re-exports the public capability and role APIs.

from .categories import PermissionCategory
from .definitions import PERMISSION_DEFINITIONS
from .helpers import (
    get_all_permission_codes,
    get_permission_definition,
    list_permission_definitions,
    validate_permission_code,
)
from .roles import (
    ADMIN,
    STAFF,
    INVENTORY_MANAGER,
    BRAND_MANAGER,
    CUSTOMER,
    ALL_ROLES,
    STAFF_ROLES,
    DEFAULT_ROLE_PERMISSIONS,
    get_role_permissions,
)

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "get_all_permission_codes",
    "get_permission_definition",
    "list_permission_definitions",
    "validate_permission_code",
    "ADMIN",
    "STAFF",
    "INVENTORY_MANAGER",
    "BRAND_MANAGER",
    "CUSTOMER",
    "ALL_ROLES",
    "STAFF_ROLES",
    "DEFAULT_ROLE_PERMISSIONS",
    "get_role_permissions",
]
