# Overview: All brand-scoped capability definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- CATALOG --

CATALOG_PERMISSIONS = [
    (
        "VIEW_PRODUCTS",
        "View Products",
        "View the brand's products including cost prices",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_PRODUCTS",
        "Manage Products",
        "Create, edit, delete products and upload product images",
        PermissionCategory.CATALOG,
    ),
    (
        "MANAGE_BRAND",
        "Manage Brand",
        "Edit brand name and background styling",
        PermissionCategory.CATALOG,
    ),
]


# -- INVENTORY --

INVENTORY_PERMISSIONS = [
    (
        "VIEW_INVENTORY",
        "View Inventory",
        "View stock quantities",
        PermissionCategory.INVENTORY,
    ),
    (
        "UPDATE_INVENTORY",
        "Update Inventory",
        "Set stock quantities",
        PermissionCategory.INVENTORY,
    ),
]


# -- ORDERS --

ORDER_PERMISSIONS = [
    (
        "VIEW_ORDERS",
        "View Orders",
        "View the brand's orders",
        PermissionCategory.ORDERS,
    ),
    (
        "MANAGE_ORDERS",
        "Manage Orders",
        "Confirm payment, change status, cancel and delete orders",
        PermissionCategory.ORDERS,
    ),
]


# -- REPORTS --

REPORT_PERMISSIONS = [
    (
        "VIEW_REVENUE",
        "View Revenue",
        "View revenue and profit reports",
        PermissionCategory.REPORTS,
    ),
]


# -- STAFF --

STAFF_PERMISSIONS = [
    (
        "MANAGE_STAFF",
        "Manage Staff",
        "Approve, reject, edit and remove brand staff and their roles",
        PermissionCategory.STAFF,
    ),
]


PERMISSION_DEFINITIONS = (
    CATALOG_PERMISSIONS
    + INVENTORY_PERMISSIONS
    + ORDER_PERMISSIONS
    + REPORT_PERMISSIONS
    + STAFF_PERMISSIONS
)
