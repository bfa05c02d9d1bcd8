# Overview: Brand-scoped authorization; the single place that resolves who may act on a brand.

"""
Brand Access Service

Standing of a back-office user on a brand:
- Admin: every capability on every brand
- Owner (Brand.owner_id == user.id): every capability on that brand
- Approved staff (User.brand_id == brand.id, approval_status == Approved):
  the capabilities of their role (permissions/roles.py)
- Anyone else: nothing -> BrandAccessError (403)

Staff act on behalf of their brand's owner; effective_owner_id() follows
User.brand_id -> Brand.owner_id once, here, instead of in every route.
"""

from __future__ import annotations

from ..extensions import db
from ..models import Brand, User
from ..permissions import ADMIN, get_all_permission_codes, get_role_permissions, validate_permission_code
from ..validation import NotFoundError


APPROVED = "Approved"
PENDING = "Pending"

ACCESS_DENIED_MESSAGE = "Bạn không có quyền truy cập thương hiệu này."
BRAND_NOT_FOUND_MESSAGE = "Brand không tồn tại."


class BrandAccessError(Exception):
    """403: caller has no standing (or not enough) on the brand."""
    def __init__(self, message: str = ACCESS_DENIED_MESSAGE, required_permission: str | None = None):
        super().__init__(message)
        self.required_permission = required_permission


def is_admin(user: User) -> bool:
    return user is not None and user.role == ADMIN


def is_approved_staff(user: User) -> bool:
    return user.brand_id is not None and user.approval_status == APPROVED


def effective_owner_id(user: User) -> int:
    """Owner the user acts for: their brand's owner if approved staff, else themselves."""
    if is_approved_staff(user) and user.brand is not None:
        return user.brand.owner_id
    return user.id


def get_brand(brand_id: int) -> Brand:
    brand = db.session.get(Brand, brand_id)
    if brand is None:
        raise NotFoundError(BRAND_NOT_FOUND_MESSAGE)
    return brand


def brand_permissions(user: User, brand: Brand) -> set[str]:
    if is_admin(user) or brand.owner_id == user.id:
        return set(get_all_permission_codes())
    if brand.owner_id != effective_owner_id(user):
        return set()
    if user.brand_id == brand.id:
        return set(get_role_permissions(user.role))
    return set()


def has_brand_permission(user: User, brand: Brand, permission_code: str) -> bool:
    if not validate_permission_code(permission_code):
        raise ValueError(f"Unknown permission code: {permission_code}")
    return permission_code in brand_permissions(user, brand)


def require_brand_permission(user: User, brand_or_id, permission_code: str) -> Brand:
    """Resolve the brand (404 if missing) and raise BrandAccessError unless permitted."""
    brand = brand_or_id if isinstance(brand_or_id, Brand) else get_brand(brand_or_id)
    if not has_brand_permission(user, brand, permission_code):
        raise BrandAccessError(required_permission=permission_code)
    return brand


def accessible_brands(user: User, permission_code: str) -> list[Brand]:
    """Brands on which the user holds permission_code (all brands for Admin)."""
    if is_admin(user):
        return db.session.query(Brand).order_by(Brand.id).all()

    candidates = {brand.id: brand for brand in user.owned_brands}
    if is_approved_staff(user) and user.brand is not None:
        candidates.setdefault(user.brand.id, user.brand)

    return [
        brand for brand_id, brand in sorted(candidates.items())
        if has_brand_permission(user, brand, permission_code)
    ]
