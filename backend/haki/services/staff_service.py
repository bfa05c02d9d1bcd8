# Overview: Service-layer operations for staff applications, approval and brand roles.

"""
Staff Approval Workflow

apply:   user.brand_id = brand, approval_status = Pending (Staff accounts only)
approve: Pending -> Approved, role reset to Staff (brand access starts here)
reject:  Pending -> brand_id and approval_status cleared
remove:  Approved -> detached from brand

Only holders of MANAGE_STAFF on the staff member's brand (owner, Admin) may
act on an application or member.
"""

from __future__ import annotations

from ..extensions import db
from ..models import User
from ..permissions import STAFF, STAFF_ROLES, get_role_permissions
from ..validation import NotFoundError, ValidationError
from .brand_access_service import (
    APPROVED,
    PENDING,
    accessible_brands,
    get_brand,
    is_admin,
    require_brand_permission,
)


STAFF_NOT_FOUND_MESSAGE = "Nhân viên không tồn tại."


def apply_to_brand(user: User, brand_id: int) -> User:
    if is_admin(user):
        raise ValidationError("Admin không thể ứng tuyển vào thương hiệu.")
    if user.brand_id is not None or user.approval_status is not None:
        raise ValidationError("Bạn đã thuộc về một thương hiệu hoặc đang có đơn ứng tuyển.")
    brand = get_brand(brand_id)
    if brand.owner_id == user.id:
        raise ValidationError("Bạn là chủ của thương hiệu này.")

    user.brand_id = brand.id
    user.approval_status = PENDING
    db.session.commit()
    return user


def _members(actor: User, status: str) -> list[User]:
    brand_ids = [brand.id for brand in accessible_brands(actor, "MANAGE_STAFF")]
    if not brand_ids:
        return []
    return (
        db.session.query(User)
        .filter(User.brand_id.in_(brand_ids), User.approval_status == status)
        .order_by(User.id)
        .all()
    )


def pending_applications(actor: User) -> list[User]:
    return _members(actor, PENDING)


def approved_staff(actor: User) -> list[User]:
    return _members(actor, APPROVED)


def _managed_member(actor: User, user_id: int, status: str | None = None) -> User:
    member = db.session.get(User, user_id)
    if member is None or member.brand_id is None:
        raise NotFoundError(STAFF_NOT_FOUND_MESSAGE)
    require_brand_permission(actor, member.brand_id, "MANAGE_STAFF")
    if status is not None and member.approval_status != status:
        if status == PENDING:
            raise ValidationError("Đơn ứng tuyển không ở trạng thái Pending.")
        raise NotFoundError(STAFF_NOT_FOUND_MESSAGE)
    return member


def approve(actor: User, user_id: int) -> User:
    """New members start at Staff; owners raise the role afterwards."""
    member = _managed_member(actor, user_id, PENDING)
    member.approval_status = APPROVED
    member.role = STAFF
    db.session.commit()
    return member


def reject(actor: User, user_id: int) -> User:
    member = _managed_member(actor, user_id, PENDING)
    member.brand_id = None
    member.approval_status = None
    db.session.commit()
    return member


def _validate_staff_role(role) -> str:
    if role not in STAFF_ROLES:
        raise ValidationError("Vai trò không hợp lệ.")
    return role


def update_member(actor: User, user_id: int, payload: dict) -> User:
    member = _managed_member(actor, user_id, APPROVED)
    if "name" in payload:
        name = str(payload.get("name") or "").strip()
        if not name:
            raise ValidationError("Họ tên không được để trống.")
        member.name = name
    if "role" in payload:
        member.role = _validate_staff_role(payload.get("role"))
    db.session.commit()
    return member


def remove_member(actor: User, user_id: int) -> User:
    member = _managed_member(actor, user_id)
    member.brand_id = None
    member.approval_status = None
    db.session.commit()
    return member


def brand_staff_permissions(actor: User, brand_id: int) -> list[dict]:
    brand = require_brand_permission(actor, brand_id, "MANAGE_STAFF")
    members = (
        db.session.query(User)
        .filter(User.brand_id == brand.id, User.approval_status == APPROVED)
        .order_by(User.id)
        .all()
    )
    return [
        {**member.to_dict(), "permissions": get_role_permissions(member.role)}
        for member in members
    ]


def set_member_role(actor: User, brand_id: int, user_id: int, role) -> User:
    require_brand_permission(actor, brand_id, "MANAGE_STAFF")
    member = db.session.get(User, user_id)
    if member is None or member.brand_id != brand_id or member.approval_status != APPROVED:
        raise NotFoundError(STAFF_NOT_FOUND_MESSAGE)
    member.role = _validate_staff_role(role)
    db.session.commit()
    return member
