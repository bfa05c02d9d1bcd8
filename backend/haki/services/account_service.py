# Overview: Service-layer operations for admin account management and customer profiles.

from __future__ import annotations

from ..extensions import db
from ..models import User, Customer, Order, Cart
from ..permissions import ADMIN, ALL_ROLES
from ..validation import ConflictError, NotFoundError, ValidationError, parse_int
from . import upload_service
from .auth_service import EMAIL_EXISTS_MESSAGE, email_taken, hash_password, normalize_email
from .brand_access_service import APPROVED, PENDING
from .brand_service import delete_owned_brands


USER_NOT_FOUND_MESSAGE = "Người dùng không tồn tại."
CUSTOMER_NOT_FOUND_MESSAGE = "Khách hàng không tồn tại."


def _clean_name(value) -> str:
    name = str(value or "").strip()
    if not name:
        raise ValidationError("Họ tên không được để trống.")
    return name


def _apply_email(account, model: type, value) -> None:
    email = normalize_email(value)
    if not email:
        raise ValidationError("Email không được để trống.")
    if email_taken(email, model, exclude_id=account.id):
        raise ConflictError(EMAIL_EXISTS_MESSAGE)
    account.email = email


# -- Users --

def list_users() -> list[User]:
    return db.session.query(User).order_by(User.id).all()


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError(USER_NOT_FOUND_MESSAGE)
    return user


def update_user(user_id: int, payload: dict) -> User:
    user = get_user(user_id)

    if "name" in payload:
        user.name = _clean_name(payload["name"])
    if "email" in payload:
        _apply_email(user, User, payload["email"])
    if "role" in payload:
        if payload["role"] not in ALL_ROLES:
            raise ValidationError("Vai trò không hợp lệ.")
        user.role = payload["role"]
    if "password" in payload and payload["password"]:
        if len(payload["password"]) < 6:
            raise ValidationError("Mật khẩu phải có ít nhất 6 ký tự.")
        user.password_hash = hash_password(payload["password"])
    if "is_email_verified" in payload:
        user.is_email_verified = bool(payload["is_email_verified"])
    if "brand_id" in payload:
        brand_id = payload["brand_id"]
        user.brand_id = parse_int(brand_id, "brand_id") if brand_id is not None else None
    if "approval_status" in payload:
        status = payload["approval_status"]
        if status not in (None, PENDING, APPROVED):
            raise ValidationError("Trạng thái duyệt không hợp lệ.")
        user.approval_status = status
    if user.brand_id is None:
        user.approval_status = None

    db.session.commit()
    return user


def delete_user(user_id: int) -> None:
    """Admins cannot be deleted. Owned brands go with the user."""
    user = get_user(user_id)
    if user.role == ADMIN:
        raise ValidationError("Không thể xóa tài khoản Admin.")
    try:
        images = delete_owned_brands(user)
        db.session.delete(user)
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    for url in images:
        upload_service.delete_image(url)


# -- Customers --

def list_customers() -> list[Customer]:
    return db.session.query(Customer).order_by(Customer.id).all()


def get_customer(customer_id: int) -> Customer:
    customer = db.session.get(Customer, customer_id)
    if customer is None:
        raise NotFoundError(CUSTOMER_NOT_FOUND_MESSAGE)
    return customer


def update_customer(customer_id: int, payload: dict) -> Customer:
    customer = get_customer(customer_id)
    if "name" in payload:
        customer.name = _clean_name(payload["name"])
    if "email" in payload:
        _apply_email(customer, Customer, payload["email"])
    if "is_email_verified" in payload:
        customer.is_email_verified = bool(payload["is_email_verified"])
    db.session.commit()
    return customer


def delete_customer(customer_id: int) -> None:
    """Orders survive with customer_id cleared; cart and addresses are removed."""
    customer = get_customer(customer_id)
    for order in db.session.query(Order).filter_by(customer_id=customer.id).all():
        order.customer_id = None
    cart = db.session.query(Cart).filter_by(customer_id=customer.id).first()
    if cart is not None:
        db.session.delete(cart)
    db.session.delete(customer)
    db.session.commit()


# -- Profile (customer self-service) --

def profile(customer: Customer) -> dict:
    return {
        **customer.to_dict(),
        "addresses": [address.to_dict() for address in customer.addresses],
    }


def update_profile(customer: Customer, payload: dict) -> Customer:
    customer.name = _clean_name(payload.get("name"))
    db.session.commit()
    return customer
