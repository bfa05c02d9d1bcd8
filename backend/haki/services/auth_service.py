# Overview: Service-layer operations for auth; registration, email verification, 2FA login and password reset.

"""
Authentication Service

Two account kinds share one flow:
- users (back office): /api/auth/register, /login, ...
- customers (storefront): /api/auth/registerCustomer, /loginCustomer, ...

Flow per kind:
1. register   -> account (unverified) + REGISTER code emailed
2. verify     -> is_email_verified = True
3. login      -> password check, then LOGIN_2FA code emailed
4. verify 2fa -> bearer token
5. forgot / reset password via RESET_PASSWORD code

SECURITY NOTES:
- Passwords hashed with bcrypt (BCRYPT_ROUNDS, default 12)
- OTP checks fail with one generic message whether the account, the code or
  its freshness was wrong
- forgot-password answers identically for unknown emails
"""

from __future__ import annotations

from dataclasses import dataclass

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import User, Customer
from ..permissions import ADMIN, STAFF, ALL_ROLES
from ..validation import ValidationError, ConflictError, enforce_rules_password
from . import otp_service, token_service
from .mail_service import send_otp_email


SUBJECT_REGISTER = "Xác thực email đăng ký"
SUBJECT_LOGIN_2FA = "Mã OTP đăng nhập 2FA"
SUBJECT_RESET_PASSWORD = "Mã OTP đặt lại mật khẩu"

EMAIL_EXISTS_MESSAGE = "Email đã tồn tại."
BAD_CREDENTIALS_MESSAGE = "Sai email hoặc mật khẩu."
EMAIL_NOT_VERIFIED_MESSAGE = "Email chưa được xác thực."


class AuthenticationError(Exception):
    """Wrong email/password (401)."""


@dataclass(frozen=True)
class AccountKind:
    name: str
    model: type
    register_purpose: str
    login_purpose: str
    reset_purpose: str


USER_ACCOUNTS = AccountKind(
    name=token_service.KIND_USER,
    model=User,
    register_purpose=otp_service.REGISTER,
    login_purpose=otp_service.LOGIN_2FA,
    reset_purpose=otp_service.RESET_PASSWORD,
)

CUSTOMER_ACCOUNTS = AccountKind(
    name=token_service.KIND_CUSTOMER,
    model=Customer,
    register_purpose=otp_service.CUSTOMER_REGISTER,
    login_purpose=otp_service.CUSTOMER_LOGIN_2FA,
    reset_purpose=otp_service.CUSTOMER_RESET_PASSWORD,
)


def hash_password(password: str) -> str:
    """Hash password using bcrypt; cost factor from BCRYPT_ROUNDS."""
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """Timing-safe bcrypt check. Malformed hashes never match."""
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _find(kind: AccountKind, email: str):
    return db.session.query(kind.model).filter_by(email=normalize_email(email)).first()


def email_taken(email: str, model: type, exclude_id: int | None = None) -> bool:
    query = db.session.query(model).filter_by(email=normalize_email(email))
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return db.session.query(query.exists()).scalar()


def _validate_registration(kind: AccountKind, name: str | None, email: str | None,
                           password: str | None, confirm_password: str | None) -> str:
    email = normalize_email(email)
    if not (name or "").strip() or not email:
        raise ValidationError("Vui lòng nhập đầy đủ họ tên và email.")
    if email_taken(email, kind.model):
        raise ValidationError(EMAIL_EXISTS_MESSAGE)
    enforce_rules_password(password, confirm_password)
    return email


def register_user(name, email, password, confirm_password, role: str | None = None) -> User:
    """Self-registration for back-office accounts. Admin cannot be self-assigned."""
    role = role or STAFF
    if role not in ALL_ROLES or role == ADMIN:
        raise ValidationError("Vai trò không hợp lệ.")
    email = _validate_registration(USER_ACCOUNTS, name, email, password, confirm_password)

    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        role=role,
        is_email_verified=False,
    )
    db.session.add(user)
    db.session.commit()

    _send_code(USER_ACCOUNTS.register_purpose, email, SUBJECT_REGISTER)
    return user


def register_customer(name, email, password, confirm_password) -> Customer:
    email = _validate_registration(CUSTOMER_ACCOUNTS, name, email, password, confirm_password)

    customer = Customer(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        is_email_verified=False,
    )
    db.session.add(customer)
    db.session.commit()

    _send_code(CUSTOMER_ACCOUNTS.register_purpose, email, SUBJECT_REGISTER)
    return customer


def _send_code(purpose: str, email: str, subject: str) -> None:
    code = otp_service.issue(purpose, email)
    send_otp_email(email, subject, code)


def verify_email(kind: AccountKind, email: str, otp: str) -> None:
    account = _find(kind, email)
    if account is None:
        raise otp_service.InvalidOtpError()
    otp_service.verify_and_consume(kind.register_purpose, account.email, otp)
    account.is_email_verified = True
    db.session.commit()


def begin_login(kind: AccountKind, email: str, password: str) -> None:
    """Check credentials and email a LOGIN_2FA code."""
    account = _find(kind, email)
    if account is None or not verify_password(password or "", account.password_hash):
        raise AuthenticationError(BAD_CREDENTIALS_MESSAGE)
    if not account.is_email_verified:
        raise ValidationError(EMAIL_NOT_VERIFIED_MESSAGE)
    _send_code(kind.login_purpose, account.email, SUBJECT_LOGIN_2FA)


def complete_login(kind: AccountKind, email: str, otp: str):
    """Consume the LOGIN_2FA code and return (account, bearer token)."""
    account = _find(kind, email)
    if account is None:
        raise otp_service.InvalidOtpError()
    otp_service.verify_and_consume(kind.login_purpose, account.email, otp)
    db.session.commit()

    if kind is USER_ACCOUNTS:
        token = token_service.issue_user_token(account)
    else:
        token = token_service.issue_customer_token(account)
    return account, token


def request_password_reset(kind: AccountKind, email: str) -> None:
    account = _find(kind, email)
    if account is None:
        current_app.logger.info("Password reset requested for unknown %s email", kind.name)
        return
    _send_code(kind.reset_purpose, account.email, SUBJECT_RESET_PASSWORD)


def reset_password(kind: AccountKind, email: str, otp: str,
                   new_password: str | None, confirm_password: str | None) -> None:
    enforce_rules_password(new_password, confirm_password)
    account = _find(kind, email)
    if account is None:
        raise otp_service.InvalidOtpError()
    otp_service.verify_and_consume(kind.reset_purpose, account.email, otp)
    account.password_hash = hash_password(new_password)
    db.session.commit()


def create_user(name: str, email: str, password: str, role: str,
                brand_id: int | None = None, is_email_verified: bool = True) -> User:
    """Admin/CLI creation path: no OTP round trip, email may be pre-verified."""
    email = normalize_email(email)
    if not (name or "").strip() or not email:
        raise ValidationError("Vui lòng nhập đầy đủ họ tên và email.")
    if role not in ALL_ROLES:
        raise ValidationError("Vai trò không hợp lệ.")
    if not password or len(password) < 6:
        raise ValidationError("Mật khẩu phải có ít nhất 6 ký tự.")
    if email_taken(email, User):
        raise ConflictError(EMAIL_EXISTS_MESSAGE)

    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        role=role,
        brand_id=brand_id,
        approval_status="Approved" if brand_id is not None else None,
        is_email_verified=is_email_verified,
    )
    db.session.add(user)
    db.session.commit()
    return user
