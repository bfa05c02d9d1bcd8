# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/haki/routes/auth.py
"""
Authentication API routes

Back-office users and storefront customers follow the same steps:
register -> verify-email -> login (password) -> verify-2fa (OTP) -> token.

SECURITY FEATURES:
- Passwords hashed with bcrypt
- Every login requires an emailed one-time code
- OTP failures return one generic message
- Customer register/login are reCAPTCHA-protected when a secret is configured
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..services import auth_service, captcha_service
from ..services.auth_service import USER_ACCOUNTS, CUSTOMER_ACCOUNTS
from ..decorators import require_auth
from ..responses import DOMAIN_ERRORS, error_response, internal_error


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

REGISTERED_MESSAGE = "Đăng ký thành công. Vui lòng kiểm tra email để nhận mã OTP xác thực."
VERIFIED_MESSAGE = "Xác thực email thành công. Bạn có thể đăng nhập."
LOGIN_OTP_SENT_MESSAGE = "Mã OTP đã được gửi đến email của bạn."
RESET_OTP_SENT_MESSAGE = "Nếu email tồn tại, mã OTP đặt lại mật khẩu đã được gửi."
PASSWORD_RESET_MESSAGE = "Đặt lại mật khẩu thành công."


def _payload() -> dict:
    return request.get_json(silent=True) or {}


def _register(kind, data: dict):
    if kind is CUSTOMER_ACCOUNTS:
        captcha_service.verify(data.get("recaptcha_token"), request.remote_addr)
        account = auth_service.register_customer(
            data.get("name"), data.get("email"), data.get("password"), data.get("confirm_password")
        )
    else:
        account = auth_service.register_user(
            data.get("name"), data.get("email"), data.get("password"), data.get("confirm_password"),
            role=data.get("role"),
        )
    current_app.logger.info("Registered %s account id=%s", kind.name, account.id)
    return jsonify({"message": REGISTERED_MESSAGE, "email": account.email}), 201


def _verify_email(kind, data: dict):
    auth_service.verify_email(kind, data.get("email"), data.get("otp"))
    return jsonify({"message": VERIFIED_MESSAGE}), 200


def _login(kind, data: dict):
    if kind is CUSTOMER_ACCOUNTS:
        captcha_service.verify(data.get("recaptcha_token"), request.remote_addr)
    auth_service.begin_login(kind, data.get("email"), data.get("password"))
    return jsonify({"message": LOGIN_OTP_SENT_MESSAGE}), 200


def _verify_2fa(kind, data: dict):
    account, token = auth_service.complete_login(kind, data.get("email"), data.get("otp"))
    current_app.logger.info("%s id=%s logged in", kind.name, account.id)
    body = {"token": token, "message": "Đăng nhập thành công."}
    if kind is USER_ACCOUNTS:
        body.update({
            "user_id": account.id,
            "role": account.role,
            "brand_id": account.brand_id,
            "user": account.to_dict(),
        })
    else:
        body.update({"customer_id": account.id, "customer": account.to_dict()})
    return jsonify(body), 200


def _forgot_password(kind, data: dict):
    auth_service.request_password_reset(kind, data.get("email"))
    return jsonify({"message": RESET_OTP_SENT_MESSAGE}), 200


def _reset_password(kind, data: dict):
    auth_service.reset_password(
        kind,
        data.get("email"),
        data.get("otp"),
        data.get("new_password"),
        data.get("confirm_password"),
    )
    return jsonify({"message": PASSWORD_RESET_MESSAGE}), 200


def _run(handler, kind, action: str):
    try:
        return handler(kind, _payload())
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to %s (%s)", action, kind.name)
        return internal_error()


# -- Back-office users --

@auth_bp.post("/register")
def register_route():
    return _run(_register, USER_ACCOUNTS, "register")


@auth_bp.post("/verify-email")
def verify_email_route():
    return _run(_verify_email, USER_ACCOUNTS, "verify email")


@auth_bp.post("/login")
def login_route():
    """Check password and email a 2FA code. Token comes from /verify-2fa."""
    return _run(_login, USER_ACCOUNTS, "login")


@auth_bp.post("/verify-2fa")
def verify_2fa_route():
    return _run(_verify_2fa, USER_ACCOUNTS, "verify 2fa")


@auth_bp.post("/forgot-password")
def forgot_password_route():
    return _run(_forgot_password, USER_ACCOUNTS, "request password reset")


@auth_bp.post("/reset-password")
def reset_password_route():
    return _run(_reset_password, USER_ACCOUNTS, "reset password")


# -- Storefront customers --

@auth_bp.post("/registerCustomer")
def register_customer_route():
    return _run(_register, CUSTOMER_ACCOUNTS, "register")


@auth_bp.post("/verify-email-customer")
def verify_email_customer_route():
    return _run(_verify_email, CUSTOMER_ACCOUNTS, "verify email")


@auth_bp.post("/loginCustomer")
def login_customer_route():
    return _run(_login, CUSTOMER_ACCOUNTS, "login")


@auth_bp.post("/verify-2fa-customer")
def verify_2fa_customer_route():
    return _run(_verify_2fa, CUSTOMER_ACCOUNTS, "verify 2fa")


@auth_bp.post("/forgot-password-customer")
def forgot_password_customer_route():
    return _run(_forgot_password, CUSTOMER_ACCOUNTS, "request password reset")


@auth_bp.post("/reset-password-customer")
def reset_password_customer_route():
    return _run(_reset_password, CUSTOMER_ACCOUNTS, "reset password")


@auth_bp.get("/me")
@require_auth
def me_route():
    """Current account behind the bearer token."""
    if g.current_user is not None:
        return jsonify({"kind": "user", "user": g.current_user.to_dict()}), 200
    return jsonify({"kind": "customer", "customer": g.current_customer.to_dict()}), 200
