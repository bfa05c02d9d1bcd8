# Overview: Flask API routes for the customer's own profile and password reset.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_customer
from ..services import account_service, auth_service
from ..services.auth_service import CUSTOMER_ACCOUNTS
from ..responses import DOMAIN_ERRORS, error_response, internal_error


profile_bp = Blueprint("profile", __name__, url_prefix="/api/profile")


@profile_bp.get("/info")
@require_auth
@require_customer
def profile_info_route():
    return jsonify({"profile": account_service.profile(g.current_customer)}), 200


@profile_bp.put("/update")
@require_auth
@require_customer
def update_profile_route():
    data = request.get_json(silent=True) or {}
    try:
        customer = account_service.update_profile(g.current_customer, data)
        return jsonify({"profile": account_service.profile(customer), "message": "Cập nhật thông tin thành công."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update profile")
        return internal_error()


@profile_bp.post("/request-reset-password")
@require_auth
@require_customer
def request_reset_password_route():
    try:
        auth_service.request_password_reset(CUSTOMER_ACCOUNTS, g.current_customer.email)
        return jsonify({"message": "Mã OTP đã được gửi đến email của bạn."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to send profile password reset code")
        return internal_error()


@profile_bp.post("/reset-password")
@require_auth
@require_customer
def reset_password_route():
    data = request.get_json(silent=True) or {}
    try:
        auth_service.reset_password(
            CUSTOMER_ACCOUNTS,
            g.current_customer.email,
            data.get("otp"),
            data.get("new_password"),
            data.get("confirm_password"),
        )
        return jsonify({"message": "Đặt lại mật khẩu thành công."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to reset profile password")
        return internal_error()
