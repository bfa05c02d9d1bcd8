# Overview: Maps service exceptions to JSON error responses shared by all blueprints.

from flask import jsonify

from .validation import ValidationError, NotFoundError, ConflictError
from .services.auth_service import AuthenticationError
from .services.brand_access_service import BrandAccessError
from .services.mail_service import MailDeliveryError


INTERNAL_ERROR_MESSAGE = "Đã xảy ra lỗi. Vui lòng thử lại sau."

# Exceptions whose message is safe to show to the client
DOMAIN_ERRORS = (
    ValidationError,
    NotFoundError,
    ConflictError,
    AuthenticationError,
    BrandAccessError,
    MailDeliveryError,
)


def error_response(exc: Exception):
    """Status code per exception type; the body always carries `message`."""
    if isinstance(exc, BrandAccessError):
        body = {"message": str(exc)}
        if exc.required_permission:
            body["required_permission"] = exc.required_permission
        return jsonify(body), 403
    if isinstance(exc, AuthenticationError):
        return jsonify({"message": str(exc)}), 401
    if isinstance(exc, NotFoundError):
        return jsonify({"message": str(exc)}), 404
    if isinstance(exc, MailDeliveryError):
        return jsonify({"message": "Không thể gửi email. Vui lòng thử lại sau."}), 502
    if isinstance(exc, ConflictError):
        return jsonify({"message": str(exc)}), 409
    return jsonify({"message": str(exc)}), 400


def internal_error(message: str = INTERNAL_ERROR_MESSAGE):
    return jsonify({"message": message}), 500
