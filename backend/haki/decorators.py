# Overview: Request authentication and role decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .extensions import db
from .models import User, Customer
from .services import token_service
from .services.token_service import InvalidTokenError


def _is_user() -> bool:
    return getattr(g, "current_user", None) is not None


def _is_customer() -> bool:
    return getattr(g, "current_customer", None) is not None


def require_auth(f):
    """
    Require a valid bearer token and load the caller.

    Sets the following Flask g attributes:
    - g.token_claims: decoded TokenClaims
    - g.current_user: the back-office User (user tokens only, else None)
    - g.current_customer: the Customer (customer tokens only, else None)

    Returns 401 if the header is missing, the token is invalid/expired, or the
    account no longer exists.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        auth_header = request.headers.get("Authorization")

        if not auth_header or not auth_header.startswith("Bearer "):
            return jsonify({"message": "Yêu cầu đăng nhập."}), 401

        token = auth_header.split(" ", 1)[1].strip()

        try:
            claims = token_service.decode_token(token)
        except InvalidTokenError:
            return jsonify({"message": "Token không hợp lệ hoặc đã hết hạn."}), 401

        g.token_claims = claims
        g.current_user = None
        g.current_customer = None

        if claims.kind == token_service.KIND_USER:
            g.current_user = db.session.get(User, claims.subject_id)
            if g.current_user is None:
                return jsonify({"message": "Token không hợp lệ hoặc đã hết hạn."}), 401
        else:
            g.current_customer = db.session.get(Customer, claims.subject_id)
            if g.current_customer is None:
                return jsonify({"message": "Token không hợp lệ hoặc đã hết hạn."}), 401

        return f(*args, **kwargs)

    return decorated_function


def require_roles(*roles: str):
    """
    Require a back-office user whose role is one of `roles`.

    Must be stacked under @require_auth. Customers get 403.
    Roles are read from the database, not the token, so demotions apply
    immediately.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_user() and not _is_customer():
                return jsonify({"message": "Yêu cầu đăng nhập."}), 401

            if not _is_user() or g.current_user.role not in roles:
                return jsonify({
                    "message": "Bạn không có quyền thực hiện thao tác này.",
                    "required_roles": list(roles),
                }), 403

            return f(*args, **kwargs)

        return decorated_function

    return decorator


def require_customer(f):
    """Require a customer token. Must be stacked under @require_auth."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_user() and not _is_customer():
            return jsonify({"message": "Yêu cầu đăng nhập."}), 401
        if not _is_customer():
            return jsonify({"message": "Chỉ khách hàng mới có thể thực hiện thao tác này."}), 403
        return f(*args, **kwargs)

    return decorated_function
