# Overview: Flask API routes for admin operations; user and customer account management.

"""
Admin routes

SECURITY: Every route requires an Admin bearer token.
- Admin accounts cannot be deleted
- Deleting a user removes the brands they own (refused while those brands have orders)
- Deleting a customer keeps their orders with the customer link cleared
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_roles
from ..permissions import ADMIN
from ..services import account_service, auth_service
from ..responses import DOMAIN_ERRORS, error_response, internal_error


admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")


@admin_bp.get("/users")
@require_auth
@require_roles(ADMIN)
def list_users_route():
    users = account_service.list_users()
    return jsonify({"users": [user.to_dict() for user in users]}), 200


@admin_bp.post("/users")
@require_auth
@require_roles(ADMIN)
def create_user_route():
    data = request.get_json(silent=True) or {}
    try:
        user = auth_service.create_user(
            name=data.get("name"),
            email=data.get("email"),
            password=data.get("password"),
            role=data.get("role"),
        )
        current_app.logger.info("Admin %s created user id=%s", g.current_user.id, user.id)
        return jsonify({"user": user.to_dict()}), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create user")
        return internal_error()


@admin_bp.get("/users/<int:user_id>")
@require_auth
@require_roles(ADMIN)
def get_user_route(user_id: int):
    try:
        return jsonify({"user": account_service.get_user(user_id).to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)


@admin_bp.put("/users/<int:user_id>")
@require_auth
@require_roles(ADMIN)
def update_user_route(user_id: int):
    data = request.get_json(silent=True) or {}
    try:
        user = account_service.update_user(user_id, data)
        return jsonify({"user": user.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update user %s", user_id)
        return internal_error()


@admin_bp.delete("/users/<int:user_id>")
@require_auth
@require_roles(ADMIN)
def delete_user_route(user_id: int):
    try:
        account_service.delete_user(user_id)
        current_app.logger.info("Admin %s deleted user id=%s", g.current_user.id, user_id)
        return jsonify({"message": "Xóa người dùng thành công."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete user %s", user_id)
        return internal_error()


@admin_bp.get("/customers")
@require_auth
@require_roles(ADMIN)
def list_customers_route():
    customers = account_service.list_customers()
    return jsonify({"customers": [customer.to_dict() for customer in customers]}), 200


@admin_bp.get("/customers/<int:customer_id>")
@require_auth
@require_roles(ADMIN)
def get_customer_route(customer_id: int):
    try:
        return jsonify({"customer": account_service.get_customer(customer_id).to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)


@admin_bp.put("/customers/<int:customer_id>")
@require_auth
@require_roles(ADMIN)
def update_customer_route(customer_id: int):
    data = request.get_json(silent=True) or {}
    try:
        customer = account_service.update_customer(customer_id, data)
        return jsonify({"customer": customer.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update customer %s", customer_id)
        return internal_error()


@admin_bp.delete("/customers/<int:customer_id>")
@require_auth
@require_roles(ADMIN)
def delete_customer_route(customer_id: int):
    try:
        account_service.delete_customer(customer_id)
        current_app.logger.info("Admin %s deleted customer id=%s", g.current_user.id, customer_id)
        return jsonify({"message": "Xóa khách hàng thành công."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete customer %s", customer_id)
        return internal_error()
