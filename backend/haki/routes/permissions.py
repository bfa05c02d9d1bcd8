# Overview: Flask API routes for capability definitions and staff role assignment.

"""
Permission routes

Brand capabilities come from the staff member's role (see permissions/roles.py).
Owners and Admin manage staff roles through MANAGE_STAFF.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_roles
from ..permissions import ALL_ROLES, DEFAULT_ROLE_PERMISSIONS, list_permission_definitions
from ..services import staff_service
from ..responses import DOMAIN_ERRORS, error_response, internal_error


permissions_bp = Blueprint("permissions", __name__, url_prefix="/api/permission")


@permissions_bp.get("")
@require_auth
@require_roles(*ALL_ROLES)
def list_permissions_route():
    return jsonify({"permissions": list_permission_definitions()}), 200


@permissions_bp.get("/roles")
@require_auth
@require_roles(*ALL_ROLES)
def list_role_permissions_route():
    return jsonify({"roles": {role: list(codes) for role, codes in DEFAULT_ROLE_PERMISSIONS.items()}}), 200


@permissions_bp.get("/brand/<int:brand_id>/staff")
@require_auth
@require_roles(*ALL_ROLES)
def list_staff_permissions_route(brand_id: int):
    try:
        staff = staff_service.brand_staff_permissions(g.current_user, brand_id)
        return jsonify({"brand_id": brand_id, "staff": staff}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)


@permissions_bp.put("/brand/<int:brand_id>/staff/<int:user_id>")
@require_auth
@require_roles(*ALL_ROLES)
def set_staff_role_route(brand_id: int, user_id: int):
    data = request.get_json(silent=True) or {}
    try:
        member = staff_service.set_member_role(g.current_user, brand_id, user_id, data.get("role"))
        current_app.logger.info(
            "User %s set role %s for staff %s in brand %s",
            g.current_user.id, member.role, user_id, brand_id,
        )
        return jsonify({"user": member.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to set role for staff %s", user_id)
        return internal_error()
