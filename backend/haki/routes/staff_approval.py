# Overview: Flask API routes for staff applications and brand membership.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_roles
from ..permissions import ALL_ROLES, STAFF
from ..services import staff_service
from ..responses import DOMAIN_ERRORS, error_response, internal_error


staff_approval_bp = Blueprint("staff_approval", __name__, url_prefix="/api/staff-approval")


@staff_approval_bp.post("/apply/<int:brand_id>")
@require_auth
@require_roles(STAFF)
def apply_route(brand_id: int):
    try:
        user = staff_service.apply_to_brand(g.current_user, brand_id)
        current_app.logger.info("User %s applied to brand %s", user.id, brand_id)
        return jsonify({"user": user.to_dict(), "message": "Đã gửi đơn ứng tuyển."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to apply to brand %s", brand_id)
        return internal_error()


@staff_approval_bp.get("/pending-applications")
@require_auth
@require_roles(*ALL_ROLES)
def pending_applications_route():
    users = staff_service.pending_applications(g.current_user)
    return jsonify({"applications": [user.to_dict() for user in users]}), 200


@staff_approval_bp.get("/approved-staff")
@require_auth
@require_roles(*ALL_ROLES)
def approved_staff_route():
    users = staff_service.approved_staff(g.current_user)
    return jsonify({"staff": [user.to_dict() for user in users]}), 200


def _act(action, user_id: int, message: str, *args):
    try:
        user = action(g.current_user, user_id, *args)
        current_app.logger.info("User %s: %s staff %s", g.current_user.id, action.__name__, user_id)
        return jsonify({"user": user.to_dict(), "message": message}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to %s staff %s", action.__name__, user_id)
        return internal_error()


@staff_approval_bp.post("/approve/<int:user_id>")
@require_auth
@require_roles(*ALL_ROLES)
def approve_route(user_id: int):
    return _act(staff_service.approve, user_id, "Đã duyệt nhân viên.")


@staff_approval_bp.post("/reject/<int:user_id>")
@require_auth
@require_roles(*ALL_ROLES)
def reject_route(user_id: int):
    return _act(staff_service.reject, user_id, "Đã từ chối đơn ứng tuyển.")


@staff_approval_bp.put("/update/<int:user_id>")
@require_auth
@require_roles(*ALL_ROLES)
def update_route(user_id: int):
    data = request.get_json(silent=True) or {}
    return _act(staff_service.update_member, user_id, "Cập nhật nhân viên thành công.", data)


@staff_approval_bp.delete("/delete/<int:user_id>")
@require_auth
@require_roles(*ALL_ROLES)
def delete_route(user_id: int):
    return _act(staff_service.remove_member, user_id, "Đã xóa nhân viên khỏi thương hiệu.")
