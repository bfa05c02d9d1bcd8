# Overview: Flask API routes for brand-side order management; listing, payment confirmation, status edits.

"""
Order management routes

SECURITY: Back-office users only.
- Reads require VIEW_ORDERS on the order's brand
- Pay / update / delete require MANAGE_ORDERS on the order's brand
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_roles
from ..permissions import ALL_ROLES
from ..services import order_service
from ..services.brand_access_service import require_brand_permission
from ..responses import DOMAIN_ERRORS, error_response, internal_error


order_management_bp = Blueprint("order_management", __name__, url_prefix="/api/ordermanagement")


@order_management_bp.get("/brand/<int:brand_id>")
@require_auth
@require_roles(*ALL_ROLES)
def list_brand_orders_route(brand_id: int):
    """
    Orders of one brand, newest first.

    Query params (all optional):
    - payment_status: Pending | Completed | Cancelled
    - delivery_status: Pending | Processing | Shipped | Delivered | Cancelled
    - start_date / end_date: ISO-8601; end_date covers its whole day
    """
    try:
        require_brand_permission(g.current_user, brand_id, "VIEW_ORDERS")
        orders = order_service.list_brand_orders(
            brand_id,
            payment_status=request.args.get("payment_status"),
            delivery_status=request.args.get("delivery_status"),
            start_date=request.args.get("start_date"),
            end_date=request.args.get("end_date"),
        )
        return jsonify({"orders": [order.to_dict() for order in orders]}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to list orders for brand %s", brand_id)
        return internal_error()


@order_management_bp.get("/<int:order_id>")
@require_auth
@require_roles(*ALL_ROLES)
def get_order_route(order_id: int):
    try:
        order = order_service.get_order(order_id)
        require_brand_permission(g.current_user, order.brand_id, "VIEW_ORDERS")
        return jsonify({"order": order.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)


@order_management_bp.post("/<int:order_id>/pay")
@require_auth
@require_roles(*ALL_ROLES)
def pay_order_route(order_id: int):
    """
    Confirm payment.

    Body (optional): {"payment_method": "BankCard" | "COD" | "BankTransfer"}
    """
    data = request.get_json(silent=True) or {}
    try:
        order = order_service.get_order(order_id)
        require_brand_permission(g.current_user, order.brand_id, "MANAGE_ORDERS")
        order = order_service.pay_order(order_id, data.get("payment_method"))
        current_app.logger.info(
            "Order %s pay by user %s: payment=%s", order_id, g.current_user.id, order.payment_status
        )
        if order.payment_status != order_service.COMPLETED:
            return jsonify({"order": order.to_dict(), "message": "Đã cập nhật phương thức thanh toán."}), 200
        return jsonify({"order": order.to_dict(), "message": "Thanh toán đơn hàng thành công."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to pay order %s", order_id)
        return internal_error()


@order_management_bp.put("/<int:order_id>")
@require_auth
@require_roles(*ALL_ROLES)
def update_order_route(order_id: int):
    data = request.get_json(silent=True) or {}
    try:
        order = order_service.get_order(order_id)
        require_brand_permission(g.current_user, order.brand_id, "MANAGE_ORDERS")
        order = order_service.update_order(order_id, data)
        current_app.logger.info(
            "Order %s updated by user %s: payment=%s delivery=%s",
            order_id, g.current_user.id, order.payment_status, order.delivery_status,
        )
        return jsonify({"order": order.to_dict(), "message": "Cập nhật đơn hàng thành công."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update order %s", order_id)
        return internal_error()


@order_management_bp.delete("/<int:order_id>")
@require_auth
@require_roles(*ALL_ROLES)
def delete_order_route(order_id: int):
    try:
        order = order_service.get_order(order_id)
        require_brand_permission(g.current_user, order.brand_id, "MANAGE_ORDERS")
        order_service.delete_order(order_id)
        current_app.logger.info("Order %s deleted by user %s", order_id, g.current_user.id)
        return jsonify({"message": "Xóa đơn hàng thành công."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete order %s", order_id)
        return internal_error()
