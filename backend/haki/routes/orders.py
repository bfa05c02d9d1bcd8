# Overview: Flask API routes for customer orders; checkout, history and cancellation.

# backend/haki/routes/orders.py
"""
Customer order routes

POST /api/order/create converts the cart lines of one brand into an order.
Body:
- brand_id: int (required)
- payment_method: "BankCard" | "COD" | "BankTransfer"
- address_id: int (optional) - saved address to ship to
- full_name / phone / address: inline shipping (used when address_id is absent)
With no shipping info the default saved address is used.
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_customer
from ..services import order_service
from ..responses import DOMAIN_ERRORS, error_response, internal_error


orders_bp = Blueprint("orders", __name__, url_prefix="/api/order")


@orders_bp.post("/create")
@require_auth
@require_customer
def create_order_route():
    data = request.get_json(silent=True) or {}
    try:
        order = order_service.checkout(g.current_customer, data)
        current_app.logger.info(
            "Order %s created for customer %s (brand %s, %s, payment %s)",
            order.id, g.current_customer.id, order.brand_id,
            order.payment.payment_method, order.payment_status,
        )
        return jsonify({"order": order.to_dict(), "message": "Tạo đơn hàng thành công."}), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create order")
        return internal_error()


@orders_bp.get("")
@require_auth
@require_customer
def list_my_orders_route():
    orders = order_service.list_customer_orders(g.current_customer)
    return jsonify({"orders": [order.to_dict() for order in orders]}), 200


@orders_bp.get("/<int:order_id>")
@require_auth
@require_customer
def get_my_order_route(order_id: int):
    try:
        order = order_service.get_customer_order(g.current_customer, order_id)
        return jsonify({"order": order.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)


@orders_bp.post("/<int:order_id>/cancel")
@require_auth
@require_customer
def cancel_my_order_route(order_id: int):
    try:
        order = order_service.cancel_by_customer(g.current_customer, order_id)
        current_app.logger.info("Order %s cancelled by customer %s", order_id, g.current_customer.id)
        return jsonify({"order": order.to_dict(), "message": "Hủy đơn hàng thành công."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to cancel order %s", order_id)
        return internal_error()
