# Overview: Flask API routes for the customer cart.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_customer
from ..services import cart_service
from ..responses import DOMAIN_ERRORS, error_response, internal_error


cart_bp = Blueprint("cart", __name__, url_prefix="/api/cart")


@cart_bp.get("")
@require_auth
@require_customer
def get_cart_route():
    """Current cart; an empty one is created on first access."""
    try:
        cart = cart_service.get_or_create_cart(g.current_customer)
        return jsonify({"cart": cart.to_dict()}), 200
    except Exception:
        current_app.logger.exception("Failed to load cart")
        return internal_error()


@cart_bp.post("/add")
@require_auth
@require_customer
def add_to_cart_route():
    data = request.get_json(silent=True) or {}
    try:
        cart = cart_service.add_item(g.current_customer, data.get("product_id"), data.get("quantity"))
        return jsonify({"cart": cart.to_dict(), "message": "Đã thêm sản phẩm vào giỏ hàng."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to add item to cart")
        return internal_error()


@cart_bp.put("/update/<int:cart_item_id>")
@require_auth
@require_customer
def update_cart_item_route(cart_item_id: int):
    data = request.get_json(silent=True) or {}
    try:
        cart = cart_service.update_item(g.current_customer, cart_item_id, data.get("quantity"))
        return jsonify({"cart": cart.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update cart item %s", cart_item_id)
        return internal_error()


@cart_bp.delete("/remove/<int:cart_item_id>")
@require_auth
@require_customer
def remove_cart_item_route(cart_item_id: int):
    try:
        cart = cart_service.remove_item(g.current_customer, cart_item_id)
        return jsonify({"cart": cart.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to remove cart item %s", cart_item_id)
        return internal_error()


@cart_bp.delete("/clear")
@require_auth
@require_customer
def clear_cart_route():
    try:
        cart_service.clear_cart(g.current_customer)
        return jsonify({"message": "Đã xóa giỏ hàng."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to clear cart")
        return internal_error()
