# Overview: Flask API routes for inventory operations; stock reads and manual stock updates.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_roles
from ..permissions import ALL_ROLES
from ..services import inventory_service, product_service
from ..services.brand_access_service import require_brand_permission
from ..validation import ValidationError, parse_int
from ..responses import DOMAIN_ERRORS, error_response, internal_error


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("/<int:product_id>")
@require_auth
@require_roles(*ALL_ROLES)
def get_inventory_route(product_id: int):
    try:
        product = product_service.get_product(product_id)
        require_brand_permission(g.current_user, product.brand_id, "VIEW_INVENTORY")
        return jsonify({"inventory": inventory_service.get_inventory(product_id).to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)


@inventory_bp.put("/<int:product_id>")
@require_auth
@require_roles(*ALL_ROLES)
def update_inventory_route(product_id: int):
    """
    Set absolute stock for a product.

    Body: {"stock_quantity": int, "product_id": int (optional, must match path)}
    """
    data = request.get_json(silent=True) or {}
    try:
        if data.get("product_id") is not None and parse_int(data["product_id"], "product_id") != product_id:
            raise ValidationError("ProductId không khớp.")
        if data.get("stock_quantity") is None:
            raise ValidationError("Vui lòng nhập số lượng tồn kho.")
        stock_quantity = parse_int(data["stock_quantity"], "stock_quantity")

        product = product_service.get_product(product_id)
        require_brand_permission(g.current_user, product.brand_id, "UPDATE_INVENTORY")
        inventory = inventory_service.set_stock(product_id, stock_quantity)
        current_app.logger.info(
            "Stock for product %s set to %s by user %s", product_id, stock_quantity, g.current_user.id
        )
        return jsonify({"inventory": inventory.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update inventory for product %s", product_id)
        return internal_error()
