# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/haki/routes/products.py
"""
Product routes

Public catalog reads need no token. Writes require MANAGE_PRODUCTS on the
product's brand (owner, Admin, BrandManager, InventoryManager).
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_roles
from ..permissions import ALL_ROLES
from ..services import product_service
from ..services.brand_access_service import require_brand_permission
from ..validation import ValidationError, parse_int
from ..responses import DOMAIN_ERRORS, error_response, internal_error


products_bp = Blueprint("products", __name__, url_prefix="/api/product")


@products_bp.get("")
def list_products_route():
    """
    Public product list.

    Query params:
    - brand_id: int (optional) - only this brand's products
    """
    brand_id = request.args.get("brand_id", type=int)
    products = product_service.list_products(brand_id)
    return jsonify({"products": [product.to_dict() for product in products]}), 200


@products_bp.get("/staff")
@require_auth
@require_roles(*ALL_ROLES)
def list_staff_products_route():
    """Products of every brand the caller may view, with cost prices."""
    products = product_service.list_products_for_staff(g.current_user)
    return jsonify({"products": [product.to_dict(include_cost=True) for product in products]}), 200


@products_bp.get("/brand/<int:brand_id>")
def list_brand_products_route(brand_id: int):
    products = product_service.list_products(brand_id)
    return jsonify({"products": [product.to_dict() for product in products]}), 200


@products_bp.get("/<int:product_id>")
def get_product_route(product_id: int):
    try:
        return jsonify({"product": product_service.get_product(product_id).to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)


@products_bp.post("")
@require_auth
@require_roles(*ALL_ROLES)
def create_product_route():
    data = request.get_json(silent=True) or {}
    try:
        if data.get("brand_id") in (None, ""):
            raise ValidationError("Vui lòng chọn thương hiệu.")
        brand_id = parse_int(data.get("brand_id"), "brand_id")
        require_brand_permission(g.current_user, brand_id, "MANAGE_PRODUCTS")
        product = product_service.create_product(brand_id, data)
        current_app.logger.info("Product %s created in brand %s", product.id, brand_id)
        return jsonify({"product": product.to_dict(include_cost=True)}), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create product")
        return internal_error()


@products_bp.put("/<int:product_id>")
@require_auth
@require_roles(*ALL_ROLES)
def update_product_route(product_id: int):
    data = request.get_json(silent=True) or {}
    try:
        product = product_service.get_product(product_id)
        require_brand_permission(g.current_user, product.brand_id, "MANAGE_PRODUCTS")
        product = product_service.update_product(product, data)
        return jsonify({"product": product.to_dict(include_cost=True)}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update product %s", product_id)
        return internal_error()


@products_bp.delete("/<int:product_id>")
@require_auth
@require_roles(*ALL_ROLES)
def delete_product_route(product_id: int):
    try:
        product = product_service.get_product(product_id)
        require_brand_permission(g.current_user, product.brand_id, "MANAGE_PRODUCTS")
        product_service.delete_product(product)
        current_app.logger.info("Product %s deleted by user %s", product_id, g.current_user.id)
        return jsonify({"message": "Xóa sản phẩm thành công."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete product %s", product_id)
        return internal_error()


@products_bp.post("/<int:product_id>/image")
@require_auth
@require_roles(*ALL_ROLES)
def upload_product_image_route(product_id: int):
    try:
        product = product_service.get_product(product_id)
        require_brand_permission(g.current_user, product.brand_id, "MANAGE_PRODUCTS")
        product = product_service.set_product_image(product, request.files.get("file"))
        return jsonify({"product": product.to_dict(include_cost=True), "url": product.image_url}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to upload image for product %s", product_id)
        return internal_error()
