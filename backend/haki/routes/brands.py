# Overview: Flask API routes for brand operations; parses input and returns JSON responses.

"""
Brand routes

- List all / create / delete: Admin only
- Read: Admin, owner or approved staff of the brand
- Update / background image: Admin or anyone holding MANAGE_BRAND (owner)
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_roles
from ..permissions import ADMIN, ALL_ROLES
from ..services import brand_service
from ..services.brand_access_service import (
    BrandAccessError,
    accessible_brands,
    brand_permissions,
    get_brand,
    require_brand_permission,
)
from ..responses import DOMAIN_ERRORS, error_response, internal_error


brands_bp = Blueprint("brands", __name__, url_prefix="/api/brand")


@brands_bp.get("")
@require_auth
@require_roles(ADMIN)
def list_brands_route():
    return jsonify({"brands": [brand.to_dict() for brand in brand_service.list_brands()]}), 200


@brands_bp.get("/mine")
@require_auth
@require_roles(*ALL_ROLES)
def my_brands_route():
    """Brands the caller can see: owned brands plus the brand they staff."""
    brands = accessible_brands(g.current_user, "VIEW_PRODUCTS")
    return jsonify({
        "brands": [
            {**brand.to_dict(), "permissions": sorted(brand_permissions(g.current_user, brand))}
            for brand in brands
        ]
    }), 200


@brands_bp.get("/<int:brand_id>")
@require_auth
@require_roles(*ALL_ROLES)
def get_brand_route(brand_id: int):
    try:
        brand = get_brand(brand_id)
        if not brand_permissions(g.current_user, brand):
            raise BrandAccessError()
        return jsonify({"brand": brand.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)


@brands_bp.post("")
@require_auth
@require_roles(ADMIN)
def create_brand_route():
    data = request.get_json(silent=True) or {}
    try:
        brand = brand_service.create_brand(data)
        current_app.logger.info("Brand %s created for owner %s", brand.id, brand.owner_id)
        return jsonify({"brand": brand.to_dict()}), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create brand")
        return internal_error()


@brands_bp.put("/<int:brand_id>")
@require_auth
@require_roles(*ALL_ROLES)
def update_brand_route(brand_id: int):
    data = request.get_json(silent=True) or {}
    try:
        require_brand_permission(g.current_user, brand_id, "MANAGE_BRAND")
        brand = brand_service.update_brand(brand_id, data, g.current_user)
        return jsonify({"brand": brand.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update brand %s", brand_id)
        return internal_error()


@brands_bp.post("/<int:brand_id>/background")
@require_auth
@require_roles(*ALL_ROLES)
def upload_background_route(brand_id: int):
    try:
        require_brand_permission(g.current_user, brand_id, "MANAGE_BRAND")
        brand = brand_service.set_background_image(brand_id, request.files.get("file"))
        return jsonify({"brand": brand.to_dict(), "url": brand.background_image_url}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to upload background for brand %s", brand_id)
        return internal_error()


@brands_bp.delete("/<int:brand_id>")
@require_auth
@require_roles(ADMIN)
def delete_brand_route(brand_id: int):
    try:
        brand_service.delete_brand(brand_id)
        current_app.logger.info("Brand %s deleted by admin %s", brand_id, g.current_user.id)
        return jsonify({"message": "Xóa thương hiệu thành công."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete brand %s", brand_id)
        return internal_error()
