# Overview: Flask API routes for saved customer addresses.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_customer
from ..services import address_service
from ..responses import DOMAIN_ERRORS, error_response, internal_error


addresses_bp = Blueprint("addresses", __name__, url_prefix="/api/customeraddress")


@addresses_bp.get("")
@require_auth
@require_customer
def list_addresses_route():
    addresses = address_service.list_addresses(g.current_customer)
    return jsonify({"addresses": [address.to_dict() for address in addresses]}), 200


@addresses_bp.get("/<int:address_id>")
@require_auth
@require_customer
def get_address_route(address_id: int):
    try:
        address = address_service.get_address(g.current_customer, address_id)
        return jsonify({"address": address.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)


@addresses_bp.post("")
@require_auth
@require_customer
def create_address_route():
    data = request.get_json(silent=True) or {}
    try:
        address = address_service.create_address(g.current_customer, data)
        return jsonify({"address": address.to_dict()}), 201
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to create address")
        return internal_error()


@addresses_bp.put("/<int:address_id>")
@require_auth
@require_customer
def update_address_route(address_id: int):
    data = request.get_json(silent=True) or {}
    try:
        address = address_service.update_address(g.current_customer, address_id, data)
        return jsonify({"address": address.to_dict()}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to update address %s", address_id)
        return internal_error()


@addresses_bp.delete("/<int:address_id>")
@require_auth
@require_customer
def delete_address_route(address_id: int):
    try:
        address_service.delete_address(g.current_customer, address_id)
        return jsonify({"message": "Xóa địa chỉ thành công."}), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to delete address %s", address_id)
        return internal_error()
