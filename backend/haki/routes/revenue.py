# Overview: Flask API routes for revenue and profit reports.

from flask import Blueprint, request, jsonify, current_app, g

from ..decorators import require_auth, require_roles
from ..permissions import ADMIN, ALL_ROLES
from ..services import revenue_service
from ..services.brand_access_service import require_brand_permission
from ..responses import DOMAIN_ERRORS, error_response, internal_error


revenue_bp = Blueprint("revenue", __name__, url_prefix="/api/revenue")

REVENUE_ERROR_MESSAGE = "Lỗi khi tính doanh thu và lợi nhuận. Vui lòng thử lại sau."


@revenue_bp.get("/brand/<int:brand_id>")
@require_auth
@require_roles(*ALL_ROLES)
def brand_revenue_route(brand_id: int):
    """
    Revenue and profit over paid orders.

    Query params:
    - start_date / end_date: ISO-8601 (optional); end_date covers its whole day
    """
    try:
        brand = require_brand_permission(g.current_user, brand_id, "VIEW_REVENUE")
        report = revenue_service.brand_revenue(
            brand,
            request.args.get("start_date"),
            request.args.get("end_date"),
        )
        return jsonify(report), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to compute revenue for brand %s", brand_id)
        return internal_error(REVENUE_ERROR_MESSAGE)


@revenue_bp.get("/summary")
@require_auth
@require_roles(ADMIN)
def revenue_summary_route():
    try:
        report = revenue_service.revenue_summary(
            request.args.get("start_date"),
            request.args.get("end_date"),
        )
        return jsonify(report), 200
    except DOMAIN_ERRORS as e:
        return error_response(e)
    except Exception:
        current_app.logger.exception("Failed to compute revenue summary")
        return internal_error(REVENUE_ERROR_MESSAGE)
