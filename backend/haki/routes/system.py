# backend/haki/routes/system.py
"""
System health endpoint and static serving for uploaded images.
"""

import time
from flask import Blueprint, current_app, jsonify, send_from_directory
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..services.upload_service import upload_folder


system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """Round-trip a trivial query and report latency."""
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "response_time_ms": round(elapsed_ms, 2)}
    except SQLAlchemyError as e:
        current_app.logger.error("Database health check failed: %s", e)
        return {"status": "unhealthy", "error": "database unreachable"}


@system_bp.get("/health")
def health():
    database = check_database_health()
    status_code = 200 if database["status"] == "healthy" else 503
    return jsonify({"status": database["status"], "database": database}), status_code


@system_bp.get("/Images/<path:filename>")
def uploaded_image(filename: str):
    return send_from_directory(upload_folder(), filename)
