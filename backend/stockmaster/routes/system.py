# backend/stockmaster/routes/system.py
"""
System health endpoint and the public profile picture files.

The health check never raises; a broken database shows up as
"disconnected" in the body of a 200 response.
"""

import time

from flask import Blueprint, current_app, send_from_directory
from sqlalchemy import inspect, text

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    """
    Check database connectivity and that the audit tables exist.

    Returns dict with status, latency and table presence.
    """
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        tables = set(inspect(db.engine).get_table_names())
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "connected",
            "latency_ms": round(elapsed_ms, 2),
            "activity_logs_table": "activity_logs" in tables,
            "inventory_transactions_table": "inventory_transactions" in tables,
        }
    except Exception:
        db.session.rollback()
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "disconnected",
            "latency_ms": round(elapsed_ms, 2),
            "activity_logs_table": False,
            "inventory_transactions_table": False,
        }


@system_bp.get("/api/health")
def health():
    """Always 200 while the process is up; the body carries the database status."""
    database = check_database_health()

    response = {
        "message": "Server is running",
        "database": database["status"],
        "latency_ms": database["latency_ms"],
        "activity_logs_table": database["activity_logs_table"],
        "inventory_transactions_table": database["inventory_transactions_table"],
        "timestamp": to_utc_z(utcnow()),
    }
    return response, 200


@system_bp.get("/uploads/<path:filename>")
def uploaded_file(filename):
    return send_from_directory(current_app.config["UPLOAD_FOLDER"], filename)
