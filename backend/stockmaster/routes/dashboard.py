# backend/stockmaster/routes/dashboard.py
"""Dashboard aggregates and low-stock alerts. Read-only; recomputed per request."""
from flask import Blueprint, jsonify, request

from ..services import dashboard_service
from ..decorators import require_auth

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api")


@dashboard_bp.get("/dashboard/stats")
@require_auth
def dashboard_stats():
    return dashboard_service.get_stats(), 200


@dashboard_bp.get("/dashboard/recent-activities")
@require_auth
def recent_activities():
    limit = max(1, min(request.args.get("limit", default=10, type=int), 100))
    return jsonify(dashboard_service.recent_activities(limit=limit))


@dashboard_bp.get("/dashboard/recent-transactions")
@require_auth
def recent_transactions():
    limit = max(1, min(request.args.get("limit", default=10, type=int), 100))
    return jsonify(dashboard_service.recent_transactions(limit=limit))


@dashboard_bp.get("/dashboard/transaction-summary")
@require_auth
def transaction_summary():
    """Per-type totals over the trailing window (days, default 30)."""
    days = max(1, min(request.args.get("days", default=30, type=int), 365))
    return jsonify(dashboard_service.transaction_summary(days=days))


@dashboard_bp.get("/alerts/low-stock")
@require_auth
def low_stock_alerts():
    return jsonify(dashboard_service.low_stock_products(limit=10))
