# backend/stockmaster/routes/inventory.py
"""
Audit trail read routes: the inventory transaction ledger and the activity log.

Filters come from the query string and are parsed into typed filter objects
(services/filters.py) before they reach the store.
"""
from flask import Blueprint, jsonify, request

from ..services import audit_service
from ..services.filters import ActivityFilter, TransactionFilter
from ..validation import ValidationError
from ..decorators import require_auth

inventory_bp = Blueprint("inventory", __name__, url_prefix="/api")


@inventory_bp.get("/inventory-transactions")
@require_auth
def inventory_transactions_route():
    """
    Paginated ledger listing.

    Query params: type, user_id, product_id, start_date, end_date
    (YYYY-MM-DD, inclusive), page (default 1), limit (default 50, max 200).
    """
    try:
        flt = TransactionFilter.from_args(request.args)
    except ValidationError as e:
        return {"message": str(e)}, 400
    return audit_service.list_inventory_transactions(flt), 200


@inventory_bp.get("/activity-logs")
@require_auth
def activity_logs_route():
    """Activity log, newest first. Query params: limit, type, user_id, product_id."""
    try:
        flt = ActivityFilter.from_args(request.args)
    except ValidationError as e:
        return {"message": str(e)}, 400
    return jsonify(audit_service.list_activity_logs(flt))
