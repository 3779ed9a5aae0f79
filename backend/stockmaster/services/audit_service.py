# Overview: Service-layer operations for the audit trail (activity log + stock ledger).

"""
StockMaster audit trail invariants (authoritative)

- ActivityLog and InventoryTransaction rows are append-only; nothing here
  updates or deletes them.
- Writers are best-effort side channels: record_* never raises. A failed write
  is rolled back, logged through current_app.logger, and dropped (no retry).
- Callers invoke the writers only after the primary mutation has committed, so
  an audit failure can never undo a stock change.
- Within one mutation the InventoryTransaction is written before the
  ActivityLog. Readers must treat both as eventually consistent with
  Product.stock.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from flask import current_app, has_request_context, request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import ActivityLog, InventoryTransaction
from .filters import ActivityFilter, TransactionFilter


def _client_ip() -> str | None:
    if has_request_context():
        return request.remote_addr
    return None


def _append(row, label: str):
    try:
        db.session.add(row)
        db.session.commit()
        return row
    except Exception:
        current_app.logger.exception("Failed to record %s", label)
        try:
            db.session.rollback()
        except SQLAlchemyError:
            current_app.logger.exception("Rollback after failed %s write also failed", label)
        return None


def record_inventory_transaction(
    *,
    product_id: int,
    user_id: int,
    type: str,
    quantity: Decimal,
    previous_stock: Decimal,
    new_stock: Decimal,
    reference: str | None = None,
    notes: str | None = None,
) -> InventoryTransaction | None:
    """Append one stock ledger row. Returns None if the write was dropped."""
    tx = InventoryTransaction(
        product_id=product_id,
        user_id=user_id,
        type=str(getattr(type, "value", type)),
        quantity=quantity,
        previous_stock=previous_stock,
        new_stock=new_stock,
        reference=reference,
        notes=notes,
    )
    return _append(tx, "inventory transaction")


def record_activity(
    type: str,
    description: str,
    *,
    user_id: int | None = None,
    product_id: int | None = None,
    category_id: int | None = None,
    metadata: dict[str, Any] | None = None,
    ip_address: str | None = None,
) -> ActivityLog | None:
    """Append one activity row. Returns None if the write was dropped."""
    entry = ActivityLog(
        type=type,
        description=description,
        user_id=user_id,
        product_id=product_id,
        category_id=category_id,
        details=metadata,
        ip_address=ip_address or _client_ip(),
    )
    return _append(entry, f"activity {type}")


# ---------------------------------------------------------------------------
# Read side
# ---------------------------------------------------------------------------

def _transaction_query():
    return db.session.query(InventoryTransaction).options(
        joinedload(InventoryTransaction.user),
        joinedload(InventoryTransaction.product),
    )


def list_inventory_transactions(flt: TransactionFilter) -> dict:
    """Paginated, newest-first ledger listing."""
    total = flt.apply(db.session.query(InventoryTransaction)).count()
    rows = (
        flt.apply(_transaction_query())
        .order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
        .offset(flt.offset)
        .limit(flt.limit)
        .all()
    )
    total_pages = (total + flt.limit - 1) // flt.limit
    return {
        "transactions": [tx.to_dict() for tx in rows],
        "pagination": {
            "page": flt.page,
            "limit": flt.limit,
            "total": total,
            "totalPages": total_pages,
        },
    }


def list_product_transactions(product_id: int, limit: int = 20) -> list[dict]:
    rows = (
        _transaction_query()
        .filter(InventoryTransaction.product_id == product_id)
        .order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
        .limit(limit)
        .all()
    )
    return [tx.to_dict() for tx in rows]


def list_recent_transactions(limit: int = 10) -> list[dict]:
    rows = (
        _transaction_query()
        .order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
        .limit(limit)
        .all()
    )
    return [tx.to_dict() for tx in rows]


def list_activity_logs(flt: ActivityFilter) -> list[dict]:
    rows = (
        flt.apply(
            db.session.query(ActivityLog).options(
                joinedload(ActivityLog.user),
                joinedload(ActivityLog.product),
            )
        )
        .order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())
        .limit(flt.limit)
        .all()
    )
    return [entry.to_dict() for entry in rows]
