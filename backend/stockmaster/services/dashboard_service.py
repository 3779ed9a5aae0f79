# Overview: Read-only dashboard aggregates over products, categories and the audit trail.

"""
Every call recomputes from the store; nothing is cached. All aggregates
coalesce to 0 so an empty database yields zeros, never nulls.

Definitions:
- low stock:    0 < stock <= min_stock
- out of stock: stock == 0
- total value:  SUM(price * stock)
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import joinedload

from ..extensions import db
from ..models import ActivityLog, Category, InventoryTransaction, Product
from ..models._serialize import number_out
from ..time_utils import days_ago, start_of_day, utcnow
from . import audit_service
from .filters import ActivityFilter


def _count(query) -> int:
    return int(query.scalar() or 0)


def _transactions_since(since: datetime) -> int:
    return _count(
        db.session.query(func.count(InventoryTransaction.id)).filter(
            InventoryTransaction.created_at >= since
        )
    )


def low_stock_criteria():
    return (Product.stock > 0, Product.stock <= Product.min_stock)


def get_stats(now: datetime | None = None) -> dict:
    now = now or utcnow()

    total_products = _count(db.session.query(func.count(Product.id)))
    total_categories = _count(db.session.query(func.count(Category.id)))
    low_stock = _count(db.session.query(func.count(Product.id)).filter(*low_stock_criteria()))
    out_of_stock = _count(db.session.query(func.count(Product.id)).filter(Product.stock == 0))

    total_value = (
        db.session.query(func.coalesce(func.sum(Product.price * Product.stock), 0)).scalar()
        or 0
    )

    recent_activity = _count(
        db.session.query(func.count(ActivityLog.id)).filter(
            ActivityLog.created_at >= days_ago(7, now)
        )
    )

    return {
        "totalProducts": total_products,
        "totalCategories": total_categories,
        "lowStock": low_stock,
        "outOfStock": out_of_stock,
        "totalValue": float(total_value),
        "recentActivity": recent_activity,
        "todayTransactions": _transactions_since(start_of_day(now)),
        "weeklyTransactions": _transactions_since(days_ago(7, now)),
        "monthlyTransactions": _transactions_since(days_ago(30, now)),
    }


def recent_activities(limit: int = 10) -> list[dict]:
    return audit_service.list_activity_logs(ActivityFilter(limit=limit))


def recent_transactions(limit: int = 10) -> list[dict]:
    return audit_service.list_recent_transactions(limit=limit)


def transaction_summary(days: int = 30, now: datetime | None = None) -> list[dict]:
    """Per-type count and total quantity over the trailing window, busiest type first."""
    count_col = func.count(InventoryTransaction.id).label("count")
    rows = (
        db.session.query(
            InventoryTransaction.type,
            count_col,
            func.coalesce(func.sum(InventoryTransaction.quantity), 0).label("total_quantity"),
        )
        .filter(InventoryTransaction.created_at >= days_ago(days, now))
        .group_by(InventoryTransaction.type)
        .order_by(count_col.desc(), InventoryTransaction.type.asc())
        .all()
    )
    return [
        {
            "type": row.type,
            "count": int(row.count),
            "total_quantity": number_out(row.total_quantity),
        }
        for row in rows
    ]


def low_stock_products(limit: int = 10) -> list[dict]:
    products = (
        db.session.query(Product)
        .options(joinedload(Product.category))
        .filter(*low_stock_criteria())
        .order_by(Product.stock.asc(), Product.id.asc())
        .limit(limit)
        .all()
    )
    return [p.to_dict() for p in products]
