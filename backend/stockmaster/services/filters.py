# Overview: Typed filter objects for ledger and activity listings.

"""
Filters translate optional query-string fields into SQLAlchemy criteria.

Each set field contributes exactly one bound-parameter criterion; unset fields
contribute nothing. The same filter feeds both the page query and the count
query, so totals always agree with the rows returned.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Mapping

from ..models import ActivityLog, InventoryTransaction, TransactionType
from ..time_utils import parse_iso_date
from ..validation import ValidationError

MAX_LIMIT = 200


def _int_arg(args: Mapping, name: str, default: int | None = None) -> int | None:
    raw = args.get(name)
    if raw is None or str(raw).strip() == "":
        return default
    try:
        return int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def _date_arg(args: Mapping, name: str) -> date | None:
    try:
        return parse_iso_date(args.get(name))
    except ValueError:
        raise ValidationError(f"{name} must be a date (YYYY-MM-DD)")


def _clamp_limit(limit: int) -> int:
    return max(1, min(limit, MAX_LIMIT))


@dataclass(frozen=True)
class TransactionFilter:
    type: str | None = None
    user_id: int | None = None
    product_id: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    page: int = 1
    limit: int = 50

    @classmethod
    def from_args(cls, args: Mapping) -> "TransactionFilter":
        tx_type = (args.get("type") or "").strip().upper() or None
        if tx_type is not None and tx_type not in TransactionType.values():
            raise ValidationError(
                f"type must be one of {', '.join(TransactionType.values())}"
            )

        start_date = _date_arg(args, "start_date")
        end_date = _date_arg(args, "end_date")
        if start_date and end_date and start_date > end_date:
            raise ValidationError("start_date must be on or before end_date")

        return cls(
            type=tx_type,
            user_id=_int_arg(args, "user_id"),
            product_id=_int_arg(args, "product_id"),
            start_date=start_date,
            end_date=end_date,
            page=max(_int_arg(args, "page", 1), 1),
            limit=_clamp_limit(_int_arg(args, "limit", 50)),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def criteria(self) -> list:
        clauses = []
        if self.type is not None:
            clauses.append(InventoryTransaction.type == self.type)
        if self.user_id is not None:
            clauses.append(InventoryTransaction.user_id == self.user_id)
        if self.product_id is not None:
            clauses.append(InventoryTransaction.product_id == self.product_id)
        # Whole-day bounds, both inclusive
        if self.start_date is not None:
            clauses.append(InventoryTransaction.created_at >= datetime.combine(self.start_date, time.min))
        if self.end_date is not None:
            next_day = datetime.combine(self.end_date + timedelta(days=1), time.min)
            clauses.append(InventoryTransaction.created_at < next_day)
        return clauses

    def apply(self, query):
        criteria = self.criteria()
        return query.filter(*criteria) if criteria else query


@dataclass(frozen=True)
class ActivityFilter:
    type: str | None = None
    user_id: int | None = None
    product_id: int | None = None
    limit: int = 50

    @classmethod
    def from_args(cls, args: Mapping) -> "ActivityFilter":
        return cls(
            type=(args.get("type") or "").strip() or None,
            user_id=_int_arg(args, "user_id"),
            product_id=_int_arg(args, "product_id"),
            limit=_clamp_limit(_int_arg(args, "limit", 50)),
        )

    def criteria(self) -> list:
        clauses = []
        if self.type is not None:
            clauses.append(ActivityLog.type == self.type)
        if self.user_id is not None:
            clauses.append(ActivityLog.user_id == self.user_id)
        if self.product_id is not None:
            clauses.append(ActivityLog.product_id == self.product_id)
        return clauses

    def apply(self, query):
        criteria = self.criteria()
        return query.filter(*criteria) if criteria else query
