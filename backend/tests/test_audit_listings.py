"""
Ledger and activity listing tests.

Verifies:
- Filters parse from query args and reject malformed values
- Date bounds are whole days, both inclusive
- Pagination totals agree with the filtered rows
"""

from datetime import date, datetime
from decimal import Decimal

import pytest
from werkzeug.datastructures import MultiDict

from stockmaster.extensions import db
from stockmaster.models import InventoryTransaction
from stockmaster.services import audit_service
from stockmaster.services.filters import MAX_LIMIT, ActivityFilter, TransactionFilter
from stockmaster.validation import ValidationError


def _tx(product, user, tx_type, created_at):
    db.session.add(InventoryTransaction(
        product_id=product.id,
        user_id=user.id,
        type=tx_type,
        quantity=Decimal(1),
        previous_stock=Decimal(0),
        new_stock=Decimal(1),
        created_at=created_at,
    ))
    db.session.commit()


class TestTransactionFilterParsing:
    def test_defaults(self):
        flt = TransactionFilter.from_args(MultiDict())
        assert flt == TransactionFilter()
        assert flt.criteria() == []
        assert flt.offset == 0

    def test_parses_all_fields(self):
        flt = TransactionFilter.from_args(MultiDict({
            "type": "out",
            "user_id": "3",
            "product_id": "7",
            "start_date": "2026-01-01",
            "end_date": "2026-01-31",
            "page": "2",
            "limit": "25",
        }))
        assert flt.type == "OUT"
        assert (flt.user_id, flt.product_id) == (3, 7)
        assert (flt.start_date, flt.end_date) == (date(2026, 1, 1), date(2026, 1, 31))
        assert flt.offset == 25
        assert len(flt.criteria()) == 5

    def test_limit_is_clamped(self):
        assert TransactionFilter.from_args(MultiDict({"limit": "100000"})).limit == MAX_LIMIT
        assert TransactionFilter.from_args(MultiDict({"limit": "0"})).limit == 1

    @pytest.mark.parametrize("args", [
        {"type": "SOLD"},
        {"user_id": "abc"},
        {"start_date": "yesterday"},
        {"start_date": "2026-02-01", "end_date": "2026-01-01"},
    ])
    def test_rejects_malformed(self, args):
        with pytest.raises(ValidationError):
            TransactionFilter.from_args(MultiDict(args))

    def test_activity_filter(self):
        flt = ActivityFilter.from_args(MultiDict({"type": "STOCK_ADJUSTED", "limit": "5"}))
        assert flt.type == "STOCK_ADJUSTED"
        assert flt.limit == 5
        assert len(flt.criteria()) == 1


class TestListInventoryTransactions:
    def test_date_range_is_inclusive(self, user, product):
        _tx(product, user, "IN", datetime(2026, 1, 1, 0, 0, 1))
        _tx(product, user, "IN", datetime(2026, 1, 15, 12, 0))
        _tx(product, user, "IN", datetime(2026, 1, 31, 23, 59))
        _tx(product, user, "IN", datetime(2026, 2, 1, 0, 1))

        result = audit_service.list_inventory_transactions(
            TransactionFilter(start_date=date(2026, 1, 1), end_date=date(2026, 1, 31))
        )
        assert result["pagination"]["total"] == 3
        assert len(result["transactions"]) == 3

    def test_pagination(self, user, product):
        for day in range(1, 6):
            _tx(product, user, "IN", datetime(2026, 3, day, 9, 0))

        result = audit_service.list_inventory_transactions(TransactionFilter(page=2, limit=2))
        assert result["pagination"] == {"page": 2, "limit": 2, "total": 5, "totalPages": 3}
        assert [t["created_at"] for t in result["transactions"]] == [
            "2026-03-03T09:00:00Z",
            "2026-03-02T09:00:00Z",
        ]

    def test_route_filters_by_type_and_user(self, client, headers, user, other_user, product):
        _tx(product, user, "IN", datetime(2026, 3, 1, 9, 0))
        _tx(product, user, "OUT", datetime(2026, 3, 2, 9, 0))
        _tx(product, other_user, "OUT", datetime(2026, 3, 3, 9, 0))

        resp = client.get(f"/api/inventory-transactions?type=OUT&user_id={user.id}", headers=headers)
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["pagination"]["total"] == 1
        assert data["transactions"][0]["type"] == "OUT"
        assert data["transactions"][0]["user_name"] == "Test Owner"

    def test_route_rejects_bad_filter(self, client, headers):
        resp = client.get("/api/inventory-transactions?type=SOLD", headers=headers)
        assert resp.status_code == 400


class TestActivityLogs:
    def test_route_filters_by_type(self, client, headers, product):
        client.post(f"/api/products/{product.id}/adjust-stock", json={"type": "IN", "quantity": 2}, headers=headers)

        rows = client.get("/api/activity-logs?type=STOCK_ADJUSTED", headers=headers).get_json()
        assert len(rows) == 1
        assert rows[0]["product_name"] == "Bolt"
        assert rows[0]["metadata"]["quantity"] == 2

        everything = client.get("/api/activity-logs", headers=headers).get_json()
        assert {r["type"] for r in everything} == {"USER_REGISTERED", "STOCK_ADJUSTED"}

    def test_records_client_ip(self, client, headers, product):
        client.post(f"/api/products/{product.id}/adjust-stock", json={"type": "IN", "quantity": 2}, headers=headers)
        rows = client.get("/api/activity-logs?type=STOCK_ADJUSTED", headers=headers).get_json()
        assert rows[0]["ip_address"] == "127.0.0.1"
