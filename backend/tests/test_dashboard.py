"""
Dashboard aggregate tests.

Verifies:
- An empty store yields zeros, never nulls
- Low stock is 0 < stock <= min_stock; out of stock is stock == 0
- Time windows count only rows inside them
"""

from datetime import timedelta
from decimal import Decimal

from stockmaster.extensions import db
from stockmaster.models import InventoryTransaction
from stockmaster.services import dashboard_service
from stockmaster.time_utils import utcnow


def _tx(product, user, tx_type, quantity, created_at):
    row = InventoryTransaction(
        product_id=product.id,
        user_id=user.id,
        type=tx_type,
        quantity=Decimal(quantity),
        previous_stock=Decimal(0),
        new_stock=Decimal(quantity),
        created_at=created_at,
    )
    db.session.add(row)
    db.session.commit()
    return row


class TestStats:
    def test_empty_store(self, db_session):
        stats = dashboard_service.get_stats()
        assert stats == {
            "totalProducts": 0,
            "totalCategories": 0,
            "lowStock": 0,
            "outOfStock": 0,
            "totalValue": 0.0,
            "recentActivity": 0,
            "todayTransactions": 0,
            "weeklyTransactions": 0,
            "monthlyTransactions": 0,
        }

    def test_low_and_out_of_stock_counts(self, db_session, category, make_product):
        make_product("A", 0, min_stock=5)       # out of stock
        make_product("B", 5, min_stock=5)       # low (boundary)
        make_product("C", 1, min_stock=5)       # low
        make_product("D", 6, min_stock=5)       # fine
        make_product("E", 0, min_stock=0)       # out of stock, not low

        stats = dashboard_service.get_stats()
        assert stats["totalProducts"] == 5
        assert stats["totalCategories"] == 1
        assert stats["lowStock"] == 2
        assert stats["outOfStock"] == 2

    def test_total_value(self, db_session, make_product):
        make_product("A", 4, price="2.50")
        make_product("B", 3, price="10")
        assert dashboard_service.get_stats()["totalValue"] == 40.0

    def test_transaction_windows(self, user, product):
        now = utcnow()
        _tx(product, user, "IN", 1, now)
        _tx(product, user, "IN", 2, now - timedelta(days=3))
        _tx(product, user, "OUT", 1, now - timedelta(days=20))
        _tx(product, user, "OUT", 1, now - timedelta(days=45))

        stats = dashboard_service.get_stats(now=now + timedelta(seconds=1))
        assert stats["weeklyTransactions"] == 2
        assert stats["monthlyTransactions"] == 3
        assert stats["todayTransactions"] >= 1


class TestSummaries:
    def test_transaction_summary_groups_by_type(self, user, product):
        now = utcnow()
        _tx(product, user, "IN", 5, now)
        _tx(product, user, "IN", 3, now)
        _tx(product, user, "OUT", 2, now)
        _tx(product, user, "OUT", 9, now - timedelta(days=60))

        summary = dashboard_service.transaction_summary(days=30, now=now + timedelta(seconds=1))
        assert summary == [
            {"type": "IN", "count": 2, "total_quantity": 8},
            {"type": "OUT", "count": 1, "total_quantity": 2},
        ]

    def test_low_stock_alerts_lowest_first(self, db_session, make_product):
        make_product("A", 4)
        make_product("B", 1)
        make_product("C", 0)
        make_product("D", 50)

        assert [p["sku"] for p in dashboard_service.low_stock_products()] == ["B", "A"]


class TestDashboardRoutes:
    def test_stats_requires_auth(self, client, db_session):
        assert client.get("/api/dashboard/stats").status_code == 401

    def test_routes(self, client, headers, product):
        client.post(f"/api/products/{product.id}/adjust-stock", json={"type": "OUT", "quantity": 6}, headers=headers)

        stats = client.get("/api/dashboard/stats", headers=headers).get_json()
        assert stats["lowStock"] == 1
        assert stats["todayTransactions"] == 1

        activities = client.get("/api/dashboard/recent-activities?limit=5", headers=headers).get_json()
        assert activities[0]["type"] == "STOCK_ADJUSTED"

        recent = client.get("/api/dashboard/recent-transactions", headers=headers).get_json()
        assert recent[0]["new_stock"] == 4

        summary = client.get("/api/dashboard/transaction-summary?days=7", headers=headers).get_json()
        assert summary == [{"type": "OUT", "count": 1, "total_quantity": 6}]

        alerts = client.get("/api/alerts/low-stock", headers=headers).get_json()
        assert [p["sku"] for p in alerts] == ["BLT-001"]
