"""
Pytest fixtures for StockMaster backend tests.

Provides test database setup, an authenticated user, and the test client.
"""

from decimal import Decimal

import pytest

from stockmaster import create_app
from stockmaster.config import TestConfig
from stockmaster.extensions import db
from stockmaster.models import Category, Product
from stockmaster.services import auth_service


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TestConfig)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def user(db_session):
    """Registered user with default settings."""
    return auth_service.register_user(
        name="Test Owner",
        email="owner@shop.test",
        password="secret123",
        company_name="Test Shop",
    )


@pytest.fixture(scope='function')
def other_user(db_session):
    return auth_service.register_user(
        name="Second Clerk",
        email="clerk@shop.test",
        password="secret123",
    )


@pytest.fixture(scope='function')
def token(user):
    return auth_service.create_access_token(user)


@pytest.fixture(scope='function')
def headers(token):
    return auth_headers(token)


@pytest.fixture(scope='function')
def category(db_session):
    category = Category(name="Widgets", description="Small parts")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def product(db_session, category):
    """Product with 10 on hand and a minimum of 5 (no ledger rows)."""
    product = Product(
        name="Bolt",
        sku="BLT-001",
        price=Decimal("1.50"),
        stock=Decimal(10),
        min_stock=Decimal(5),
        category_id=category.id,
    )
    db_session.add(product)
    db_session.commit()
    return product


@pytest.fixture(scope='function')
def make_product(db_session):
    """Factory that inserts a product directly (no audit rows)."""
    def _make(sku: str, stock, min_stock=5, price="1.00", category_id=None) -> Product:
        product = Product(
            name=f"Product {sku}",
            sku=sku,
            price=Decimal(str(price)),
            stock=Decimal(str(stock)),
            min_stock=Decimal(str(min_stock)),
            category_id=category_id,
        )
        db_session.add(product)
        db_session.commit()
        return product

    return _make


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
