"""
Pytest fixtures for ShopLedger backend tests.

Provides test database setup, two-tenant fixtures, and test client.
"""

import pytest

from shopledger import create_app
from shopledger.config import TestConfig
from shopledger.extensions import db
from shopledger.services import (
    business_service,
    customer_service,
    inventory_service,
    staff_service,
    store_service,
)


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
def business_a(db_session):
    """Business A (first tenant)."""
    return business_service.create_business({"name": "Ada Retail", "email": "OPS@ada.ng"})


@pytest.fixture(scope='function')
def business_b(db_session):
    """Business B (second tenant)."""
    return business_service.create_business({"name": "Bola Stores"})


@pytest.fixture(scope='function')
def store_a(db_session, business_a):
    """Store NYC in Business A, with its customer counter."""
    return store_service.create_store(business_a.id, {"name": "New York", "code": "nyc"})


@pytest.fixture(scope='function')
def store_a2(db_session, business_a):
    """Second store in Business A."""
    return store_service.create_store(business_a.id, {"name": "Lagos", "code": "LAG"})


@pytest.fixture(scope='function')
def store_b(db_session, business_b):
    """Store in Business B."""
    return store_service.create_store(business_b.id, {"name": "Abuja", "code": "ABJ"})


@pytest.fixture(scope='function')
def staff_a(db_session, store_a):
    return staff_service.create_staff(store_a.id, {
        "name": "Chidi Okafor",
        "staff_number": "S-001",
        "mobile_number": "8030000001",
        "role": "manager",
        "pay_per_month_cents": 15000000,
    })


@pytest.fixture(scope='function')
def customer_a(db_session, store_a):
    return customer_service.create_customer(store_a.id, {
        "name": "Amaka Eze",
        "mobile_number": "8030000002",
    })


@pytest.fixture(scope='function')
def widget(db_session, store_a):
    """Product: cost 10.00, price 25.00, 100 on hand."""
    return inventory_service.create_item(store_a.id, {
        "name": "Widget",
        "type": "product",
        "cost_price_cents": 1000,
        "selling_price_cents": 2500,
        "quantity": 100,
    })


@pytest.fixture(scope='function')
def repair(db_session, store_a):
    """Service: cost 20.00, price 50.00."""
    return inventory_service.create_item(store_a.id, {
        "name": "Repair",
        "type": "service",
        "cost_price_cents": 2000,
        "selling_price_cents": 5000,
    })


@pytest.fixture(scope='function')
def headers_a(business_a):
    return {"X-Business-Id": str(business_a.id)}


@pytest.fixture(scope='function')
def headers_b(business_b):
    return {"X-Business-Id": str(business_b.id)}
