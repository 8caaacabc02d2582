"""
Pytest fixtures for the sweet shop back office tests.

Provides an in-memory database, a test client, a logged-in staff user and
small factories for inventory items, orders and vendors.
"""

import pytest

from sweetshop import create_app
from sweetshop.extensions import db
from sweetshop.models import InventoryItem, Vendor


TEST_PASSWORD = "laddoo-secret"


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SIDE_EFFECTS_MODE': 'inline',
        'SIDE_EFFECTS_BACKOFF_BASE': 0,
        'BCRYPT_ROUNDS': 4,
        'DOCUMENTS_DIR': str(tmp_path_factory.mktemp("documents")),
        'PUBLIC_BASE_URL': 'http://shop.test',
        'WHATSAPP_API_TOKEN': None,
        'WHATSAPP_PHONE_NUMBER_ID': None,
    })

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
def auth_headers(client, db_session):
    """Sign up a staff user and return Authorization headers for it."""
    resp = client.post('/api/auth/signup', json={
        'username': 'counter',
        'email': 'counter@sweetshop.test',
        'password': TEST_PASSWORD,
    })
    assert resp.status_code == 201, resp.get_json()
    token = get_auth_token(client, 'counter', TEST_PASSWORD)
    assert token
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def make_item(db_session):
    """Factory for inventory items; status is derived on flush."""
    def _make(name="Kaju Katli", category="sweets", quantity=10.0, min_stock=5.0, unit="kg", cost=40000):
        item = InventoryItem(
            name=name,
            category=category,
            quantity=quantity,
            min_stock=min_stock,
            unit=unit,
            cost_per_unit_cents=cost,
        )
        db_session.add(item)
        db_session.commit()
        return item
    return _make


@pytest.fixture(scope='function')
def make_vendor(db_session):
    def _make(name="Gopal Dairy", vendor_type="milk", due=100000):
        vendor = Vendor(
            name=name,
            type=vendor_type,
            contact="9876543210",
            address="12 Market Road",
            supplied_items=["milk"],
            daily_supply=40,
            monthly_supply=1200,
            rate_cents=6000,
            payment_due_cents=due,
        )
        db_session.add(vendor)
        db_session.commit()
        return vendor
    return _make


def get_auth_token(client, username: str, password: str) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.get_json().get('token')
    return None


def event_order_payload(item_id: int, **overrides) -> dict:
    payload = {
        "customer_name": "Meera Iyer",
        "phone": "9876501234",
        "purpose": "Wedding",
        "address": "4 Temple Street",
        "delivery_date": "2026-11-14",
        "delivery_time": "AM",
        "items": [{"item_id": item_id, "quantity": 2, "price_cents": 500}],
    }
    payload.update(overrides)
    return payload
