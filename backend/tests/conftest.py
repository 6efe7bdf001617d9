"""
Pytest fixtures for stock control backend tests.

Provides the app on in-memory SQLite, per-test table cleanup, seeded demo
users, auth headers per role, and an event recorder.
"""

import pytest

from stock_control import create_app
from stock_control.extensions import db, get_event_bus, get_store, get_transfer_service
from stock_control.services import user_service
from stock_control.services.events import TransferReceived
from stock_control.store import build_memory_store


TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'STORE_BACKEND': 'sql',
        'NOTIFICATIONS_ASYNC': False,
        'BCRYPT_ROUNDS': 4,
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
def sql_store(app, db_session):
    return get_store()


@pytest.fixture(scope='function', params=['memory', 'sql'])
def store(request, app):
    """Every entity store backend, empty."""
    if request.param == 'memory':
        yield build_memory_store()
    else:
        yield request.getfixturevalue('sql_store')


@pytest.fixture(scope='function')
def seed(app, db_session):
    """Demo users, keyed by role."""
    store = get_store()
    user_service.ensure_demo_users(store, TEST_PASSWORD)
    return {user["role"]: user for user in user_service.list_users(store)}


@pytest.fixture(scope='function')
def transfers(app, db_session):
    """The app's lifecycle engine (sql store, sync event bus)."""
    return get_transfer_service()


@pytest.fixture(scope='function')
def received_events(app):
    """Collects TransferReceived events published during the test."""
    events = []
    bus = get_event_bus()
    bus.subscribe(TransferReceived, events.append)
    yield events
    bus.unsubscribe(TransferReceived, events.append)


def get_auth_token(client, email: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'email': email,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def admin_headers(client, seed):
    return auth_headers(get_auth_token(client, seed["admin"]["email"]))


@pytest.fixture
def dispatch_headers(client, seed):
    return auth_headers(get_auth_token(client, seed["dispatch"]["email"]))


@pytest.fixture
def receiver_headers(client, seed):
    return auth_headers(get_auth_token(client, seed["receiver"]["email"]))


@pytest.fixture
def viewer_headers(client, seed):
    return auth_headers(get_auth_token(client, seed["view_only"]["email"]))


@pytest.fixture
def dashboard_only_headers(client, seed):
    """A view_only user narrowed to the dashboard tag."""
    user_service.create_user(get_store(), {
        "email": "wallboard@fairfield.com",
        "name": "Wallboard",
        "role": "view_only",
        "permissions": ["dashboard"],
        "password": TEST_PASSWORD,
    })
    return auth_headers(get_auth_token(client, "wallboard@fairfield.com"))
