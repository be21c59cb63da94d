"""
Pytest fixtures for the sales summary backend tests.

Provides test database setup, permission sets, user/account factories,
and authenticated test client helpers.
"""

from datetime import date
from decimal import Decimal

import pytest
from salesdesk import create_app
from salesdesk.extensions import db
from salesdesk.models import Account, SalesTransaction
from salesdesk.services import auth_service, permission_service
from salesdesk.validation import coerce_amount_cents


TEST_PASSWORD = "Password123!"


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SALES_TRANSACTION_BATCH_LIMIT': 200,
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
def setup_permissions(db_session):
    """Install grants and default permission sets."""
    permission_service.initialize_grants()
    permission_service.install_default_permission_sets()
    db_session.commit()


@pytest.fixture(scope='function')
def make_user(db_session, setup_permissions):
    """Factory: create a user, optionally with a manager and permission sets."""
    def _make_user(username, *, name=None, manager=None, sets=(), is_active=True):
        user = auth_service.create_user(
            username=username,
            email=f"{username}@example.com",
            password=TEST_PASSWORD,
            name=name or username.title(),
            manager_id=manager.id if manager else None,
            bcrypt_rounds=4,
        )
        for set_name in sets:
            permission_service.assign_permission_set(user.id, set_name)
        if not is_active:
            user.is_active = False
            db_session.commit()
        return user

    return _make_user


@pytest.fixture(scope='function')
def manager(make_user):
    """Sales manager; has no manager of their own."""
    return make_user("manager", name="Morgan Manager", sets=["sales_summary_access"])


@pytest.fixture(scope='function')
def rep_a(make_user, manager):
    """Sales rep A with a manager."""
    return make_user("rep_a", name="Alex Rep", manager=manager, sets=["sales_summary_access"])


@pytest.fixture(scope='function')
def rep_b(make_user, manager):
    """Sales rep B with a manager."""
    return make_user("rep_b", name="Blake Rep", manager=manager, sets=["sales_summary_access"])


@pytest.fixture(scope='function')
def sales_admin(make_user):
    """Holder of the bypass grant; deliberately has no manager."""
    return make_user("sales_admin", name="Sam Admin", sets=["sales_admin"])


@pytest.fixture(scope='function')
def make_account(db_session):
    """Factory: create an account owned by a user."""
    def _make_account(owner, name="Account"):
        account = Account(name=name, owner_id=owner.id)
        db_session.add(account)
        db_session.commit()
        return account

    return _make_account


@pytest.fixture(scope='function')
def add_sale(db_session):
    """Factory: insert a sales transaction directly (bypasses the guard)."""
    def _add_sale(account, sale_date: date, amount):
        sale = SalesTransaction(
            account_id=account.id,
            sale_date=sale_date,
            amount_cents=coerce_amount_cents(Decimal(str(amount))),
        )
        db_session.add(sale)
        db_session.commit()
        return sale

    return _add_sale


def get_auth_token(client, username: str, password: str = TEST_PASSWORD) -> str:
    """Helper to get auth token for a user."""
    response = client.post('/api/auth/login', json={
        'username': username,
        'password': password
    })
    if response.status_code == 200:
        return response.json.get('token')
    return None


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}
