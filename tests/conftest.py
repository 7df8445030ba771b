"""Pytest fixtures: SQLite file database per test, seeded users/sets/listings, API client."""
import os

# konfiguracja musi byc ustawiona przed importem pakietu
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["APP_ENV"] = "test"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["CELERY_BROKER_URL"] = "memory://"
os.environ["CELERY_RESULT_BACKEND"] = "cache+memory://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from marketplace.data.database import get_db, init_db, make_engine, make_session_factory
from marketplace.data.models import (
    CatalogSetModel,
    OrderItemModel,
    OrderModel,
    ProviderSetModel,
    UserModel,
)
from marketplace.domain.policy import Identity, Role
from marketplace.main import create_app
from marketplace.services.identity_service import IdentityResolver

ADMIN_ID = 1
PROVIDER_ID = 2
OTHER_PROVIDER_ID = 3
CUSTOMER_ID = 10
OTHER_CUSTOMER_ID = 11
PRODUCTION_ID = 20

# oferty
APPROVED = 100          # provider 2, 12.50, stan 10
APPROVED_CHEAP = 101    # provider 2, 3.99, stan 5
SCARCE = 102            # provider 2, 7.00, stan 3
OTHER_PROVIDERS = 200   # provider 3, 20.00, stan 10
PENDING = 300           # provider 2, niezatwierdzona
INACTIVE = 301          # provider 3, nieaktywna

ADDRESS = {
    "recipient_name": "Jane Doe",
    "street": "1 Maker Street",
    "city": "Springfield",
    "postal_code": "12345",
    "country": "US",
}


class RecordingNotifications:
    """Zamiast Celery, zapamietuje wyslane powiadomienia."""

    def __init__(self):
        self.sent = []

    def send_order_placed(self, provider_id, order_id, order_number):
        self.sent.append((provider_id, order_id, order_number))


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'marketplace.db'}")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def seed(session_factory):
    session = session_factory()
    try:
        session.add_all([
            UserModel(id=ADMIN_ID, username="admin", role="admin"),
            UserModel(id=PROVIDER_ID, username="provider", role="provider", company_name="Maker Supplies"),
            UserModel(id=OTHER_PROVIDER_ID, username="other-provider", role="provider"),
            UserModel(id=CUSTOMER_ID, username="jane", role="customer"),
            UserModel(id=OTHER_CUSTOMER_ID, username="john", role="customer"),
            UserModel(id=PRODUCTION_ID, username="print-room", role="production"),
        ])
        session.add_all([
            CatalogSetModel(id=1, name="Robot Arm Kit", category="robotics", base_price=Decimal("49.00")),
            CatalogSetModel(id=2, name="Circuit Starter", category="electronics", base_price=Decimal("19.00")),
            CatalogSetModel(id=3, name="Solar Car", category="energy"),
            CatalogSetModel(id=4, name="Hidden Prototype", category="robotics", admin_visible=False),
        ])
        session.flush()
        session.add_all([
            ProviderSetModel(id=APPROVED, provider_id=PROVIDER_ID, set_id=1, price=Decimal("12.50"),
                             available_quantity=10, admin_status="approved"),
            ProviderSetModel(id=APPROVED_CHEAP, provider_id=PROVIDER_ID, set_id=2, price=Decimal("3.99"),
                             available_quantity=5, admin_status="approved"),
            ProviderSetModel(id=SCARCE, provider_id=PROVIDER_ID, set_id=3, price=Decimal("7.00"),
                             available_quantity=3, admin_status="approved"),
            ProviderSetModel(id=OTHER_PROVIDERS, provider_id=OTHER_PROVIDER_ID, set_id=1, price=Decimal("20.00"),
                             available_quantity=10, admin_status="approved"),
            ProviderSetModel(id=PENDING, provider_id=PROVIDER_ID, set_id=4, price=Decimal("5.00"),
                             available_quantity=10, admin_status="pending"),
            ProviderSetModel(id=INACTIVE, provider_id=OTHER_PROVIDER_ID, set_id=2, price=Decimal("5.00"),
                             available_quantity=10, admin_status="approved", is_active=False),
        ])
        session.commit()
    finally:
        session.close()


@pytest.fixture
def notifications():
    return RecordingNotifications()


@pytest.fixture
def customer():
    return Identity(user_id=CUSTOMER_ID, role=Role.CUSTOMER)


@pytest.fixture
def other_customer():
    return Identity(user_id=OTHER_CUSTOMER_ID, role=Role.CUSTOMER)


@pytest.fixture
def provider():
    return Identity(user_id=PROVIDER_ID, role=Role.PROVIDER)


@pytest.fixture
def other_provider():
    return Identity(user_id=OTHER_PROVIDER_ID, role=Role.PROVIDER)


@pytest.fixture
def admin():
    return Identity(user_id=ADMIN_ID, role=Role.ADMIN)


@pytest.fixture
def production():
    return Identity(user_id=PRODUCTION_ID, role=Role.PRODUCTION)


def listing_quantity(session_factory, listing_id: int) -> int:
    session = session_factory()
    try:
        return session.get(ProviderSetModel, listing_id).available_quantity
    finally:
        session.close()


def count_rows(session_factory, model) -> int:
    session = session_factory()
    try:
        return session.query(model).count()
    finally:
        session.close()


def order_and_line_counts(session_factory) -> tuple:
    return count_rows(session_factory, OrderModel), count_rows(session_factory, OrderItemModel)


@pytest.fixture
def app(session_factory):
    app = create_app(session_factory=session_factory, init_database=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth():
    resolver = IdentityResolver()

    def headers(user_id: int, role: Role | str) -> dict:
        return {"Authorization": f"Bearer {resolver.issue_token(user_id, role)}"}

    return headers
