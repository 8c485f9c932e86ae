"""
Pytest configuration and fixtures for backend tests.
"""

import os

# Configure before any application module reads settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SEED_DEMO_DATA"] = "false"
os.environ["SESSION_STORE_BACKEND"] = "memory"
os.environ["ENVIRONMENT"] = "test"

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from rest_api.main import app
from rest_api.models import Base, MenuItem, Order, User
from rest_api.services.domain import OrderService
from shared.config.constants import MenuCategory, Roles
from shared.infrastructure.db import get_db
from shared.infrastructure.events import get_event_circuit_breaker
from shared.infrastructure.session_store import (
    ClientSessionStore,
    InMemoryKeyValueStore,
    get_session_store,
)
from shared.security.auth import issue_user_token
from shared.security.password import hash_password
from shared.security.rate_limit import limiter
from shared.utils.schemas import OrderCreate


# SQLite in-memory database shared by every connection of a test
SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SESSION_ID = "test-session-0001"
TEST_PASSWORD = "testpass123"


@pytest.fixture(scope="function")
def db_session():
    """Fresh schema and session per test."""
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_store():
    return ClientSessionStore(InMemoryKeyValueStore())


@pytest.fixture
def fake_redis():
    """Async Redis stand-in capturing every publish."""
    redis = AsyncMock()
    redis.publish.return_value = 1
    return redis


@pytest.fixture(scope="function")
def client(db_session, session_store, fake_redis, monkeypatch):
    """
    Test client with the database, session store and Redis replaced.
    Rate limiting is disabled so tests can hammer endpoints.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_store] = lambda: session_store

    monkeypatch.setattr(
        "rest_api.services.events.order_events.get_redis_client",
        AsyncMock(return_value=fake_redis),
    )
    monkeypatch.setattr("rest_api.routers.public.health.ping_redis", lambda: True)
    get_event_circuit_breaker().reset()
    limiter.enabled = False

    with TestClient(app) as test_client:
        yield test_client

    limiter.enabled = True
    app.dependency_overrides.clear()


# =============================================================================
# Users
# =============================================================================


def _make_user(db_session, name: str, email: str, role: str, **fields) -> User:
    user = User(
        name=name,
        email=email,
        password=hash_password(TEST_PASSWORD, rounds=4),
        role=role,
        **fields,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def headers_for(user: User) -> dict[str, str]:
    token = issue_user_token(user.id, user.email, user.name, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def customer(db_session):
    return _make_user(
        db_session,
        "Casey Customer",
        "casey@test.com",
        Roles.CUSTOMER,
        allergies=["Gluten"],
        dietary_plan="",
        health_goals=["High Protein"],
        health_profile_created=True,
    )


@pytest.fixture
def kitchen_user(db_session):
    return _make_user(db_session, "Kit Chen", "kitchen@test.com", Roles.KITCHEN_STAFF)


@pytest.fixture
def manager_user(db_session):
    return _make_user(db_session, "Max Manager", "manager@test.com", Roles.MANAGER)


@pytest.fixture
def admin_user(db_session):
    return _make_user(db_session, "Ada Admin", "admin@test.com", Roles.ADMIN)


@pytest.fixture
def customer_headers(customer):
    return headers_for(customer)


@pytest.fixture
def kitchen_headers(kitchen_user):
    return headers_for(kitchen_user)


@pytest.fixture
def manager_headers(manager_user):
    return headers_for(manager_user)


@pytest.fixture
def admin_headers(admin_user):
    return headers_for(admin_user)


@pytest.fixture
def cart_headers():
    return {"X-Session-ID": SESSION_ID}


# =============================================================================
# Menu and orders
# =============================================================================


@pytest.fixture
def menu_items(db_session):
    """Three available dishes and one that is switched off."""
    items = {
        "burger": MenuItem(
            name="Protein Burger",
            description="Double patty on a brioche bun",
            price=Decimal("10.00"),
            category=MenuCategory.MAIN_COURSE,
            ingredients=["beef", "bun", "cheese"],
            allergens=["Gluten", "Dairy"],
            preparation_time=15,
            nutrition_per_serving={"calories": 700, "protein": 40, "carbs": 45, "fat": 35, "sodium": 900, "fiber": 2},
        ),
        "salad": MenuItem(
            name="Green Salad",
            description="Leaves, cucumber, lemon dressing",
            price=Decimal("7.50"),
            category=MenuCategory.APPETIZERS,
            ingredients=["lettuce", "cucumber", "lemon"],
            allergens=[],
            preparation_time=5,
            nutrition_per_serving={"calories": 150, "protein": 4, "carbs": 10, "fat": 9, "sodium": 200, "fiber": 5},
        ),
        "salmon": MenuItem(
            name="Seared Salmon",
            description="With greens",
            price=Decimal("18.00"),
            category=MenuCategory.MAIN_COURSE,
            ingredients=["salmon", "spinach"],
            allergens=["Fish"],
            preparation_time=20,
            nutrition_per_serving={"calories": 480, "protein": 36, "carbs": 8, "fat": 26, "sodium": 450, "fiber": 3},
        ),
        "soup": MenuItem(
            name="Soup of the Day",
            description="Ask your server",
            price=Decimal("6.00"),
            category=MenuCategory.APPETIZERS,
            is_available=False,
            preparation_time=5,
            nutrition_per_serving={},
        ),
    }
    db_session.add_all(items.values())
    db_session.commit()
    for item in items.values():
        db_session.refresh(item)
    return items


@pytest.fixture
def make_order(db_session, menu_items):
    """Factory placing an order through OrderService."""

    def _make(table_number: int = 5, lines=None, ctx=None) -> Order:
        lines = lines or [{"menuItemId": menu_items["salad"].id, "quantity": 1}]
        data = OrderCreate.model_validate({"tableNumber": table_number, "items": lines})
        return OrderService(db_session).create_order(data, ctx)

    return _make
